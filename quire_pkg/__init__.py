"""
Quire - a content pipeline for PHP-backed sites.

Quire reads markdown posts and pages, generates resized image variants for
every configured theme, renders PHP data files with Jinja2 templates and
uploads the result over FTP.
"""

__version__ = "1.0.0"

from .core import Quire
from .images import ImageBatchProcessor
from .transform import process_image

__all__ = ['Quire', 'ImageBatchProcessor', 'process_image']
