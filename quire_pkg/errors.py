"""
Exception types raised by the Quire build pipeline.
"""


class QuireError(Exception):
    """Base class for all Quire errors."""


class ConfigError(QuireError):
    """A configuration file is missing, unreadable or invalid."""


class DecodeError(QuireError):
    """Source bytes could not be decoded as an image."""

    def __init__(self, message, source=None):
        super().__init__(message)
        self.source = source


class MissingSourceError(QuireError):
    """An image reference does not resolve to an existing file."""

    def __init__(self, reference, path, theme=None, category=None):
        self.reference = reference
        self.path = path
        self.theme = theme
        self.category = category
        context = ''
        if theme:
            context = f" (theme '{theme}', {category})"
        super().__init__(f"Image source not found for {reference}: {path}{context}")


class UnsafePathError(QuireError):
    """An image reference resolves outside the staging directory."""

    def __init__(self, reference):
        self.reference = reference
        super().__init__(f"Path traversal attempt detected: {reference} resolves outside the staging directory")


class PublishError(QuireError):
    """Uploading the staging directory failed."""
