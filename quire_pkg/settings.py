#!/usr/bin/env python3
"""
Settings loader for Quire.
Reads the content configuration (content-config.yaml) and the FTP
configuration (ftp-config.yaml) from the working directory.
"""

import os
import json
import yaml
from dataclasses import dataclass
from typing import Dict, Any, Optional

from .errors import ConfigError
from .models import FIT_MODES, IMAGE_CATEGORIES, ImageResolution


@dataclass(frozen=True)
class ContentConfig:
    contents_folder: str
    pages_folder: str
    posts_folder: str
    public_folder: str
    theme_image_resolutions: Dict[str, Dict[str, ImageResolution]]


@dataclass(frozen=True)
class FtpConfig:
    host: str
    user: str
    password: str
    secure: bool
    upload_path: str


def parse_resolution(data: Dict[str, Any], label: str) -> ImageResolution:
    """
    Build an ImageResolution from its config mapping.

    Args:
        data: Mapping with width, aspectRatio, quality and fit keys
        label: Location of the mapping, used in error messages

    Returns:
        The validated resolution policy
    """
    if not isinstance(data, dict):
        raise ConfigError(f"{label} must be a mapping")

    fit = data.get('fit')
    if fit is not None and fit not in FIT_MODES:
        raise ConfigError(f"{label}: unsupported fit '{fit}' (expected one of {', '.join(FIT_MODES)})")

    aspect_ratio = data.get('aspectRatio')
    if isinstance(aspect_ratio, int) and not isinstance(aspect_ratio, bool):
        # YAML 1.1 reads an unquoted W:H as a base-60 integer
        aspect_ratio = f"{aspect_ratio // 60}:{aspect_ratio % 60}"
    if aspect_ratio is not None:
        parts = str(aspect_ratio).split(':')
        if len(parts) != 2 or not all(p.strip().isdigit() and int(p) > 0 for p in parts):
            raise ConfigError(f"{label}: invalid aspectRatio '{aspect_ratio}' (expected W:H)")

    try:
        width = int(data['width']) if data.get('width') is not None else None
        quality = int(data['quality']) if data.get('quality') is not None else None
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{label}: width and quality must be integers ({e})")

    return ImageResolution(width=width, aspect_ratio=aspect_ratio, quality=quality, fit=fit)


class QuireSettings:
    """Load and manage Quire configuration settings."""

    # Default content configuration
    DEFAULT_SETTINGS = {
        'contentsFolder': 'content',
        'pagesFolder': 'pages',
        'postsFolder': 'posts',
        'publicFolder': 'public',
        'themeImageResolutions': {},
    }

    # Config file names to look for (in order of preference)
    CONFIG_FILES = ['content-config.yaml', 'content-config.yml', 'content-config.json']
    FTP_CONFIG_FILES = ['ftp-config.yaml', 'ftp-config.yml', 'ftp-config.json']

    def __init__(self, config_dir: str = None):
        """
        Initialize settings loader.

        Args:
            config_dir: Directory to look for config files. Defaults to current directory.
        """
        self.config_dir = config_dir or os.getcwd()
        self.settings = self.DEFAULT_SETTINGS.copy()
        self.config_file_path = None

    def load_settings(self) -> Dict[str, Any]:
        """
        Load the content configuration file.

        Returns:
            Dictionary of configuration settings
        """
        config_file = self._find_config_file(self.CONFIG_FILES)
        if not config_file:
            raise ConfigError(f"No content configuration found in {self.config_dir} "
                              f"(expected one of {', '.join(self.CONFIG_FILES)})")

        self.config_file_path = config_file
        loaded_settings = self._load_config_file(config_file)
        if not isinstance(loaded_settings, dict):
            raise ConfigError(f"Configuration file {config_file} must contain a mapping")
        self.settings.update(loaded_settings)
        return self.settings.copy()

    def load_content_config(self) -> ContentConfig:
        settings = self.load_settings()

        themes = settings.get('themeImageResolutions') or {}
        if not isinstance(themes, dict):
            raise ConfigError("themeImageResolutions must map theme names to resolutions")

        resolutions = {}
        for theme, bundle in themes.items():
            bundle = bundle or {}
            if not isinstance(bundle, dict):
                raise ConfigError(f"themeImageResolutions.{theme} must be a mapping")
            resolutions[str(theme)] = {
                category: parse_resolution(bundle[category], f"themeImageResolutions.{theme}.{category}")
                for category in IMAGE_CATEGORIES
                if bundle.get(category)
            }

        return ContentConfig(
            contents_folder=str(settings['contentsFolder']),
            pages_folder=str(settings['pagesFolder']),
            posts_folder=str(settings['postsFolder']),
            public_folder=str(settings['publicFolder']),
            theme_image_resolutions=resolutions,
        )

    def load_ftp_config(self) -> FtpConfig:
        config_file = self._find_config_file(self.FTP_CONFIG_FILES)
        if not config_file:
            raise ConfigError(f"No FTP configuration found in {self.config_dir} "
                              f"(expected one of {', '.join(self.FTP_CONFIG_FILES)})")

        data = self._load_config_file(config_file)
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration file {config_file} must contain a mapping")

        missing = [key for key in ('host', 'user', 'password') if key not in data]
        if missing:
            raise ConfigError(f"FTP configuration {config_file} is missing: {', '.join(missing)}")

        return FtpConfig(
            host=str(data['host']),
            user=str(data['user']),
            password=str(data['password']),
            secure=bool(data.get('secure', False)),
            upload_path=str(data.get('uploadPath') or '/'),
        )

    def _find_config_file(self, candidates) -> Optional[str]:
        """
        Find the first available configuration file.

        Returns:
            Path to config file or None if not found
        """
        for filename in candidates:
            config_path = os.path.join(self.config_dir, filename)
            if os.path.exists(config_path):
                return config_path
        return None

    def _load_config_file(self, config_path: str) -> Dict[str, Any]:
        """
        Load configuration from a file.

        Args:
            config_path: Path to the configuration file

        Returns:
            Dictionary of configuration settings
        """
        try:
            file_ext = os.path.splitext(config_path)[1].lower()

            with open(config_path, 'r', encoding='utf-8') as f:
                if file_ext in ['.yml', '.yaml']:
                    return yaml.safe_load(f) or {}
                elif file_ext == '.json':
                    return json.load(f) or {}
                else:
                    raise ConfigError(f"Unsupported config file format: {file_ext}")
        except PermissionError:
            raise ConfigError(f"Permission denied reading configuration file: {config_path}")
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in configuration file {config_path}: {e}")
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in configuration file {config_path}: {e}")
        except (IOError, OSError) as e:
            raise ConfigError(f"Error reading configuration file {config_path}: {e}")

    def create_sample_config(self) -> list:
        """
        Create sample content and FTP configuration files.

        Returns:
            Paths of the files that were written
        """
        samples = {
            'content-config.yaml': (
                "# Quire content configuration\n"
                "contentsFolder: content\n"
                "pagesFolder: pages\n"
                "postsFolder: posts\n"
                "publicFolder: public\n\n"
                "# Image derivatives per theme\n"
                "themeImageResolutions:\n"
                "  default:\n"
                "    postThumbnail:\n"
                "      width: 600\n"
                "      aspectRatio: \"16:9\"\n"
                "      quality: 80\n"
                "    contentImage:\n"
                "      width: 1200\n"
                "      quality: 85\n"
                "      fit: inside\n"
                "    galleryImage:\n"
                "      width: 1600\n"
                "    galleryThumbnail:\n"
                "      width: 300\n"
                "      aspectRatio: \"1:1\"\n"
                "      fit: cover\n"
            ),
            'ftp-config.yaml': (
                "# Quire FTP deployment settings\n"
                "host: ftp.example.com\n"
                "user: username\n"
                "password: secret\n"
                "secure: true\n"
                "uploadPath: /public_html/content\n"
            ),
        }

        written = []
        for filename, body in samples.items():
            config_path = os.path.join(self.config_dir, filename)
            if os.path.exists(config_path):
                print(f"Configuration already exists: {filename}")
                continue
            try:
                with open(config_path, 'w', encoding='utf-8') as f:
                    f.write(body)
            except (IOError, OSError) as e:
                raise ConfigError(f"Error writing configuration file {config_path}: {e}")
            written.append(config_path)
        return written
