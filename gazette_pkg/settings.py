#!/usr/bin/env python3
"""
Settings loader for Gazette.
Supports configuration from _gazette.yml, _gazette.yaml, or _gazette.json files.
"""

import os
import copy
import json
import logging
import yaml
from typing import Dict, Any, List, Optional

from .collection import Collection
from .errors import ConfigurationError
from .files import cleanup_path, find_project_file
from .frontmatter import PartialFrontmatter

logger = logging.getLogger(__name__)

LAYOUTS_DIR = '_layouts'
INCLUDES_DIR = '_includes'
DATA_DIR = '_data'
SASS_DIR = '_sass'


class GazetteSettings:
    """Load and manage Gazette configuration settings."""

    # Default configuration
    DEFAULT_SETTINGS = {
        'source': './',
        'destination': './_site',
        'include_drafts': False,
        'ignore': [],
        'template_extensions': ['md', 'wiki', 'html'],
        'default': {},
        'site': {
            'title': None,
            'description': None,
            'base_url': None,
            'data': {},
        },
        'pages': {
            'default': {},
        },
        'posts': {
            'title': None,
            'description': None,
            'dir': 'posts',
            'drafts_dir': None,
            'order': 'desc',
            'rss': None,
            'jsonfeed': None,
            'publish_date_in_filename': True,
            'default': {},
        },
    }

    # Config file names to look for (in order of preference)
    CONFIG_FILES = ['_gazette.yml', '_gazette.yaml', '_gazette.json']

    def __init__(self, config_dir: str = None):
        """
        Initialize settings loader.

        Args:
            config_dir: Directory to start looking for config files. Defaults to current directory.
        """
        self.config_dir = config_dir or os.getcwd()
        self.settings = copy.deepcopy(self.DEFAULT_SETTINGS)
        self.config_file_path = None
        self.root = os.path.abspath(self.config_dir)

    def load_settings(self, config_file: Optional[str] = None) -> Dict[str, Any]:
        """
        Load settings from a configuration file if one exists.

        Args:
            config_file: Explicit configuration file; searched for when omitted

        Returns:
            Dictionary of configuration settings
        """
        config_file = config_file or self._find_config_file()

        if config_file:
            self.config_file_path = config_file
            self.root = os.path.dirname(os.path.abspath(config_file))
            loaded_settings = self._load_config_file(config_file)
            if loaded_settings:
                self._validate(loaded_settings, config_file)
                self.settings = self._merge_settings(self.settings, loaded_settings)
            logger.debug(f"Loaded configuration from: {config_file}")
        else:
            logger.warning("No _gazette.yml file found, using default configuration.")

        return copy.deepcopy(self.settings)

    def _find_config_file(self) -> Optional[str]:
        """
        Find the first available configuration file, searching parent directories.

        Returns:
            Path to config file or None if not found
        """
        for filename in self.CONFIG_FILES:
            config_path = find_project_file(self.config_dir, filename)
            if config_path:
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
        file_ext = os.path.splitext(config_path)[1].lower()
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                if file_ext in ['.yml', '.yaml']:
                    loaded = yaml.safe_load(f) or {}
                elif file_ext == '.json':
                    loaded = json.load(f) or {}
                else:
                    raise ConfigurationError(f"Unsupported config file format: {file_ext}", config_path)
        except FileNotFoundError:
            raise ConfigurationError("Configuration file not found", config_path)
        except PermissionError:
            raise ConfigurationError("Permission denied reading configuration file", config_path)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file: {e}", config_path)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in configuration file: {e}", config_path)
        except (IOError, OSError) as e:
            raise ConfigurationError(f"Error reading configuration file: {e}", config_path)

        if not isinstance(loaded, dict):
            raise ConfigurationError("Configuration must be a mapping", config_path)
        return loaded

    def _validate(self, loaded: Dict[str, Any], source: str) -> None:
        unknown = set(loaded) - set(self.DEFAULT_SETTINGS)
        if unknown:
            raise ConfigurationError(f"Unknown setting(s): {', '.join(sorted(unknown))}", source)
        for section in ('site', 'pages', 'posts'):
            value = loaded.get(section)
            if value is None:
                continue
            if not isinstance(value, dict):
                raise ConfigurationError(f"'{section}' must be a mapping", source)
            unknown = set(value) - set(self.DEFAULT_SETTINGS[section])
            if unknown:
                raise ConfigurationError(
                    f"Unknown {section} setting(s): {', '.join(sorted(unknown))}", source)
        for key in ('ignore', 'template_extensions'):
            if key in loaded and not isinstance(loaded[key], list):
                raise ConfigurationError(f"'{key}' must be a list", source)

    def _merge_settings(self, defaults: Dict[str, Any], loaded: Dict[str, Any]) -> Dict[str, Any]:
        merged = copy.deepcopy(defaults)
        for key, value in loaded.items():
            if value is None:
                continue
            if isinstance(merged.get(key), dict) and key != 'default' and isinstance(value, dict):
                merged[key].update(value)
            else:
                merged[key] = value
        return merged

    def create_sample_config(self, file_format: str = 'yml') -> str:
        """
        Create a sample configuration file.

        Args:
            file_format: Format for config file ('yml', 'yaml', or 'json')

        Returns:
            Path to created sample config file
        """
        sample_config = {
            'source': './',
            'destination': './_site',
            'ignore': ['README.md'],
            'site': {
                'title': 'My Gazette Site',
                'description': 'Built with Gazette',
                'base_url': 'https://example.com',
            },
            'posts': {
                'dir': 'posts',
                'drafts_dir': '_drafts',
                'order': 'desc',
                'rss': 'rss.xml',
                'jsonfeed': 'feed.json',
                'default': {
                    'layout': 'post.html',
                    'permalink': '/{{year}}/{{month}}/{{slug}}/',
                },
            },
        }

        filename = f'_gazette.{file_format}'
        config_path = os.path.join(self.config_dir, filename)

        try:
            with open(config_path, 'w', encoding='utf-8') as f:
                if file_format in ['yml', 'yaml']:
                    f.write("# Gazette Configuration File\n")
                    f.write("# Configure your site, pages and posts here\n\n")
                    yaml.safe_dump(sample_config, f, default_flow_style=False, sort_keys=False)
                elif file_format == 'json':
                    json.dump(sample_config, f, indent=2)
                else:
                    raise ConfigurationError(f"Unsupported config file format: {file_format}")
        except PermissionError:
            raise ConfigurationError("Permission denied creating configuration file", config_path)
        except (IOError, OSError) as e:
            raise ConfigurationError(f"Error writing configuration file: {e}", config_path)

        return config_path

    def merge_with_args(self, args_dict: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge configuration settings with command-line arguments.
        Command-line arguments take precedence over config file settings.

        Args:
            args_dict: Dictionary of command-line arguments

        Returns:
            Merged configuration dictionary
        """
        merged = copy.deepcopy(self.settings)

        # Override with non-None command line arguments
        for key, value in args_dict.items():
            if value is not None and key in merged:
                merged[key] = value

        return merged

    def build_config(self, settings: Dict[str, Any]) -> 'Config':
        """Resolve paths and collections from merged settings."""
        return Config.from_settings(settings, self.root, self.config_file_path)


class Config:
    """Everything a build needs, with paths resolved against the project root."""

    def __init__(self, source, destination, include_drafts, collections, site,
                 template_extensions, ignore):
        self.source = source
        self.destination = destination
        self.include_drafts = include_drafts
        self.pages = collections['pages']
        self.posts = collections['posts']
        self.site = site
        self.template_extensions = template_extensions
        self.ignore = ignore
        self.layouts_dir = os.path.join(source, LAYOUTS_DIR)
        self.includes_dir = os.path.join(source, INCLUDES_DIR)
        self.data_dir = os.path.join(source, DATA_DIR)

    @classmethod
    def from_settings(cls, settings: Dict[str, Any], root: str,
                      config_file: Optional[str] = None) -> 'Config':
        include_drafts = bool(settings['include_drafts'])
        if include_drafts:
            logger.debug("Draft mode enabled")

        source_rel = cleanup_path(str(settings['source']))
        dest_rel = cleanup_path(str(settings['destination']))

        ignore: List[str] = [str(line) for line in settings['ignore']]
        ignore.extend(f"/{name}" for name in (LAYOUTS_DIR, INCLUDES_DIR, DATA_DIR, SASS_DIR))

        source = os.path.abspath(os.path.join(root, os.path.expanduser(source_rel)))
        destination = os.path.abspath(os.path.join(root, os.path.expanduser(dest_rel)))

        rel_dest = os.path.relpath(destination, source)
        if rel_dest != '.' and not rel_dest.startswith('..'):
            ignore.append(f"/{rel_dest.replace(os.sep, '/')}")

        common_default = PartialFrontmatter.from_dict(settings['default'], config_file or 'default')
        site = dict(settings['site'])
        template_extensions = [str(ext).lstrip('.') for ext in settings['template_extensions']]

        posts_settings = dict(settings['posts'])
        collections = {
            'pages': Collection.from_page_config(
                settings['pages'], site, posts_settings, common_default, source, ignore,
                template_extensions),
            'posts': Collection.from_post_config(
                posts_settings, site, include_drafts, common_default, source, ignore,
                template_extensions),
        }
        return cls(source, destination, include_drafts, collections, site,
                   template_extensions, ignore)
