#!/usr/bin/env python3
"""
Settings loader for adocblog.
Supports configuration from adocblog.yml, adocblog.yaml, or adocblog.json files.
"""

import os
import sys
import json
import yaml
from typing import Dict, Any, Optional


class BlogSettings:
    """Load and manage adocblog configuration settings."""

    # Default configuration
    DEFAULT_SETTINGS = {
        'content': 'content',
        'output': 'build',
        'templates': 'templates',
        'site_title': 'My Blog',
        'site_tagline': None,
        'log_dir': None,
    }

    # Config file names to look for (in order of preference)
    CONFIG_FILES = ['adocblog.yml', 'adocblog.yaml', 'adocblog.json']

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
        Load settings from configuration file if it exists.

        Returns:
            Dictionary of configuration settings
        """
        config_file = self._find_config_file()

        if config_file:
            self.config_file_path = config_file
            try:
                loaded_settings = self._load_config_file(config_file)
                if loaded_settings:
                    # Merge with defaults, giving preference to loaded settings
                    self.settings.update(loaded_settings)
                    print(f"Loaded configuration from: {os.path.relpath(config_file)}", file=sys.stderr)
            except (ValueError, IOError, OSError) as e:
                print(f"Warning: Failed to load config file {config_file}: {e}", file=sys.stderr)

        return self.settings.copy()

    def _find_config_file(self) -> Optional[str]:
        """
        Find the first available configuration file.

        Returns:
            Path to config file or None if not found
        """
        for filename in self.CONFIG_FILES:
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
                    data = yaml.safe_load(f) or {}
                elif file_ext == '.json':
                    data = json.load(f) or {}
                else:
                    raise ValueError(f"Unsupported config file format: {file_ext}")
        except PermissionError:
            raise PermissionError(f"Permission denied reading configuration file: {config_path}")
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file {config_path}: {e}")
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in configuration file {config_path}: {e}")

        if not isinstance(data, dict):
            raise ValueError(f"Configuration file must contain a mapping: {config_path}")
        return data

    def resolve_path(self, key: str) -> Optional[str]:
        """Resolve a directory setting against the config directory."""
        value = self.settings.get(key)
        if not value:
            return None
        value = os.path.expanduser(value)
        if not os.path.isabs(value):
            value = os.path.join(self.config_dir, value)
        return os.path.normpath(value)
