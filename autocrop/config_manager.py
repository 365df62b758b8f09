#!/usr/bin/env python3
"""
Configuration Manager Module for Autocrop

This module provides a centralized configuration management system for the
autocrop application. It handles loading, merging, and accessing
configuration settings from YAML files with support for defaults and overrides.

Key Features:
- YAML-based configuration files
- Default configuration with user overrides
- Section-based configuration access

Architecture:
- Deep merge for configuration overrides
- Section-based organization for different components
- Graceful fallback to defaults for missing or invalid files

Dependencies:
- PyYAML for YAML file parsing
- Logging for configuration events
"""

import copy
import os
import yaml
import logging
from typing import Dict, Any, Optional

from .utils.constants import (
    DEFAULT_AGGREGATION_WINDOW_S,
    DEFAULT_BIT_DEPTH,
    DEFAULT_CROP_FRACTION,
    DEFAULT_CROP_SUBDIR,
    DEFAULT_OUTPUT_DIR,
)


class ConfigManager:
    """
    Manages configuration settings for the autocrop system.

    Settings are loaded from a YAML file and deep-merged over built-in
    defaults, so a partial file only needs the values it changes. A missing
    or unreadable file leaves the defaults in place.
    """

    def __init__(self, config_path: Optional[str] = None):
        """Initialize the configuration manager.

        Args:
            config_path: Optional path to configuration file. If None, uses default.
        """
        self.config_path = config_path or "config.yaml"
        self.config: Dict[str, Any] = {}
        self.logger = logging.getLogger(__name__)
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from file with defaults."""
        default_config = self._get_default_config()

        user_config = {}
        if os.path.exists(self.config_path):
            try:
                with open(self.config_path, 'r', encoding='utf-8') as file:
                    user_config = yaml.safe_load(file) or {}
                if not isinstance(user_config, dict):
                    self.logger.warning(f"Configuration in {self.config_path} is not a mapping, ignoring it")
                    user_config = {}
                else:
                    self.logger.info(f"Configuration loaded from {self.config_path}")
            except (OSError, yaml.YAMLError) as e:
                self.logger.warning(f"Failed to load configuration from {self.config_path}: {e}")
                self.logger.info("Using default configuration")
        else:
            self.logger.warning(f"Configuration file {self.config_path} not found. Using defaults.")

        self.config = self._deep_merge(default_config, user_config)

    def _get_default_config(self) -> Dict[str, Any]:
        """Get the default configuration.

        Returns:
            Dict[str, Any]: Default configuration dictionary
        """
        return {
            'autocrop': {
                'enabled': True,
                'crop_fraction': DEFAULT_CROP_FRACTION,                # 0..1 of each axis
                'aggregation_window_s': DEFAULT_AGGREGATION_WINDOW_S,  # 0..120 seconds
            },
            'output': {
                'crop_subdir': DEFAULT_CROP_SUBDIR,  # Written next to the source frame
                'output_dir': DEFAULT_OUTPUT_DIR,    # For frames without a source path
                'temp_dir': None,                    # None = system temp directory
                'overwrite': True,
            },
            'input': {
                'patterns': ['*.fits', '*.fit'],
                'poll_interval_s': 2.0,
                'bit_depth': DEFAULT_BIT_DEPTH,
            },
            'logging': {
                'level': 'INFO',
                'log_to_file': False,
                'log_file': 'autocrop.log',
            },
        }

    def _deep_merge(self, default: Dict[str, Any], user: Dict[str, Any]) -> Dict[str, Any]:
        """Deeply merge user configuration with default settings.

        If a key exists in both, the user's value is used; nested
        dictionaries are merged recursively.
        """
        result = copy.deepcopy(default)

        for key, value in user.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get a configuration value by dot notation.

        Args:
            key_path: Path to the value (e.g., 'autocrop.crop_fraction')
            default: Value to return if the key is not found.

        Returns:
            Any: The value found or the default value.
        """
        keys = key_path.split('.')
        value = self.config

        try:
            for key in keys:
                value = value[key]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key_path: str, value: Any) -> None:
        """Set a configuration value by dot notation, creating sections as needed."""
        keys = key_path.split('.')
        section = self.config
        for key in keys[:-1]:
            if not isinstance(section.get(key), dict):
                section[key] = {}
            section = section[key]
        section[keys[-1]] = value

    def get_autocrop_config(self) -> Dict[str, Any]:
        """Get the crop/accumulation configuration."""
        return self.config.get('autocrop', {})

    def get_output_config(self) -> Dict[str, Any]:
        """Get the output (persistence) configuration."""
        return self.config.get('output', {})

    def get_input_config(self) -> Dict[str, Any]:
        """Get the input (frame source) configuration."""
        return self.config.get('input', {})

    def get_logging_config(self) -> Dict[str, Any]:
        """Get the logging configuration."""
        return self.config.get('logging', {})

    def reload(self) -> None:
        """Reload the configuration from the file."""
        self.config = {}
        self._load_config()

    def save_default_config(self, path: Optional[str] = None) -> None:
        """Save the default configuration to a file.

        If no path is provided, it saves next to the active config file
        with a ``.default`` suffix.

        Args:
            path: Optional path to save the default configuration.
        """
        if path is None:
            path = f"{self.config_path}.default"

        try:
            with open(path, 'w', encoding='utf-8') as file:
                yaml.dump(self._get_default_config(), file, default_flow_style=False, allow_unicode=True)
            self.logger.info(f"Default configuration saved to {path}")
        except OSError as e:
            self.logger.error(f"Error saving default configuration: {e}")
