"""YAML configuration loading and validation for the node merger.

This module handles loading and saving MergeConfig from YAML files.

Configuration file structure (every field optional):
    hash_key: "_.hash"
    old_hash_key: "_.old_hash"
    uuid_key: "_.uuid"
    copy_inputs: true
    recalculate_hashes: true
"""

import logging
import os
from typing import Any, Dict

import yaml

from .errors import MergeConfigError, MergeConfigFilesystemError
from .models import MergeConfig

logger = logging.getLogger(__name__)


class MergeConfigLoader:
    """Handles merge configuration file loading, validation, and saving."""

    KEY_FIELDS = ('hash_key', 'old_hash_key', 'uuid_key')

    FLAG_FIELDS = ('copy_inputs', 'recalculate_hashes')

    @classmethod
    def load(cls, config_path: str) -> MergeConfig:
        """Load and parse merge configuration from a YAML file.

        An empty file yields the default configuration.

        Args:
            config_path: Path to the YAML configuration file

        Returns:
            MergeConfig object with parsed configuration

        Raises:
            MergeConfigFilesystemError: If file cannot be read
            MergeConfigError: If configuration is invalid or malformed
        """
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            raise MergeConfigFilesystemError(
                config_path,
                'read',
                'Merge config file not found'
            )
        except PermissionError:
            raise MergeConfigFilesystemError(
                config_path,
                'read',
                'Permission denied'
            )
        except OSError as e:
            raise MergeConfigFilesystemError(
                config_path,
                'read',
                str(e)
            )

        try:
            config_dict = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise MergeConfigError(
                f"Invalid YAML syntax: {str(e)}"
            )

        if config_dict is None:
            logger.debug(f"Merge configuration {config_path} is empty, using defaults")
            return MergeConfig()

        if not isinstance(config_dict, dict):
            raise MergeConfigError(
                f"Merge config must be a YAML mapping of option names, got {type(config_dict).__name__}"
            )

        config = cls.from_dict(config_dict)
        logger.info(f"Loaded merge configuration from {config_path}")
        return config

    @classmethod
    def save(cls, config_path: str, config: MergeConfig) -> None:
        """Save merge configuration to a YAML file.

        Args:
            config_path: Path to the YAML configuration file
            config: MergeConfig object to save

        Raises:
            MergeConfigFilesystemError: If file cannot be written
        """
        yaml_str = yaml.safe_dump(
            cls.to_dict(config),
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False
        )

        config_dir = os.path.dirname(config_path)
        if config_dir:
            try:
                os.makedirs(config_dir, exist_ok=True)
            except OSError as e:
                raise MergeConfigFilesystemError(
                    config_dir,
                    'create_directory',
                    str(e)
                )

        try:
            with open(config_path, 'w', encoding='utf-8') as f:
                f.write(yaml_str)
        except PermissionError:
            raise MergeConfigFilesystemError(
                config_path,
                'write',
                'Permission denied'
            )
        except OSError as e:
            raise MergeConfigFilesystemError(
                config_path,
                'write',
                str(e)
            )

    @classmethod
    def to_dict(cls, config: MergeConfig) -> Dict[str, Any]:
        """Convert a MergeConfig to a plain dictionary."""
        return {
            'hash_key': config.hash_key,
            'old_hash_key': config.old_hash_key,
            'uuid_key': config.uuid_key,
            'copy_inputs': config.copy_inputs,
            'recalculate_hashes': config.recalculate_hashes,
        }

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> MergeConfig:
        """Parse and validate a configuration dictionary.

        Args:
            config_dict: Raw configuration dictionary from YAML

        Returns:
            Validated MergeConfig object

        Raises:
            MergeConfigError: If configuration is invalid
        """
        known_fields = set(cls.KEY_FIELDS) | set(cls.FLAG_FIELDS)
        unknown_fields = set(config_dict.keys()) - known_fields
        if unknown_fields:
            raise MergeConfigError(
                f"Unknown fields: {', '.join(sorted(str(f) for f in unknown_fields))}"
            )

        defaults = MergeConfig()
        values: Dict[str, Any] = {}

        for field_name in cls.KEY_FIELDS:
            value = config_dict.get(field_name, getattr(defaults, field_name))
            if not isinstance(value, str):
                raise MergeConfigError(
                    f"Field '{field_name}' must be a string, got {type(value).__name__}",
                    field_name
                )
            if not value.strip():
                raise MergeConfigError(
                    f"Field '{field_name}' cannot be empty",
                    field_name
                )
            values[field_name] = value

        for field_name in cls.FLAG_FIELDS:
            value = config_dict.get(field_name, getattr(defaults, field_name))
            if not isinstance(value, bool):
                raise MergeConfigError(
                    f"Field '{field_name}' must be true or false, got {value!r}",
                    field_name
                )
            values[field_name] = value

        if len({values[f] for f in cls.KEY_FIELDS}) != len(cls.KEY_FIELDS):
            raise MergeConfigError(
                "Fields 'hash_key', 'old_hash_key' and 'uuid_key' must be distinct"
            )

        return MergeConfig(**values)
