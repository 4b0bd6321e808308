"""Configuration loader with YAML support and environment variable substitution."""

import copy
import os
import re
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import yaml

from models import ConversionFormat

DEFAULT_CONFIG: Dict[str, Any] = {
    'notion': {
        'token': '${NOTION_TOKEN}',
        'base_url': 'https://api.notion.com',
        'api_version': '2025-09-03'
    },
    'export': {
        'output_directory': './output',
        'obsidian_vault_path': '${OBSIDIAN_VAULT_PATH}',
        'create_notion_folder': True,
        'conversion_format': ConversionFormat.SEPARATE_PAGES.value
    },
    'advanced': {
        'request_timeout': 30,
        'page_size': 100
    },
    'logging': {
        'level': None,
        'file': None
    }
}


class ConfigLoader:
    """Handles loading and validation of configuration files."""

    ENV_VAR_PATTERN = re.compile(r'\$\{([A-Za-z_][A-Za-z0-9_]*)\}')

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> Dict[str, Any]:
        """
        Load configuration from YAML file with environment variable substitution.

        The file is merged over the built-in defaults, so it only needs to
        name the settings it changes. Without a path the defaults alone are
        used.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            Parsed configuration dictionary

        Raises:
            FileNotFoundError: If config file doesn't exist
            yaml.YAMLError: If YAML parsing fails
        """
        config_data: Dict[str, Any] = {}
        if config_path is not None:
            if not os.path.exists(config_path):
                raise FileNotFoundError(f"Configuration file not found: {config_path}")

            with open(config_path, 'r', encoding='utf-8') as f:
                config_data = yaml.safe_load(f) or {}

            if not isinstance(config_data, dict):
                raise ValueError("Configuration file must contain a dictionary")

        merged = cls._deep_merge(DEFAULT_CONFIG, config_data)
        return cls._substitute_env_vars_recursive(merged)

    @classmethod
    def validate(cls, config: Dict[str, Any]) -> None:
        """
        Validate configuration for required fields and correct values.

        Args:
            config: Configuration dictionary to validate

        Raises:
            ValueError: If validation fails
        """
        cls._validate_required_field(config, 'notion.token')

        base_url = get_nested(config, 'notion.base_url')
        if base_url:
            cls._validate_url(base_url, 'notion.base_url')

        conversion_format = get_nested(config, 'export.conversion_format', 'separate-pages')
        try:
            ConversionFormat(conversion_format)
        except ValueError:
            raise ValueError(
                f"export.conversion_format must be one of: {[f.value for f in ConversionFormat]}"
            )

        output_dir = get_nested(config, 'export.output_directory')
        if output_dir and os.path.exists(output_dir) and not os.path.isdir(output_dir):
            raise ValueError(f"export.output_directory '{output_dir}' is not a directory")

        create_folder = get_nested(config, 'export.create_notion_folder', True)
        if not isinstance(create_folder, bool):
            raise ValueError("export.create_notion_folder must be a boolean")

        timeout = get_nested(config, 'advanced.request_timeout', 30)
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise ValueError("advanced.request_timeout must be a positive number")

        page_size = get_nested(config, 'advanced.page_size', 100)
        if isinstance(page_size, bool) or not isinstance(page_size, int) or not 1 <= page_size <= 100:
            raise ValueError("advanced.page_size must be an integer between 1 and 100")

    @classmethod
    def merge_with_args(cls, config: Dict[str, Any], args) -> Dict[str, Any]:
        """
        Merge configuration file with CLI arguments.
        CLI arguments take precedence over config file values.

        Args:
            config: Base configuration dictionary
            args: CLI arguments with attributes matching config keys

        Returns:
            Merged configuration dictionary
        """
        merged = copy.deepcopy(config)
        for section in ('notion', 'export', 'logging'):
            merged.setdefault(section, {})

        if getattr(args, 'token', None):
            merged['notion']['token'] = args.token

        if getattr(args, 'output_dir', None):
            merged['export']['output_directory'] = args.output_dir

        if getattr(args, 'vault_path', None):
            merged['export']['obsidian_vault_path'] = args.vault_path

        if getattr(args, 'no_notion_folder', False):
            merged['export']['create_notion_folder'] = False

        if getattr(args, 'format', None):
            merged['export']['conversion_format'] = args.format

        if getattr(args, 'log_file', None):
            merged['logging']['file'] = args.log_file

        return merged

    @classmethod
    def _deep_merge(cls, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge ``override`` into a copy of ``base``."""
        merged = copy.deepcopy(base)
        for key, value in override.items():
            if isinstance(value, dict) and isinstance(merged.get(key), dict):
                merged[key] = cls._deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged

    @classmethod
    def _substitute_env_vars_recursive(cls, data: Any) -> Any:
        """Recursively substitute environment variables in data structure."""
        if isinstance(data, dict):
            return {key: cls._substitute_env_vars_recursive(value) for key, value in data.items()}
        elif isinstance(data, list):
            return [cls._substitute_env_vars_recursive(item) for item in data]
        elif isinstance(data, str):
            return cls._substitute_env_vars(data)
        else:
            return data

    @classmethod
    def _substitute_env_vars(cls, value: str) -> str:
        """Substitute environment variables in a string value."""
        def replace_match(match):
            env_value = os.getenv(match.group(1))
            return env_value if env_value is not None else match.group(0)

        return cls.ENV_VAR_PATTERN.sub(replace_match, value)

    @staticmethod
    def _validate_required_field(config: dict, field: str) -> None:
        """Validate that a required field exists and has a value."""
        value = get_nested(config, field)
        if value is None or value == '':
            raise ValueError(f"Missing required configuration: {field}")

        if isinstance(value, str) and '${' in value:
            match = ConfigLoader.ENV_VAR_PATTERN.search(value)
            var_name = match.group(1) if match else value
            raise ValueError(
                f"Configuration field '{field}' contains unsubstituted environment variable: {value}. "
                f"Please set the {var_name} environment variable or provide a value in config file."
            )

    @staticmethod
    def _validate_url(url: str, field_name: str) -> None:
        """Validate URL format."""
        parsed = urlparse(url)
        if not parsed.scheme or parsed.scheme not in ['http', 'https']:
            raise ValueError(f"{field_name} must use http or https scheme: {url}")
        if not parsed.netloc:
            raise ValueError(f"{field_name} missing hostname: {url}")


def get_nested(config: dict, path: str, default: Any = None) -> Any:
    """Safely retrieve nested configuration values using dot notation.

    Args:
        config: Configuration dictionary
        path: Dot-separated path (e.g., "notion.token")
        default: Default value if path doesn't exist

    Returns:
        Value at the nested path or default
    """
    value = config
    for key in path.split('.'):
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default
    return value


def get_optional(config: dict, path: str, default: Any = None) -> Any:
    """Like ``get_nested`` but treats empty and unsubstituted values as unset."""
    value = get_nested(config, path, default)
    if value is None or value == '':
        return default
    if isinstance(value, str) and ConfigLoader.ENV_VAR_PATTERN.search(value):
        return default
    return value


__all__ = ['ConfigLoader', 'DEFAULT_CONFIG', 'get_nested', 'get_optional']
