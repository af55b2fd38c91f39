"""
Configuration System

Single-file YAML configuration for persistwire. Features:
- YAML loading with validation and error handling
- ``.env`` loading from the working directory
- Environment variable resolution (``${VAR}``, ``${VAR:-default}``, ``$VAR``)
- Dot-path access to nested values
- Graceful defaults: the registration pipeline runs without any config file

Recognized sections are ``persistence`` (descriptor resource names, schema
version, scan packages, provider registrations) and ``logging``.
"""

import copy
import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

# Use standard logging (not get_logger) to avoid circular imports with logger.py
logger = logging.getLogger("CONFIG")

DEFAULT_CONFIG_FILENAME = "config.yml"

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-(.*?))?\}|\$([A-Za-z_][A-Za-z0-9_]*)")


class ConfigBuilder:
    """
    Configuration builder for a single YAML file.

    The raw configuration keeps ``${VAR}`` placeholders in
    :meth:`get_unexpanded_config` and resolves them in :attr:`raw_config`.
    """

    # Sentinel object to distinguish between "no default provided" and "default is None"
    _REQUIRED = object()

    def __init__(self, config_path: str | Path | None = None):
        """
        Initialize configuration builder.

        Args:
            config_path: Path to the config.yml file. If None, looks in current directory.

        Raises:
            FileNotFoundError: If no config file is found.
        """
        dotenv_path = Path.cwd() / ".env"
        if dotenv_path.exists():
            load_dotenv(dotenv_path, override=False)
            logger.debug(f"Loaded .env file from {dotenv_path}")

        if config_path is None:
            cwd_config = Path.cwd() / DEFAULT_CONFIG_FILENAME
            if not cwd_config.exists():
                raise FileNotFoundError(
                    f"No {DEFAULT_CONFIG_FILENAME} found in current directory: {Path.cwd()}\n"
                    f"Set the CONFIG_FILE environment variable to point to your config file."
                )
            config_path = cwd_config

        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        self.raw_config, self._unexpanded_config = self._load_config()

    def _load_yaml_file(self, file_path: Path) -> dict[str, Any]:
        """Load and validate a YAML configuration file."""
        try:
            with open(file_path) as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            error_msg = f"Error parsing YAML configuration: {e}"
            logger.error(error_msg)
            raise yaml.YAMLError(error_msg) from e

        if config is None:
            logger.warning(f"Configuration file is empty: {file_path}")
            return {}

        if not isinstance(config, dict):
            error_msg = f"Configuration file must contain a dictionary/mapping: {file_path}"
            logger.error(error_msg)
            raise ValueError(error_msg)

        return config

    def _resolve_env_vars(self, data: Any) -> Any:
        """Recursively resolve environment variables in configuration data."""
        if isinstance(data, dict):
            return {key: self._resolve_env_vars(value) for key, value in data.items()}
        if isinstance(data, list):
            return [self._resolve_env_vars(item) for item in data]
        if not isinstance(data, str):
            return data

        def replace_env_var(match):
            if match.group(1):
                var_name = match.group(1)
                default_value = match.group(2)
            else:
                var_name = match.group(3)
                default_value = None

            env_value = os.environ.get(var_name)
            if env_value is not None:
                return env_value
            if default_value is not None:
                return default_value
            logger.info(f"Environment variable '{var_name}' not found, keeping original value")
            return match.group(0)

        return _ENV_VAR_PATTERN.sub(replace_env_var, data)

    def _load_config(self) -> tuple[dict[str, Any], dict[str, Any]]:
        config = self._load_yaml_file(self.config_path)
        unexpanded_config = copy.deepcopy(config)
        expanded_config = self._resolve_env_vars(config)
        logger.info(f"Loaded configuration from {self.config_path}")
        return expanded_config, unexpanded_config

    def get_unexpanded_config(self) -> dict[str, Any]:
        """Get configuration with environment variable placeholders preserved."""
        return copy.deepcopy(self._unexpanded_config)

    def require(self, path: str, default: Any = _REQUIRED) -> Any:
        """
        Get a configuration value, failing fast when it is required and missing.

        Args:
            path: Dot-separated configuration path
            default: Value to use if missing; when omitted the value is required

        Raises:
            ValueError: If a required value is missing
        """
        value = self.get(path)
        if value is None:
            if default is self._REQUIRED:
                raise ValueError(
                    f"Missing required configuration: '{path}' must be explicitly set in "
                    f"{self.config_path.name}."
                )
            logger.warning(f"Using default value for '{path}' = {default}")
            return default
        return value

    def get(self, path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation path."""
        value = self.raw_config
        try:
            for key in path.split("."):
                value = value[key]
            return value
        except (KeyError, TypeError):
            return default


# =============================================================================
# GLOBAL CONFIGURATION
# =============================================================================

_default_config: ConfigBuilder | None = None
_config_cache: dict[str, ConfigBuilder] = {}


def _get_config(config_path: str | Path | None = None, set_as_default: bool = False) -> ConfigBuilder:
    """Get configuration instance (default singleton or cached per explicit path)."""
    global _default_config

    if config_path is None:
        if _default_config is None:
            _default_config = ConfigBuilder(os.environ.get("CONFIG_FILE") or None)
            logger.info("Initialized default configuration system")
        return _default_config

    resolved_path = str(Path(config_path).resolve())
    if resolved_path not in _config_cache:
        logger.info(f"Loading configuration from explicit path: {resolved_path}")
        _config_cache[resolved_path] = ConfigBuilder(resolved_path)

    if set_as_default:
        _default_config = _config_cache[resolved_path]

    return _config_cache[resolved_path]


def get_config_builder(config_path: str | Path | None = None, set_as_default: bool = False) -> ConfigBuilder:
    """Get configuration builder instance for full config access.

    Args:
        config_path: Optional explicit path to configuration file. If None, uses the
            default singleton (CONFIG_FILE env var or cwd/config.yml).
        set_as_default: If True and config_path is provided, also use this config for
            later calls without a path.

    Raises:
        FileNotFoundError: If no configuration file can be found.
    """
    return _get_config(config_path, set_as_default)


def get_config_value(path: str, default: Any = None, config_path: str | Path | None = None) -> Any:
    """
    Get a specific configuration value by dot-separated path.

    Returns ``default`` when the path is not set or when no configuration file
    is available at all.

    Examples:
        >>> resources = get_config_value("persistence.descriptor_resources", [])
        >>> version = get_config_value("persistence.schema_version", "2.2")
    """
    if not path:
        raise ValueError("Configuration path cannot be empty or None")

    try:
        config = _get_config(config_path)
    except FileNotFoundError:
        logger.debug(f"No configuration available, using default for '{path}'")
        return default

    return config.get(path, default)


def reset_config() -> None:
    """Forget the default configuration and all cached explicit configurations."""
    global _default_config
    _default_config = None
    _config_cache.clear()
