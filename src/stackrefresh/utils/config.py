"""
Configuration System

Loads the optional stackrefresh YAML configuration. Features:
- Single-file YAML loading with environment variable resolution
- Optional file: with no file configured every setting falls back to its default
- Dot-notation access to nested values
- Process-wide default instance plus a per-path cache for explicit files

The configuration file is located through the STACKREFRESH_CONFIG environment
variable. A .env file in the current working directory is loaded first so the
variable (and any ${VAR} placeholders) can be set there.
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

CONFIG_ENV_VAR = "STACKREFRESH_CONFIG"

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-(.*?))?\}|\$([A-Za-z_][A-Za-z0-9_]*)")


class ConfigBuilder:
    """
    Configuration builder for stackrefresh.

    Features:
    - Single-file YAML loading with validation and error handling
    - Environment variable resolution
    - Empty configuration when no file is configured
    """

    def __init__(self, config_path: str | Path | None = None):
        """
        Initialize configuration builder.

        Args:
            config_path: Path to the YAML file. If None, STACKREFRESH_CONFIG is
                consulted; if that is unset too, an empty configuration is used.

        Raises:
            FileNotFoundError: If an explicitly configured file does not exist.
        """
        dotenv_path = Path.cwd() / ".env"
        if dotenv_path.exists():
            load_dotenv(dotenv_path, override=False)  # Don't override existing env vars
            logger.debug(f"Loaded .env file from {dotenv_path}")

        if config_path is None:
            config_path = os.environ.get(CONFIG_ENV_VAR) or None

        self.config_path = Path(config_path) if config_path else None

        if self.config_path is None:
            logger.debug(f"{CONFIG_ENV_VAR} not set, using built-in defaults")
            self.raw_config: dict[str, Any] = {}
            return

        if not self.config_path.exists():
            raise FileNotFoundError(
                f"Configuration file not found: {self.config_path}\n\n"
                f"Point {CONFIG_ENV_VAR} at an existing YAML file or unset it "
                f"to run with built-in defaults."
            )

        self.raw_config = self._load_config()

    def _load_yaml_file(self, file_path: Path) -> dict[str, Any]:
        """Load and validate a YAML configuration file."""
        try:
            with open(file_path) as f:
                config = yaml.safe_load(f)

            if config is None:
                logger.warning(f"Configuration file is empty: {file_path}")
                return {}

            if not isinstance(config, dict):
                error_msg = f"Configuration file must contain a dictionary/mapping: {file_path}"
                logger.error(error_msg)
                raise ValueError(error_msg)

            return config
        except yaml.YAMLError as e:
            error_msg = f"Error parsing YAML configuration: {e}"
            logger.error(error_msg)
            raise yaml.YAMLError(error_msg) from e

    def _resolve_env_vars(self, data: Any) -> Any:
        """Recursively resolve environment variables in configuration data.

        Supports both simple and bash-style default value syntax:
        - ${VAR_NAME} - simple substitution
        - ${VAR_NAME:-default_value} - with default value
        - $VAR_NAME - simple substitution without braces
        """
        if isinstance(data, dict):
            return {key: self._resolve_env_vars(value) for key, value in data.items()}
        elif isinstance(data, list):
            return [self._resolve_env_vars(item) for item in data]
        elif isinstance(data, str):

            def replace_env_var(match):
                if match.group(1):  # ${VAR_NAME:-default} or ${VAR_NAME}
                    var_name = match.group(1)
                    default_value = match.group(2)
                else:  # $VAR_NAME
                    var_name = match.group(3)
                    default_value = None

                env_value = os.environ.get(var_name)
                if env_value is None:
                    if default_value is not None:
                        return default_value
                    logger.info(
                        f"Environment variable '{var_name}' not found, keeping original value"
                    )
                    return match.group(0)
                return env_value

            return _ENV_VAR_PATTERN.sub(replace_env_var, data)
        else:
            return data

    def _load_config(self) -> dict[str, Any]:
        """Load configuration from the configured file with env vars resolved."""
        config = self._load_yaml_file(self.config_path)
        expanded_config = self._resolve_env_vars(copy.deepcopy(config))
        logger.info(f"Loaded configuration from {self.config_path}")
        return expanded_config

    def get(self, path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation path."""
        keys = path.split(".")
        value = self.raw_config

        try:
            for key in keys:
                value = value[key]
            return value
        except (KeyError, TypeError):
            return default


# =============================================================================
# GLOBAL CONFIGURATION
# =============================================================================

_default_config: ConfigBuilder | None = None


def _get_config() -> ConfigBuilder:
    """Get the configuration singleton (STACKREFRESH_CONFIG or built-in defaults)."""
    global _default_config

    if _default_config is None:
        _default_config = ConfigBuilder()
    return _default_config


def get_config_builder() -> ConfigBuilder:
    """Get configuration builder instance for full config access.

    Returns:
        ConfigBuilder instance

    Examples:
        >>> config = get_config_builder()
        >>> path = config.get("descriptor.path", "/root/docker-compose.yml")
    """
    return _get_config()


def get_config_value(path: str, default: Any = None) -> Any:
    """
    Get a specific configuration value by dot-separated path.

    Args:
        path: Dot-separated configuration path (e.g., "descriptor.path")
        default: Default value to return if path is not found

    Returns:
        The configuration value at the specified path, or default if not found

    Raises:
        ValueError: If path is empty or None
    """
    if not path:
        raise ValueError("Configuration path cannot be empty or None")

    return _get_config().get(path, default)


def reset_config() -> None:
    """Drop cached configuration so the next access reloads from disk."""
    global _default_config
    _default_config = None
