"""
Settings of the secure-options tooling.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any

from secure_options.core.exceptions import ConfigurationError
from secure_options.core.logging import logger
from secure_options.core.utils.dict_utils import deep_merge, set_nested

CONFIG_FILE_NAME = ".secure-options.yaml"

VALID_SCOPES = ("local_machine", "current_user")
VALID_SCHEMES = ("aesgcm", "fernet")
VALID_LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


class ConfigValidator:
    """
    Configuration validator with rules.

    Validations:
    1. Protection scope is a known scope
    2. Protector scheme is a known scheme
    3. Key variable is a plausible environment variable name
    4. Log level is a loguru level
    """

    def validate_config(self, config: Dict[str, Any]) -> None:
        """Validate complete configuration, raising ConfigurationError on the first problem."""
        protection = config.get("protection", {})

        scope = protection.get("scope")
        if scope not in VALID_SCOPES:
            raise ConfigurationError(
                f"Invalid protection scope: {scope}. Allowed: {', '.join(VALID_SCOPES)}"
            )

        scheme = protection.get("scheme")
        if scheme not in VALID_SCHEMES:
            raise ConfigurationError(
                f"Invalid protector scheme: {scheme}. Allowed: {', '.join(VALID_SCHEMES)}"
            )

        key_env = protection.get("key_env")
        if not isinstance(key_env, str) or not key_env or not key_env.replace("_", "").isalnum():
            raise ConfigurationError(f"Invalid key environment variable name: {key_env}")

        level = str(config.get("logging", {}).get("level", "")).upper()
        if level not in VALID_LOG_LEVELS:
            raise ConfigurationError(f"Invalid log level: {level}")


class Settings:
    """
    Tooling configuration.

    Priority order:
    1. Default values
    2. .secure-options.yaml in the working directory
    3. Environment variables
    """

    def __init__(self, config_path: Path | None = None) -> None:
        self.config_path = config_path or self._find_config_file()
        self.config = self._load_config()
        self.validator = ConfigValidator()
        self.validator.validate_config(self.config)
        logger.debug(
            "Settings initialized",
            config_source=str(self.config_path) if self.config_path else "defaults",
        )

    def _get_default_config(self) -> Dict[str, Any]:
        """Default configuration."""
        return {
            "protection": {
                "scope": "local_machine",
                "scheme": "aesgcm",
                "key_env": "SECURE_OPTIONS_KEY",
            },
            "logging": {"level": "WARNING", "debug_mode": False},
        }

    def _find_config_file(self) -> Path | None:
        """Find .secure-options.yaml in the current directory."""
        local_config = Path.cwd() / CONFIG_FILE_NAME
        if local_config.exists():
            return local_config
        return None

    def _load_config(self) -> Dict[str, Any]:
        """
        Load configuration in priority order.

        1. Defaults
        2. .secure-options.yaml
        3. Environment variables
        """
        defaults = self._get_default_config()

        if self.config_path is not None:
            try:
                with open(self.config_path, encoding='utf-8') as f:
                    file_config = yaml.safe_load(f)
            except (OSError, yaml.YAMLError) as e:
                raise ConfigurationError(
                    f"Error reading configuration file: {e}",
                    context={"file": str(self.config_path)},
                    cause=e,
                ) from e
            if file_config:
                if not isinstance(file_config, dict):
                    raise ConfigurationError(
                        "Configuration file must contain a mapping",
                        context={"file": str(self.config_path)},
                    )
                deep_merge(defaults, file_config)

        env_overrides = {
            "SECURE_OPTIONS_SCOPE": ("protection", "scope"),
            "SECURE_OPTIONS_SCHEME": ("protection", "scheme"),
            "SECURE_OPTIONS_KEY_ENV": ("protection", "key_env"),
            "SECURE_OPTIONS_LOG_LEVEL": ("logging", "level"),
        }

        for env_key, path_tuple in env_overrides.items():
            env_value = os.getenv(env_key)
            if env_value:
                set_nested(defaults, path_tuple, env_value)

        return defaults

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value with support for dotted paths ("protection.scope")."""
        if "." in key:
            current: Any = self.config
            for part in key.split("."):
                if isinstance(current, dict) and part in current:
                    current = current[part]
                else:
                    return default
            return current
        return self.config.get(key, default)

    def require(self, key: str) -> Any:
        """
        Get required value or raise exception.

        Accepts dotted paths like get().
        """
        missing = object()
        value = self.get(key, missing)
        if value is missing:
            raise ConfigurationError(f"Missing required config: {key}")
        return value
