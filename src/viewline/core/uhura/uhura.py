"""Uhura - Configuration Manager for viewline.

Uhura manages configuration from JSON files and environment variables,
providing a unified interface for accessing settings throughout the application.

Configuration hierarchy:
- viewline: Core view settings
  - verbs: HTTP verbs accepted as conditions
  - body_verbs: verbs whose secondary condition reads the request body
  - strict_conditions: raise on unknown condition keywords
- locals: Default template locals copied into every view

Environment variables follow the naming convention:
VIEWLINE__<section>__<key> for nested values
Example: VIEWLINE__VIEWLINE__STRICT_CONDITIONS=true
         VIEWLINE__LOCALS__SITE_NAME="My site"
"""

import json
import logging
import os
from copy import deepcopy
from pathlib import Path
from typing import Any

from viewline.core.dto.view_dto import ViewSettings

logger = logging.getLogger(__name__)

SECTIONS = ("viewline", "locals")


class Uhura:
    """Configuration manager for viewline instances.

    Each Viewline instance has its own Uhura instance to maintain
    isolated configuration state.

    Famous quote from Uhura in Star Trek:
    "Hailing frequencies open, Captain."
    """

    ENV_PREFIX = "VIEWLINE"
    ENV_SEPARATOR = "__"

    def __init__(self, config_path: str | None = None):
        """Initialize Uhura configuration manager.

        Args:
            config_path: Path to JSON configuration file. If None, only
                        environment variables will be used.
        """
        self._config_path = config_path
        self._config = self.default_config()
        self._loaded = False
        self._base_config: dict[str, Any] | None = None
        logger.debug("Uhura instance created with config_path=%s", config_path)

    @staticmethod
    def default_config() -> dict[str, Any]:
        """Return a new default config dict each time."""
        return {"viewline": {}, "locals": {}}

    def load(self, config: dict[str, Any] | None = None) -> None:
        """Load configuration from JSON file, environment variables, or provided config.

        Args:
            config: Optional config dict to use as base. If None, uses default_config().

        Priority (highest to lowest):
        1. Environment variables
        2. JSON file
        3. Provided config (if any)
        4. Default values
        """
        if self._loaded:
            logger.debug("Configuration already loaded, skipping reload")
            return

        self._config = self.default_config()
        if config is not None:
            self._base_config = deepcopy(config)
        config = self._base_config

        if config is not None:
            self._merge_sections(config, source="config object")

        if self._config_path:
            self._load_from_json()

        self._load_from_env()

        self._loaded = True
        logger.info("Configuration loaded successfully")
        logger.debug(
            "Final config structure: viewline keys=%s, locals keys=%s",
            list(self._config.get("viewline", {}).keys()),
            list(self._config.get("locals", {}).keys()),
        )

    def _load_from_json(self) -> None:
        """Load configuration from JSON file."""
        config_file = Path(self._config_path)
        if not config_file.exists():
            logger.warning("Config file not found: %s", self._config_path)
            return
        try:
            with open(config_file, encoding="utf-8") as f:
                json_config = json.load(f)
        except json.JSONDecodeError as e:
            logger.error("Invalid JSON in config file %s: %s", self._config_path, e)
            raise ValueError(f"Invalid JSON configuration file: {e}") from e

        self._merge_sections(json_config, source="JSON")
        logger.info("Loaded configuration from JSON: %s", self._config_path)

    def _merge_sections(self, config: Any, *, source: str) -> None:
        """Validate and merge the known sections of ``config`` into self._config."""
        if not isinstance(config, dict):
            raise ValueError(f"Configuration from {source} must be an object")

        for section in SECTIONS:
            if section not in config:
                continue
            if not isinstance(config[section], dict):
                raise ValueError(f"'{section}' section must be an object")
            self._config[section].update(deepcopy(config[section]))

    def _load_from_env(self) -> None:
        """Load configuration from environment variables.

        Environment variables follow the pattern:
        VIEWLINE__<SECTION>__<KEY>__<SUBKEY>...
        """
        prefix = f"{self.ENV_PREFIX}{self.ENV_SEPARATOR}"

        for env_key, env_value in os.environ.items():
            if not env_key.startswith(prefix):
                continue

            key_path = env_key[len(prefix) :].split(self.ENV_SEPARATOR)

            if len(key_path) < 2:
                logger.warning("Invalid env var format (too short): %s", env_key)
                continue

            section = key_path[0].lower()

            if section not in SECTIONS:
                logger.warning("Invalid section in env var %s: %s", env_key, section)
                continue

            parsed_value = self._parse_env_value(env_value)
            self._set_nested_value(section, key_path[1:], parsed_value)
            logger.debug("Set from env: %s = %s", env_key, parsed_value)

    def _parse_env_value(self, value: str) -> Any:
        """Parse environment variable value with type inference.

        Attempts to parse as JSON first, falls back to string.
        """
        try:
            return json.loads(value)
        except (json.JSONDecodeError, ValueError):
            return value

    def _set_nested_value(self, section: str, path: list[str], value: Any) -> None:
        """Set a value in nested configuration structure.

        Args:
            section: Top-level section ('viewline' or 'locals')
            path: List of keys representing the path to the value
            value: Value to set
        """
        target = self._config[section]
        for key in path[:-1]:
            key_lower = key.lower()
            if not isinstance(target.get(key_lower), dict):
                target[key_lower] = {}
            target = target[key_lower]
        target[path[-1].lower()] = value

    def get_viewline_config(self, key: str | None = None, default: Any = None) -> Any:
        """Get core viewline configuration.

        Args:
            key: Specific configuration key. If None, returns entire viewline config.
            default: Default value if key not found.
        """
        if not self._loaded:
            self.load()

        if key is None:
            return deepcopy(self._config.get("viewline", {}))

        return self._config.get("viewline", {}).get(key, default)

    def get_default_locals(self) -> dict[str, Any]:
        """Get the default template locals (deep copy)."""
        if not self._loaded:
            self.load()

        return deepcopy(self._config.get("locals", {}))

    def set_viewline_config(self, key: str, value: Any) -> None:
        """Set core configuration (runtime only, not persisted)."""
        if not self._loaded:
            self.load()

        self._config["viewline"][key] = value
        logger.debug("Set viewline config: %s = %s", key, value)

    def view_settings(self) -> ViewSettings:
        """Build the ViewSettings shared by every view."""
        settings = self.get_viewline_config()
        settings["default_locals"] = self.get_default_locals()
        return ViewSettings(**settings)

    def reload(self) -> None:
        """Reload configuration from sources."""
        self._loaded = False
        self.load()
        logger.info("Configuration reloaded")

    @property
    def config_path(self) -> str | None:
        """Get the configuration file path."""
        return self._config_path

    @property
    def is_loaded(self) -> bool:
        """Check if configuration has been loaded."""
        return self._loaded


ConfigManager = Uhura
