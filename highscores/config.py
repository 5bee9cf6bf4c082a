"""
Configuration management for the leaderboard.
Supports both JSON file configuration and environment variable overrides.
"""

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class LeaderboardConfig:
    """Configuration management for the leaderboard service."""

    DEFAULT_CONFIG = {
        "title": "YoBA highscores",
        "server": {
            "host": "0.0.0.0",
            "port": 8080,
        },
        "database": {
            "path": "highscores.db",
        },
        "limits": {
            "players": 200,
            "results": 1000,
        },
        # Headers set by the hosting front end with the client's coarse location
        "geo_headers": {
            "country": "X-AppEngine-Country",
            "region": "X-AppEngine-Region",
            "city": "X-AppEngine-City",
            "city_lat_long": "X-AppEngine-CityLatLong",
        },
        "logging": {
            "level": "INFO",
        },
        "cors": {
            "enabled": True,
        },
    }

    def __init__(
        self,
        config_path: str = "leaderboard_config.json",
        create_if_missing: bool = True,
    ) -> None:
        """Initialize configuration from file, environment variables, or defaults."""
        self.config_path = Path(config_path)
        self.create_if_missing = create_if_missing
        self.config = self._load_config()
        self._apply_env_overrides()
        self._validate_config()

    def _load_config(self) -> Dict[str, Any]:
        """
        Load configuration from JSON file or create default.

        @return: Dictionary containing the loaded configuration
        """
        config = copy.deepcopy(self.DEFAULT_CONFIG)

        if self.config_path.exists():
            try:
                with open(self.config_path, "r", encoding="utf-8") as f:
                    loaded_config = json.load(f)

                if not isinstance(loaded_config, dict):
                    logger.warning(
                        "Config %s is not a JSON object; using defaults",
                        self.config_path,
                    )
                    return config

                # Merge with defaults to ensure all keys exist
                self._deep_merge(config, loaded_config)
            except (json.JSONDecodeError, IOError) as e:
                logger.warning(
                    "Error loading config from %s: %s; using defaults",
                    self.config_path,
                    e,
                )
        elif self.create_if_missing:
            self._create_default_config()

        return config

    def _deep_merge(
        self,
        base_dict: Dict[str, Any],
        update_dict: Dict[str, Any],
    ) -> None:
        """
        Recursively merge dictionaries.

        @param base_dict: Base dictionary to merge into
        @param update_dict: Dictionary with updates to merge
        """
        for key, value in update_dict.items():
            if (
                key in base_dict
                and isinstance(base_dict[key], dict)
                and isinstance(value, dict)
            ):
                self._deep_merge(base_dict[key], value)
            else:
                base_dict[key] = value

    def _apply_env_overrides(self) -> None:
        """
        Apply environment variable overrides to configuration.
        """
        env_mappings = {
            "LEADERBOARD_TITLE": ("title",),
            "HOST": ("server", "host"),
            "PORT": ("server", "port"),
            "DB_PATH": ("database", "path"),
            "PLAYERS_LIMIT": ("limits", "players"),
            "RESULTS_LIMIT": ("limits", "results"),
            "LOG_LEVEL": ("logging", "level"),
            "CORS_ENABLED": ("cors", "enabled"),
        }

        for env_var, config_path in env_mappings.items():
            env_value = os.getenv(env_var)
            if env_value is not None:
                converted_value = self._convert_env_value(env_value)
                self._set_nested_config(config_path, converted_value)

    def _convert_env_value(self, value: str) -> Any:
        """
        Convert environment variable string to appropriate type.

        @param value: String value from environment variable
        @return: Converted value (bool, int, or string)
        """
        if value.lower() in ("true", "yes", "on"):
            return True
        elif value.lower() in ("false", "no", "off"):
            return False

        try:
            return int(value)
        except ValueError:
            pass

        return value

    def _set_nested_config(self, path: tuple, value: Any) -> None:
        """
        Set a nested configuration value using a path tuple.

        @param path: Tuple representing the nested path (e.g., ("limits", "players"))
        @param value: Value to set
        """
        current = self.config
        for key in path[:-1]:
            if key not in current:
                current[key] = {}
            current = current[key]
        current[path[-1]] = value

    def _create_default_config(self) -> None:
        """
        Write the default configuration to the configured file path.
        """
        try:
            with open(self.config_path, "w", encoding="utf-8") as f:
                json.dump(self.DEFAULT_CONFIG, f, indent=2)
            logger.info("Created default configuration file: %s", self.config_path)
        except IOError as e:
            logger.warning("Could not create config file %s: %s", self.config_path, e)

    def _validate_config(self) -> None:
        """
        Validate configuration values, resetting invalid ones to defaults.
        """
        for key in ("players", "results"):
            value = self.config["limits"][key]
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                default = self.DEFAULT_CONFIG["limits"][key]
                logger.warning("Invalid %s limit %r, using %d", key, value, default)
                self.config["limits"][key] = default

        port = self.config["server"]["port"]
        if isinstance(port, bool) or not isinstance(port, int) or not 0 < port < 65536:
            logger.warning("Invalid port %r, using 8080", port)
            self.config["server"]["port"] = 8080

        level = str(self.config["logging"]["level"]).upper()
        if level not in LOG_LEVELS:
            logger.warning("Invalid log level %r, using INFO", level)
            level = "INFO"
        self.config["logging"]["level"] = level

    def get(
        self,
        *keys: str,
    ) -> Any:
        """
        Get nested configuration value.

        @param keys: Variable arguments representing nested keys to traverse
        @return: Configuration value at the specified path, None if not found
        """
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return None
        return value

    @property
    def players_limit(self) -> int:
        return self.get("limits", "players")

    @property
    def results_limit(self) -> int:
        return self.get("limits", "results")
