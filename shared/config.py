"""
Configuration management for the task manager.
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from dotenv import load_dotenv

from models.enums import SchemaMode
from shared.errors import ConfigurationError

DEFAULTS_PATH = Path(__file__).with_name("application.yaml")

HARDCODED_DEFAULTS: dict[str, Any] = {
    "db.url": "sqlite:///taskmanager.db",
    "db.username": "",
    "db.password": "",
    "db.driver": "",
    "db.schema_mode": SchemaMode.UPDATE.value,
    "db.show_sql": False,
    "db.format_sql": True,
    "db.pool_size": 10,
    "app.title": "Task Management & To-Do Application",
    "app.version": "1.0.0",
}


class AppConfig:
    """Layered application configuration.

    Values resolve from the environment (``db.url`` is read from ``DB_URL``),
    then process-level overrides, then the packaged defaults file, then the
    hardcoded defaults.
    """

    def __init__(
        self,
        overrides: dict[str, Any] | None = None,
        defaults_path: str | Path | None = None,
        load_env_file: bool = True,
    ) -> None:
        """Initialize configuration and load the defaults file."""
        if load_env_file:
            # Real environment variables win over .env entries
            load_dotenv(override=False)
        self.overrides: dict[str, Any] = dict(overrides or {})
        self.defaults_path = Path(
            defaults_path or os.getenv("TASKMANAGER_CONFIG", str(DEFAULTS_PATH))
        )
        self.file_config: dict[str, Any] = {}
        self.load_defaults_file()

    def load_defaults_file(self) -> None:
        """Load the packaged defaults from YAML."""
        try:
            with open(self.defaults_path, "r", encoding="utf-8") as stream:
                data = yaml.safe_load(stream) or {}
        except FileNotFoundError:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {self.defaults_path} must contain a mapping")
        self.file_config = data

    @staticmethod
    def env_key(key: str) -> str:
        """Environment variable name for a dotted key."""
        return key.upper().replace(".", "_")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by dotted key.

        Args:
            key: Configuration key, e.g. ``db.url``
            default: Fallback used instead of the hardcoded default

        Returns:
            The first non-empty value in resolution order
        """
        env_value = os.getenv(self.env_key(key))
        if env_value:
            return env_value

        override = self.overrides.get(key)
        if override is not None and override != "":
            return override

        file_value = self._lookup_file(key)
        if file_value is not None:
            return file_value

        if default is not None:
            return default
        return HARDCODED_DEFAULTS.get(key)

    def set(self, key: str, value: Any) -> None:
        """
        Set a process-level override.

        Args:
            key: Configuration key
            value: Configuration value
        """
        self.overrides[key] = value

    def reload(self) -> None:
        """Reload the defaults file."""
        self.load_defaults_file()

    def _lookup_file(self, key: str) -> Any:
        if key in self.file_config:
            return self.file_config[key]
        node: Any = self.file_config
        for part in key.split("."):
            if isinstance(node, dict) and part in node:
                node = node[part]
            else:
                return None
        return node

    @staticmethod
    def _coerce_bool(value: Any) -> bool:
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() == "true"

    @property
    def db_url(self) -> str:
        return str(self.get("db.url"))

    @property
    def db_username(self) -> str:
        return str(self.get("db.username") or "")

    @property
    def db_password(self) -> str:
        return str(self.get("db.password") or "")

    @property
    def db_driver(self) -> str:
        return str(self.get("db.driver") or "")

    @property
    def schema_mode(self) -> SchemaMode:
        raw = str(self.get("db.schema_mode")).strip().lower()
        try:
            return SchemaMode(raw)
        except ValueError as e:
            raise ConfigurationError(f"Unknown schema mode: {raw}") from e

    @property
    def show_sql(self) -> bool:
        return self._coerce_bool(self.get("db.show_sql"))

    @property
    def format_sql(self) -> bool:
        return self._coerce_bool(self.get("db.format_sql"))

    @property
    def pool_size(self) -> int:
        raw = self.get("db.pool_size")
        try:
            return int(raw)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid connection pool size: {raw}") from e

    @property
    def app_title(self) -> str:
        return str(self.get("app.title"))

    @property
    def app_version(self) -> str:
        return str(self.get("app.version"))

    def describe(self) -> dict[str, Any]:
        """Effective settings with the database password masked."""
        return {
            "db.url": self.db_url,
            "db.username": self.db_username,
            "db.password": "***" if self.db_password else "",
            "db.driver": self.db_driver,
            "db.schema_mode": self.schema_mode.value,
            "db.show_sql": self.show_sql,
            "db.format_sql": self.format_sql,
            "db.pool_size": self.pool_size,
            "app.title": self.app_title,
            "app.version": self.app_version,
        }

    def log_status(self, logger: logging.Logger) -> None:
        """Log the effective configuration."""
        logger.info("=== Configuration Status ===")
        for key, value in self.describe().items():
            logger.info("%s: %s", key, value)
