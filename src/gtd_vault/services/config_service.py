"""Configuration service for managing GTD Vault configuration.

This module provides the ConfigService class, the single source of truth for
configuration in GTD Vault. It handles:

- Loading and saving config.json
- Config file initialization with sensible defaults
- Dotted-key get/set used by the ``gtd config`` commands
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir, user_data_dir
from pydantic import BaseModel, ValidationError

from gtd_vault.models import AppConfig, EntityValidationError


class ConfigService:
    """Service for managing application configuration.

    The loaded ``AppConfig`` is handed explicitly to the gateway and the
    services; nothing else reads the config file.
    """

    def __init__(self):
        """Initialize the config service."""

        self.config_dir = Path(user_config_dir("gtd_vault"))
        self.config_path = self.config_dir / "config.json"
        self.data_dir = Path(user_data_dir("gtd_vault"))

        # Ensure directories exist
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.data_dir.mkdir(parents=True, exist_ok=True)

        self._config: AppConfig | None = None

    @property
    def config(self) -> AppConfig:
        """Get or load the current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def load_config(self) -> AppConfig:
        """Load configuration from storage."""
        if self._config is not None:
            return self._config

        try:
            with open(self.config_path, encoding="utf-8") as f:
                self._config = AppConfig.model_validate_json(f.read())
        except FileNotFoundError:
            # Expected on first run
            self._config = self.create_default_config()
        except (OSError, ValidationError) as e:
            raise RuntimeError(f"Failed to load config: {e}") from e

        return self._config

    def save_config(self):
        """Save the current configuration to storage."""
        if self._config is None:
            raise RuntimeError("No configuration to save")

        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w", encoding="utf-8") as f:
                f.write(self._config.model_dump_json(indent=4))
        except OSError as e:
            raise RuntimeError(f"Failed to save config: {e}") from e

    def reset_config(self) -> AppConfig:
        """Reset configuration to defaults."""
        self._config = None
        if self.config_path.exists():
            self.config_path.unlink()
        return self.create_default_config()

    def create_default_config(self) -> AppConfig:
        """Create a default configuration with the vault in the data directory."""
        vault = self.data_dir / "vault"
        vault.mkdir(parents=True, exist_ok=True)
        self._config = AppConfig(vault_path=str(vault))
        self.save_config()
        return self._config

    def get(self, key: str) -> Any:
        """Read a setting by dotted key, e.g. ``ui.task_sort_mode``.

        Raises:
            KeyError: If the key does not exist
        """
        node: Any = self.config
        for part in key.split("."):
            if not isinstance(node, BaseModel) or part not in type(node).model_fields:
                raise KeyError(f"Unknown config key: {key}")
            node = getattr(node, part)
        return node

    def set(self, key: str, value: Any) -> AppConfig:
        """Set a setting by dotted key and save.

        The whole config is re-validated before anything is written.

        Raises:
            KeyError: If the key does not exist
            EntityValidationError: If the new value is invalid
        """
        self.get(key)
        data = self.config.model_dump()
        node = data
        *parents, leaf = key.split(".")
        for part in parents:
            node = node[part]
        node[leaf] = value
        try:
            self._config = AppConfig.model_validate(data)
        except ValidationError as e:
            errors = [err["msg"] for err in e.errors()]
            raise EntityValidationError(f"Invalid value for {key}: {value!r}", errors) from e
        self.save_config()
        return self._config


@lru_cache(maxsize=1)
def get_config_service() -> ConfigService:
    """Get a cached ConfigService instance."""
    config_service = ConfigService()
    config_service.load_config()
    return config_service
