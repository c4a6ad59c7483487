"""Configuration management for ideavault using YAML files."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog
import yaml

from ideavault.errors import ValidationError

logger = structlog.get_logger()

CONFIG_DIR_NAME = ".ideavault"
DEFAULT_DATA_DIR = "~/.ideavault/data"
DEFAULT_MAX_BACKUPS = 10

DEFAULTS: dict[str, Any] = {
    "data_dir": DEFAULT_DATA_DIR,
    "backup.enabled": True,
    "backup.max_backups": DEFAULT_MAX_BACKUPS,
}


@dataclass(frozen=True)
class Settings:
    """Resolved settings handed to the storage layer."""

    data_dir: Path
    backup_enabled: bool = True
    max_backups: int = DEFAULT_MAX_BACKUPS


def _as_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("1", "true", "yes", "on"):
        return True
    if text in ("0", "false", "no", "off"):
        return False
    raise ValidationError(f"Config value for {key} must be a boolean, got '{value}'")


def _as_count(key: str, value: Any) -> int:
    try:
        count = int(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Config value for {key} must be an integer, got '{value}'") from e
    if count < 0:
        raise ValidationError(f"Config value for {key} must not be negative")
    return count


def check_key(key: str) -> None:
    if key not in DEFAULTS:
        raise ValidationError(f"Unknown config key '{key}'. Known keys: {', '.join(DEFAULTS)}")


def convert_value(key: str, value: Any) -> Any:
    """Check a value for a known key and return it in the type stored in YAML."""
    check_key(key)
    if key == "backup.enabled":
        return _as_bool(key, value)
    if key == "backup.max_backups":
        return _as_count(key, value)
    text = str(value).strip()
    if not text:
        raise ValidationError(f"Config value for {key} must not be empty")
    return text


class Config:
    """Configuration manager using YAML file storage.

    Supports both local (directory-level) and global (user-level) configuration.
    Local config is stored in .ideavault/config.yaml in the current directory.
    Global config is stored in ~/.ideavault/config.yaml.

    When reading, values are looked up in local config first, then global config.
    """

    def __init__(self, use_global: bool = False, config_dir: Path | None = None) -> None:
        """Initialize configuration manager.

        Args:
            use_global: If True, use global config only. If False, use local config with global fallback.
            config_dir: Custom directory to store config file (overrides use_global)
        """
        if config_dir is not None:
            self.config_dir = Path(config_dir)
            self.is_global = use_global
        elif use_global:
            self.config_dir = Path.home() / CONFIG_DIR_NAME
            self.is_global = True
        else:
            self.config_dir = Path.cwd() / CONFIG_DIR_NAME
            self.is_global = False

        self.config_file = self.config_dir / "config.yaml"
        self._config: dict[str, Any] = self._load()

        # Local config falls back to the global file
        self._global_config: dict[str, Any] = {}
        if not self.is_global:
            global_config_file = Path.home() / CONFIG_DIR_NAME / "config.yaml"
            if global_config_file.exists() and global_config_file != self.config_file:
                try:
                    with open(global_config_file, "r") as f:
                        loaded = yaml.safe_load(f) or {}
                except (OSError, yaml.YAMLError) as e:
                    logger.warning("Failed to load global config", error=str(e))
                else:
                    if isinstance(loaded, dict):
                        self._global_config = loaded
                    else:
                        logger.warning(
                            "Ignoring global config that is not a mapping", config_file=str(global_config_file)
                        )

        logger.debug("Config initialized", config_file=str(self.config_file), is_global=self.is_global)

    def _load(self) -> dict[str, Any]:
        """Load configuration from YAML file.

        Returns:
            Configuration dictionary
        """
        if not self.config_file.exists():
            logger.debug("Config file does not exist, initializing empty config")
            return {}

        try:
            with open(self.config_file, "r") as f:
                config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error("Failed to load config", error=str(e))
            raise ValidationError(f"Failed to load config from {self.config_file}: {e}") from e

        if not isinstance(config, dict):
            logger.error("Config is not a mapping", config_file=str(self.config_file))
            raise ValidationError(f"Failed to load config from {self.config_file}: expected a mapping of keys")
        logger.debug("Config loaded successfully", keys=list(config.keys()))
        return config

    def _save(self) -> None:
        """Save configuration to YAML file."""
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, "w") as f:
                yaml.safe_dump(self._config, f, default_flow_style=False, sort_keys=False)
            logger.debug("Config saved successfully")
        except OSError as e:
            logger.error("Failed to save config", error=str(e))
            raise ValidationError(f"Failed to save config to {self.config_file}: {e}") from e

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value.

        For local config, checks local config first, then falls back to global config.

        Args:
            key: Configuration key
            default: Default value if key doesn't exist

        Returns:
            Configuration value or default
        """
        if key in self._config:
            logger.debug("Getting config value from local", key=key)
            return self._config[key]

        if not self.is_global and key in self._global_config:
            logger.debug("Getting config value from global", key=key)
            return self._global_config[key]

        logger.debug("Config value not found", key=key)
        return default

    def set(self, key: str, value: str) -> Any:
        """Set a configuration value.

        Args:
            key: One of the known keys (data_dir, backup.enabled, backup.max_backups)
            value: Configuration value, converted to the key's type before saving

        Returns:
            The value as stored
        """
        logger.debug("Setting config value", key=key)
        stored = convert_value(key, value)
        self._config[key] = stored
        self._save()
        return stored

    def unset(self, key: str) -> None:
        """Remove a configuration value.

        Args:
            key: Configuration key
        """
        logger.debug("Unsetting config value", key=key)
        if key in self._config:
            del self._config[key]
            self._save()

    def list(self) -> dict[str, Any]:
        """List all configuration settings.

        For local config, merges global config with local config (local takes precedence).

        Returns:
            Dictionary of all config settings
        """
        if self.is_global:
            logger.debug("Listing global config values", count=len(self._config))
            return self._config.copy()

        merged = self._global_config.copy()
        merged.update(self._config)
        logger.debug("Listing merged config values", count=len(merged))
        return merged

    def source(self, key: str) -> str:
        """Name where the effective value of ``key`` comes from: local, global or default."""
        if key in self._config:
            return "global" if self.is_global else "local"
        if not self.is_global and key in self._global_config:
            return "global"
        return "default"

    def resolved(self) -> dict[str, tuple[Any, str]]:
        """Effective value and source of every known key."""
        return {key: (self.get(key, default), self.source(key)) for key, default in DEFAULTS.items()}

    def settings(self) -> Settings:
        """Resolve the storage settings, applying defaults for missing keys."""
        return Settings(
            data_dir=Path(str(self.get("data_dir", DEFAULT_DATA_DIR))).expanduser(),
            backup_enabled=_as_bool("backup.enabled", self.get("backup.enabled", True)),
            max_backups=_as_count("backup.max_backups", self.get("backup.max_backups", DEFAULT_MAX_BACKUPS)),
        )


def get_config(use_global: bool = False) -> Config:
    """Get a configuration instance.

    Args:
        use_global: If True, return global config. If False, return local config with global fallback.

    Returns:
        Config instance
    """
    return Config(use_global=use_global)
