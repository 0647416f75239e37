"""Configuration loader with multi-source support."""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Type, TypeVar

import platformdirs
import toml
from pydantic import BaseModel

logger = logging.getLogger(__name__)

T = TypeVar('T', bound=BaseModel)


class ConfigLoader:
    """Loads configuration from multiple sources with priority.

    Sources, lowest priority first:
    1. defaults.toml (explicit path, ./config, or ~/.config/<app>)
    2. System config (/etc/<app>/config.toml or %PROGRAMDATA%)
    3. User config (platformdirs user config dir)
    4. Environment variables (<APP>_<SECTION>_<KEY>)
    """

    def __init__(self, app_name: str = "mtsfv", config_class: Optional[Type[T]] = None) -> None:
        self.app_name = app_name
        self.config_class = config_class
        self._config: Optional[T] = None

    def load(self, defaults_path: Optional[Path] = None) -> T:
        """Load configuration from all sources.

        Args:
            defaults_path: Optional path to defaults.toml file

        Returns:
            Validated configuration object (or a plain dict without config_class)
        """
        config_dict = self._load_defaults(defaults_path)

        system_config = self._load_system_config()
        if system_config:
            config_dict = self._deep_merge(config_dict, system_config)

        user_config = self._load_user_config()
        if user_config:
            config_dict = self._deep_merge(config_dict, user_config)

        config_dict = self._apply_env_overrides(config_dict)

        if self.config_class:
            self._config = self.config_class(**config_dict)
        else:
            self._config = config_dict

        return self._config

    def _load_defaults(self, defaults_path: Optional[Path] = None) -> Dict[str, Any]:
        """Load default configuration shipped with app."""
        if defaults_path and defaults_path.exists():
            logger.debug(f"Loading defaults from {defaults_path}")
            return toml.load(defaults_path)

        possible_paths = [
            Path.cwd() / "config" / "defaults.toml",
            Path.home() / ".config" / self.app_name / "defaults.toml",
        ]

        for path in possible_paths:
            if path.exists():
                logger.debug(f"Loading defaults from {path}")
                return toml.load(path)

        return {}

    def _system_config_path(self) -> Path:
        if os.name == "nt":
            return (
                Path(os.environ.get("PROGRAMDATA", "C:\\ProgramData"))
                / self.app_name
                / "config.toml"
            )
        return Path(f"/etc/{self.app_name}/config.toml")

    def _load_system_config(self) -> Optional[Dict[str, Any]]:
        """Load system-wide configuration."""
        system_path = self._system_config_path()
        if system_path.exists():
            return toml.load(system_path)
        return None

    def _load_user_config(self) -> Optional[Dict[str, Any]]:
        """Load user-specific configuration."""
        user_config_dir = platformdirs.user_config_dir(appname=self.app_name, appauthor=False)
        user_config_path = Path(user_config_dir) / "config.toml"

        logger.debug(
            f"Looking for user config: app_name={self.app_name}, "
            f"path={user_config_path}, exists={user_config_path.exists()}"
        )

        if user_config_path.exists():
            return toml.load(user_config_path)
        return None

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Override config with environment variables.

        Format: MTSFV_<SECTION>_<KEY>, where KEY may itself contain
        underscores (MTSFV_VERIFIER_CHUNK_SIZE -> verifier.chunk_size).
        """
        prefix = f"{self.app_name.upper().replace('-', '_')}_"

        for env_key, env_value in os.environ.items():
            if not env_key.startswith(prefix):
                continue

            parts = env_key[len(prefix):].lower().split("_", 1)
            if len(parts) != 2 or not all(parts):
                logger.debug(f"Ignoring malformed config variable {env_key}")
                continue

            section, key = parts
            current = config.setdefault(section, {})
            if not isinstance(current, dict):
                continue
            current[key] = self._convert_env_value(env_value)

        return config

    def _convert_env_value(self, value: str) -> Any:
        """Convert string environment variable to appropriate type."""
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        try:
            if "." in value:
                return float(value)
            return int(value)
        except ValueError:
            pass

        if "," in value:
            return [v.strip() for v in value.split(",")]

        return value

    def save_user_config(self, config: BaseModel) -> Path:
        """Save user configuration and return the path written."""
        user_config_dir = platformdirs.user_config_dir(appname=self.app_name, appauthor=False)
        user_config_path = Path(user_config_dir) / "config.toml"

        user_config_path.parent.mkdir(parents=True, exist_ok=True)

        config_dict = config.model_dump(exclude_none=True)
        with open(user_config_path, "w", encoding="utf-8") as f:
            toml.dump(config_dict, f)

        return user_config_path

    @property
    def config(self) -> T:
        """Get loaded configuration."""
        if self._config is None:
            self._config = self.load()
        return self._config
