"""
Centralized configuration for flashdeck: process settings loaded from the
environment or a .env file, and the persisted user preferences file.
"""

import logging
import os
from pathlib import Path
from typing import Tuple, Union

import yaml
from pydantic import BaseModel, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import CorruptRecordError, RecordIOError
from .storage import DeckStorage

logger = logging.getLogger(__name__)

DEFAULT_THEME = "default"
THEMES: Tuple[str, ...] = ("default", "kanagawa-wave")
_THEME_ALIASES = {"kanagawa_wave": "kanagawa-wave", "kanagawa": "kanagawa-wave"}


def _default_config_dir() -> Path:
    if os.name == "nt":
        base = os.environ.get("APPDATA")
        if base:
            return Path(base)
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg)
    return Path.home() / ".config"


def get_default_config_path() -> Path:
    return _default_config_dir() / "flashdeck" / "config.yaml"


class Settings(BaseSettings):
    """
    Defines application settings, loaded from environment variables or .env files.
    """

    model_config = SettingsConfigDict(
        env_prefix="FLASHDECK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Overridden by FLASHDECK_DECKS_DIR.
    decks_dir: Path = DeckStorage.default_path()

    # Overridden by FLASHDECK_CONFIG_PATH.
    config_path: Path = get_default_config_path()


def normalize_theme(name: str) -> str:
    """Canonical theme name; anything unrecognised maps to the default theme."""
    key = name.strip().lower()
    key = _THEME_ALIASES.get(key, key)
    return key if key in THEMES else DEFAULT_THEME


class UserConfig(BaseModel):
    """User preferences that persist between runs."""

    theme: str = DEFAULT_THEME

    @field_validator("theme")
    @classmethod
    def _known_theme(cls, v: str) -> str:
        return normalize_theme(v)

    def next_theme(self) -> str:
        """The theme after the current one, wrapping around."""
        idx = THEMES.index(self.theme)
        return THEMES[(idx + 1) % len(THEMES)]

    @classmethod
    def load(cls, path: Union[str, Path]) -> "UserConfig":
        """
        Load preferences from ``path``, or defaults if the file does not exist.

        Raises:
            RecordIOError: If the file exists but cannot be read.
            CorruptRecordError: If the file is not a valid preferences mapping.
        """
        path = Path(path)
        if not path.exists():
            return cls()
        try:
            raw = yaml.safe_load(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise RecordIOError(
                f"Failed to read config file {path}: {e}", original_exception=e
            ) from e
        except yaml.YAMLError as e:
            raise CorruptRecordError(
                f"Failed to parse config file {path}: {e}", original_exception=e
            ) from e

        if raw is None:
            return cls()
        if not isinstance(raw, dict):
            raise CorruptRecordError(
                f"Config file {path} must contain a mapping, got {type(raw).__name__}."
            )
        try:
            return cls.model_validate(raw)
        except ValidationError as e:
            raise CorruptRecordError(
                f"Invalid config file {path}: {e}", original_exception=e
            ) from e

    def save(self, path: Union[str, Path]) -> None:
        """Write preferences to ``path`` as YAML, creating parent directories."""
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(
                yaml.safe_dump(self.model_dump(), sort_keys=False),
                encoding="utf-8",
            )
        except OSError as e:
            raise RecordIOError(
                f"Failed to write config file {path}: {e}", original_exception=e
            ) from e
        logger.debug(f"Saved user config to {path}")
