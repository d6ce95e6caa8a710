"""Configuration settings for TrayAnim."""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from .error_handling import log_warning_with_context
from .io import load_json, save_json
from .profiles import DEFAULT_PROFILE_NAME, PROFILES

logger = logging.getLogger(__name__)

MIN_ICON_SIZE = 16
MAX_ICON_SIZE = 128
DEFAULT_ICON_SIZE = 32

# Display delay for a static (non-animated) asset, in milliseconds
STATIC_FRAME_DELAY_MS = 1000

# Delay assumed for GIF frames that declare none
DEFAULT_FRAME_DELAY_MS = 100


@dataclass
class TraySettings:
    """Persisted user settings: tray icon size and performance mode."""

    size: int = DEFAULT_ICON_SIZE
    performance_mode: str = DEFAULT_PROFILE_NAME

    def __post_init__(self) -> None:
        if isinstance(self.size, bool) or not isinstance(self.size, int):
            raise ValueError(f"size must be an integer, got {self.size!r}")
        if not MIN_ICON_SIZE <= self.size <= MAX_ICON_SIZE:
            raise ValueError(
                f"size must be between {MIN_ICON_SIZE} and {MAX_ICON_SIZE}, got {self.size}"
            )

        if not isinstance(self.performance_mode, str):
            raise ValueError(
                f"performance_mode must be a string, got {self.performance_mode!r}"
            )
        # Unknown modes resolve the same way ProfileStore does
        if self.performance_mode not in PROFILES:
            self.performance_mode = DEFAULT_PROFILE_NAME

    def to_dict(self) -> dict:
        return {"size": self.size, "performanceMode": self.performance_mode}


@dataclass
class PathConfig:
    """Configuration for the data directory and the files stored in it.

    When ``DATA_DIR`` is not given it comes from the ``TRAYANIM_DATA_DIR``
    environment variable, then ``~/.trayanim``. The asset, settings and log
    locations are derived from it unless given explicitly.
    """

    DATA_DIR: Path | None = None
    ASSET_PATH: Path | None = None
    SETTINGS_PATH: Path | None = None
    LOGS_DIR: Path | None = None

    def __post_init__(self) -> None:
        if self.DATA_DIR is None:
            env_value = os.getenv("TRAYANIM_DATA_DIR")
            self.DATA_DIR = Path(env_value) if env_value else Path.home() / ".trayanim"
        self.DATA_DIR = Path(self.DATA_DIR)

        if self.ASSET_PATH is None:
            self.ASSET_PATH = self.DATA_DIR / "tray-icon.processed"
        if self.SETTINGS_PATH is None:
            self.SETTINGS_PATH = self.DATA_DIR / "settings.json"
        if self.LOGS_DIR is None:
            self.LOGS_DIR = self.DATA_DIR / "logs"


def load_settings(settings_path: Path) -> TraySettings:
    """Load settings from ``settings_path``.

    Never fails: a missing file, unparsable JSON or invalid values all
    produce the default settings.
    """
    if not settings_path.exists():
        return TraySettings()

    try:
        data = load_json(settings_path)
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        return TraySettings(
            size=data.get("size") or DEFAULT_ICON_SIZE,
            performance_mode=data.get("performanceMode") or DEFAULT_PROFILE_NAME,
        )
    except (OSError, ValueError, json.JSONDecodeError) as e:
        log_warning_with_context(
            f"Ignoring unreadable settings, using defaults: {e}",
            context={"path": settings_path},
            logger=logger,
        )
        return TraySettings()


def save_settings(settings: TraySettings, settings_path: Path) -> bool:
    """Persist settings atomically. Failures are logged, not raised."""
    try:
        save_json(settings.to_dict(), settings_path)
        return True
    except OSError as e:
        log_warning_with_context(
            f"Could not save settings: {e}",
            context={"path": settings_path},
            logger=logger,
        )
        return False


DEFAULT_SETTINGS = TraySettings()
DEFAULT_PATH_CONFIG = PathConfig()
