"""Performance profiles for the tray animation pipeline.

A profile bounds how much of an animation is kept resident: the number of
frames, the fastest allowed frame delay, the resize quality and the PNG
compression level used for static assets.
"""

import logging
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class ResizeQuality(Enum):
    """Two-level resize quality hint."""

    GOOD = "good"
    BEST = "best"


@dataclass(frozen=True)
class PerformanceProfile:
    """Frame budget and cost settings for one performance mode."""

    name: str
    max_frames: int
    min_frame_delay: int  # milliseconds
    quality: ResizeQuality
    compression_level: int
    label: str
    description: str

    def __post_init__(self) -> None:
        if self.max_frames < 1:
            raise ValueError(f"max_frames must be at least 1, got {self.max_frames}")
        if self.min_frame_delay < 0:
            raise ValueError(
                f"min_frame_delay must be non-negative, got {self.min_frame_delay}"
            )
        if not 0 <= self.compression_level <= 9:
            raise ValueError(
                f"compression_level must be between 0 and 9, got {self.compression_level}"
            )


LIGHT_PROFILE = PerformanceProfile(
    name="light",
    max_frames=15,
    min_frame_delay=80,
    quality=ResizeQuality.GOOD,
    compression_level=9,
    label="Light",
    description="~100-150MB RAM",
)

BALANCED_PROFILE = PerformanceProfile(
    name="balanced",
    max_frames=30,
    min_frame_delay=50,
    quality=ResizeQuality.GOOD,
    compression_level=6,
    label="Balanced",
    description="~150-250MB RAM",
)

PERFORMANCE_PROFILE = PerformanceProfile(
    name="performance",
    max_frames=60,
    min_frame_delay=30,
    quality=ResizeQuality.BEST,
    compression_level=3,
    label="Performance",
    description="~300-500MB RAM",
)

PROFILES: dict[str, PerformanceProfile] = {
    profile.name: profile
    for profile in (LIGHT_PROFILE, BALANCED_PROFILE, PERFORMANCE_PROFILE)
}

DEFAULT_PROFILE_NAME = BALANCED_PROFILE.name


def get_profile(name: str | None) -> PerformanceProfile:
    """Look up a profile by name, falling back to ``balanced``."""
    if not isinstance(name, str):
        return PROFILES[DEFAULT_PROFILE_NAME]
    return PROFILES.get(name, PROFILES[DEFAULT_PROFILE_NAME])


class ProfileStore:
    """Holds the three named profiles and the currently selected one.

    Selecting a profile never reprocesses anything; callers pick up the new
    profile on their next load or save.
    """

    def __init__(self, selected: str | None = None):
        self._active = get_profile(selected)

    @property
    def active(self) -> PerformanceProfile:
        return self._active

    @property
    def active_name(self) -> str:
        return self._active.name

    def select(self, name: str | None) -> PerformanceProfile:
        profile = get_profile(name)
        if name != profile.name:
            logger.warning(
                f"Unknown performance mode {name!r}, using {profile.name!r}"
            )
        self._active = profile
        return profile

    def __iter__(self):
        return iter(PROFILES.values())
