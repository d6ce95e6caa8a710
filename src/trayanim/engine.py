"""The animation engine: one owned context for the whole tray pipeline.

``AnimationEngine`` holds the settings, the profile store, the live render
sequence and the scheduler. Every operation that replaces the render
sequence runs under one lock and follows the same order: stop the
scheduler, swap the sequence, restart the scheduler.

Operations return booleans (or an empty preview) instead of raising, and
leave the stored asset and the live sequence untouched when they fail.
"""

import logging
import threading
from pathlib import Path

from .config import (
    MAX_ICON_SIZE,
    MIN_ICON_SIZE,
    PathConfig,
    TraySettings,
    load_settings,
    save_settings,
)
from .error_handling import (
    TrayAnimError,
    handle_error,
    log_info_with_context,
    log_warning_with_context,
)
from .formats import ImageFormat, sniff_format
from .pipeline import (
    PreviewResult,
    build_preview,
    load_render_sequence,
    save_cropped_asset,
)
from .profiles import PerformanceProfile, ProfileStore
from .resize import CropRect
from .scheduler import AnimationScheduler, IconSurface, RenderFrame, TimerFactory

logger = logging.getLogger(__name__)


class AnimationEngine:
    """Pipeline context shared by the tray shell and the editor."""

    def __init__(
        self,
        paths: PathConfig | None = None,
        settings: TraySettings | None = None,
        surface: IconSurface | None = None,
        timer_factory: TimerFactory | None = None,
    ):
        self.paths = paths or PathConfig()
        self.settings = settings or TraySettings()
        self.profiles = ProfileStore(self.settings.performance_mode)
        self.scheduler = AnimationScheduler(timer_factory=timer_factory, surface=surface)
        self._sequence: list[RenderFrame] = []
        self._lock = threading.RLock()

    @property
    def profile(self) -> PerformanceProfile:
        return self.profiles.active

    @property
    def sequence(self) -> list[RenderFrame]:
        return list(self._sequence)

    @property
    def frame_count(self) -> int:
        return len(self._sequence)

    def start(self) -> bool:
        """Load persisted settings, decode the stored asset and animate it."""
        self.settings = load_settings(self.paths.SETTINGS_PATH)
        self.profiles.select(self.settings.performance_mode)
        if not self.paths.ASSET_PATH.exists():
            log_info_with_context(
                "No stored icon asset yet", {"path": self.paths.ASSET_PATH}, logger
            )
            return False
        return self.reload()

    def attach_surface(self, surface: IconSurface | None) -> None:
        """Replace the tray surface, restarting the animation on the new one."""
        with self._lock:
            self.scheduler.stop()
            self.scheduler.attach_surface(surface)
            self.scheduler.start(self._sequence)

    def detect_and_load(self, data: bytes) -> PreviewResult:
        """Sniff ``data`` and decode a full-resolution preview for the editor."""
        try:
            return build_preview(data)
        except (TrayAnimError, OSError) as e:
            handle_error(e, "build preview", logger=logger, reraise=False)
            return PreviewResult(sniff_format(data), None)

    def process_and_save(
        self, source_path: Path, crop: CropRect, display_size: int
    ) -> bool:
        """Crop ``source_path`` into the stored asset and show it.

        Returns True only when the new asset was stored and is now being
        displayed. The display size is persisted only when the save
        succeeds. If the save succeeds but decoding the new asset for
        display fails, the new asset and size stay on disk, the previous
        sequence keeps playing, and False is returned.
        """
        if not MIN_ICON_SIZE <= display_size <= MAX_ICON_SIZE:
            logger.error(
                f"Display size {display_size} outside {MIN_ICON_SIZE}-{MAX_ICON_SIZE}"
            )
            return False

        with self._lock:
            try:
                result = save_cropped_asset(
                    Path(source_path), crop, self.profile, self.paths.ASSET_PATH
                )
            except (TrayAnimError, OSError) as e:
                handle_error(
                    e,
                    "process and save image",
                    context={"source": source_path, "crop": crop},
                    logger=logger,
                    reraise=False,
                )
                return False

            log_info_with_context(
                "Saved icon asset",
                {
                    "format": result.format.value,
                    "frames": result.frame_count,
                    "crop": result.crop,
                },
                logger,
            )
            self.settings.size = display_size
            save_settings(self.settings, self.paths.SETTINGS_PATH)
            if not self.reload():
                log_warning_with_context(
                    "Icon asset was saved but could not be displayed",
                    {"path": self.paths.ASSET_PATH},
                    logger,
                )
                return False
            return True

    def select_profile(self, name: str) -> PerformanceProfile:
        """Select and persist a performance mode. Applies on the next load."""
        with self._lock:
            profile = self.profiles.select(name)
            self.settings.performance_mode = profile.name
            save_settings(self.settings, self.paths.SETTINGS_PATH)
            return profile

    def reload(self) -> bool:
        """Re-decode the stored asset at the current size and profile.

        The previous sequence is kept, and restarted, if decoding fails.
        """
        with self._lock:
            self.scheduler.stop()
            try:
                new_sequence = load_render_sequence(
                    self.paths.ASSET_PATH, self.settings.size, self.profile
                )
            except (TrayAnimError, OSError) as e:
                handle_error(
                    e,
                    "reload tray icon",
                    context={"path": self.paths.ASSET_PATH},
                    logger=logger,
                    reraise=False,
                )
                self.scheduler.start(self._sequence)
                return False

            self._clear_sequence()
            self._sequence = new_sequence
            self.scheduler.start(self._sequence)
            logger.info(self.status_summary())
            return True

    def shutdown(self) -> None:
        """Stop animating and release the render sequence before exit."""
        with self._lock:
            self.scheduler.stop()
            self._clear_sequence()

    def status_summary(self) -> str:
        profile = self.profile
        return (
            f"{profile.label} | Size: {self.settings.size}px | "
            f"Frames: {self.frame_count}/{profile.max_frames}"
        )

    def stored_asset_format(self) -> ImageFormat:
        """Sniff the stored asset; UNKNOWN when it is missing or unreadable."""
        try:
            with open(self.paths.ASSET_PATH, "rb") as f:
                return sniff_format(f.read(4))
        except OSError:
            return ImageFormat.UNKNOWN

    def _clear_sequence(self) -> None:
        for frame in self._sequence:
            frame.image.close()
        self._sequence = []
