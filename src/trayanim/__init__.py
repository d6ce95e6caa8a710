"""TrayAnim - animated tray icons from GIF, PNG and JPEG sources."""

__version__: str = "0.1.0"
__author__: str = "TrayAnim Team"
__email__: str = "team@trayanim.example"

# Public re-exports for convenience ---------------------------------------------------

from .compositor import CompositeFrame, Compositor, iter_composites
from .decoder import DisposalMethod, GifStream, RawPatch, decode_gif
from .engine import AnimationEngine
from .error_handling import (
    DecodeError,
    OperationFailed,
    TrayAnimError,
)
from .formats import ImageFormat, sniff_format
from .profiles import PROFILES, PerformanceProfile, ProfileStore, get_profile
from .resize import CropRect
from .sampling import clamp_delay, compute_stride, sample_indices
from .scheduler import (
    AnimationScheduler,
    ManualTimerFactory,
    RenderFrame,
    SchedulerState,
)

__all__ = [
    "AnimationEngine",
    "AnimationScheduler",
    "CompositeFrame",
    "Compositor",
    "CropRect",
    "DecodeError",
    "DisposalMethod",
    "GifStream",
    "ImageFormat",
    "ManualTimerFactory",
    "OperationFailed",
    "PROFILES",
    "PerformanceProfile",
    "ProfileStore",
    "RawPatch",
    "RenderFrame",
    "SchedulerState",
    "TrayAnimError",
    "clamp_delay",
    "compute_stride",
    "decode_gif",
    "get_profile",
    "iter_composites",
    "sample_indices",
    "sniff_format",
]
