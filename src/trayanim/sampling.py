"""Stride-based frame sampling under a performance profile."""

import logging
import math
from dataclasses import dataclass, field
from typing import Any

from .config import DEFAULT_FRAME_DELAY_MS
from .profiles import PerformanceProfile

logger = logging.getLogger(__name__)


@dataclass
class SamplingResult:
    """Result of a stride sampling pass."""

    sampled_indices: list[int]  # Indices of kept frames, ascending
    total_frames: int  # Frames available before sampling
    stride: int  # Step between kept frames
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def num_sampled(self) -> int:
        return len(self.sampled_indices)

    @property
    def sampling_rate(self) -> float:
        if self.total_frames == 0:
            return 0.0
        return self.num_sampled / self.total_frames

    def is_full_sampling(self) -> bool:
        return self.num_sampled == self.total_frames


def compute_stride(total_frames: int, max_frames: int) -> int:
    """Return ``ceil(total_frames / max_frames)``, never less than 1.

    Raises:
        ValueError: If max_frames is not positive or total_frames is negative
    """
    if max_frames <= 0:
        raise ValueError(f"max_frames must be positive, got {max_frames}")
    if total_frames < 0:
        raise ValueError(f"total_frames must be non-negative, got {total_frames}")
    return max(1, math.ceil(total_frames / max_frames))


def sample_indices(total_frames: int, max_frames: int) -> SamplingResult:
    """Select frames 0, stride, 2*stride, ... keeping at most ``max_frames``."""
    stride = compute_stride(total_frames, max_frames)
    indices = list(range(0, total_frames, stride))[:max_frames]

    result = SamplingResult(
        sampled_indices=indices,
        total_frames=total_frames,
        stride=stride,
        metadata={"max_frames": max_frames},
    )
    if not result.is_full_sampling():
        logger.debug(
            f"Sampled {result.num_sampled}/{total_frames} frames (stride {stride})"
        )
    return result


def sample_for_profile(total_frames: int, profile: PerformanceProfile) -> SamplingResult:
    return sample_indices(total_frames, profile.max_frames)


def clamp_delay(declared_delay: int | None, min_frame_delay: int) -> int:
    """Apply the 100 ms default for missing delays and the profile minimum."""
    return max(declared_delay or DEFAULT_FRAME_DELAY_MS, min_frame_delay)
