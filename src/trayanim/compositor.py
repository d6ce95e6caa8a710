"""Reconstruct full frames by stacking GIF patches on a persistent canvas.

Only two disposal behaviours are modelled. When the *previous* patch asked
for RESTORE_BACKGROUND the canvas is cleared to transparent before the
current patch is drawn; every other disposal method leaves the canvas
as-is. RESTORE_PREVIOUS is therefore treated like "no disposal".
"""

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

import numpy as np
from PIL import Image

from .decoder import DisposalMethod, GifStream, RawPatch

logger = logging.getLogger(__name__)


@dataclass
class CompositeFrame:
    """Full-canvas snapshot taken right after one patch was drawn."""

    index: int
    image: Image.Image  # RGBA, logical canvas size
    delay: int  # declared delay of the patch, milliseconds


class Compositor:
    """Owns the accumulation canvas for one decode run.

    Use as a context manager so the canvas is released on every exit path:

        with Compositor(stream.width, stream.height) as compositor:
            for patch in stream.patches:
                compositor.apply(patch)
    """

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self._canvas: np.ndarray | None = np.zeros((height, width, 4), dtype=np.uint8)
        self._pending_clear = False

    def __enter__(self) -> "Compositor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    @property
    def canvas(self) -> np.ndarray:
        if self._canvas is None:
            raise RuntimeError("Compositor canvas has been released")
        return self._canvas

    def release(self) -> None:
        self._canvas = None

    def apply(self, patch: RawPatch) -> None:
        """Draw ``patch`` onto the canvas, honouring the previous disposal."""
        canvas = self.canvas
        if self._pending_clear:
            canvas[:] = 0

        # Clip the patch rectangle to the logical screen
        x0, y0 = patch.left, patch.top
        x1 = min(self.width, x0 + patch.width)
        y1 = min(self.height, y0 + patch.height)
        if x1 > x0 and y1 > y0:
            source = patch.pixels[: y1 - y0, : x1 - x0]
            region = canvas[y0:y1, x0:x1]
            # GIF alpha is binary, so source-over reduces to a masked copy
            opaque = source[..., 3] > 0
            region[opaque] = source[opaque]

        self._pending_clear = patch.disposal == DisposalMethod.RESTORE_BACKGROUND

    def snapshot(self) -> Image.Image:
        """Copy the current canvas into a standalone RGBA image."""
        return Image.fromarray(self.canvas.copy())


def iter_composites(
    stream: GifStream, indices: Iterable[int] | None = None
) -> Iterator[CompositeFrame]:
    """Yield composited frames for ``indices`` (all frames when None).

    Every patch is drawn in file order so that skipped frames still
    contribute their pixels; only the requested indices are snapshotted.
    The canvas is dropped once the generator finishes or is closed.
    """
    wanted = None if indices is None else set(indices)
    if wanted is not None and not wanted:
        return
    last_wanted = None if wanted is None else max(wanted)

    with Compositor(stream.width, stream.height) as compositor:
        for index, patch in enumerate(stream.patches):
            compositor.apply(patch)
            if wanted is None or index in wanted:
                yield CompositeFrame(
                    index=index, image=compositor.snapshot(), delay=patch.delay
                )
            if last_wanted is not None and index >= last_wanted:
                break


def first_composite(stream: GifStream) -> CompositeFrame:
    """Composite only the first frame of ``stream``."""
    return next(iter_composites(stream, [0]))
