"""Cropping and square resizing of frames."""

import math
from dataclasses import dataclass

from PIL import Image

from .error_handling import OperationFailed
from .profiles import ResizeQuality

RESAMPLING_FILTERS = {
    ResizeQuality.GOOD: Image.Resampling.BILINEAR,
    ResizeQuality.BEST: Image.Resampling.LANCZOS,
}


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


@dataclass(frozen=True)
class CropRect:
    """Integer crop rectangle in full-canvas coordinates."""

    x: int
    y: int
    width: int
    height: int

    @classmethod
    def from_floats(cls, x: float, y: float, width: float, height: float) -> "CropRect":
        """Build a rectangle from editor coordinates, rounding half up."""
        return cls(
            _round_half_up(x),
            _round_half_up(y),
            _round_half_up(width),
            _round_half_up(height),
        )

    @classmethod
    def parse(cls, text: str) -> "CropRect":
        """Parse ``"x,y,width,height"``.

        Raises:
            ValueError: If the text does not hold four numbers
        """
        parts = [p.strip() for p in text.split(",")]
        if len(parts) != 4:
            raise ValueError(f"Expected 'x,y,width,height', got {text!r}")
        x, y, width, height = (float(p) for p in parts)
        return cls.from_floats(x, y, width, height)

    def clamp(self, canvas_width: int, canvas_height: int) -> "CropRect":
        """Intersect with the canvas.

        Raises:
            OperationFailed: If the intersection is empty
        """
        x0 = max(0, self.x)
        y0 = max(0, self.y)
        x1 = min(canvas_width, self.x + self.width)
        y1 = min(canvas_height, self.y + self.height)
        if x1 <= x0 or y1 <= y0:
            raise OperationFailed(
                f"Crop {self} does not overlap the {canvas_width}x{canvas_height} canvas",
                context={"crop": self, "canvas": (canvas_width, canvas_height)},
            )
        return CropRect(x0, y0, x1 - x0, y1 - y0)

    @property
    def box(self) -> tuple[int, int, int, int]:
        return (self.x, self.y, self.x + self.width, self.y + self.height)


def crop_frame(image: Image.Image, crop: CropRect) -> Image.Image:
    """Crop ``image`` to ``crop`` after clamping it to the image bounds."""
    clamped = crop.clamp(image.width, image.height)
    return image.crop(clamped.box)


def resize_frame(
    image: Image.Image, size: int, quality: ResizeQuality = ResizeQuality.GOOD
) -> Image.Image:
    """Scale ``image`` to a ``size`` x ``size`` square."""
    if size <= 0:
        raise ValueError(f"size must be positive, got {size}")
    if image.size == (size, size):
        return image.copy()
    return image.resize((size, size), RESAMPLING_FILTERS[quality])
