"""Display and save pipelines.

Display path: bytes -> sniff -> decode -> composite -> sample -> resize,
producing the render sequence the scheduler cycles through.

Save path: source file -> sniff -> decode -> composite -> sample -> crop ->
encode, replacing the stored icon asset.

Both paths raise :class:`DecodeError`, :class:`OperationFailed` or
``OSError``; :class:`trayanim.engine.AnimationEngine` turns those into
boolean outcomes.
"""

import io
import logging
from dataclasses import dataclass
from pathlib import Path

from PIL import Image

from .compositor import first_composite, iter_composites
from .config import STATIC_FRAME_DELAY_MS
from .decoder import decode_gif
from .encoder import write_animated_asset, write_static_asset
from .error_handling import DecodeError, OperationFailed, error_context
from .formats import ImageFormat, sniff_format
from .profiles import PerformanceProfile
from .resize import CropRect, resize_frame
from .sampling import clamp_delay, sample_for_profile
from .scheduler import RenderFrame

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RawAsset:
    """Bytes read from storage together with their sniffed format."""

    data: bytes
    format: ImageFormat

    @classmethod
    def from_bytes(cls, data: bytes) -> "RawAsset":
        return cls(data=data, format=sniff_format(data))

    @classmethod
    def from_path(cls, path: Path) -> "RawAsset":
        """Read ``path``.

        Raises:
            OSError: If the file is missing or unreadable
        """
        return cls.from_bytes(Path(path).read_bytes())


@dataclass
class PreviewResult:
    format: ImageFormat
    image: Image.Image | None


@dataclass
class SaveResult:
    format: ImageFormat
    frame_count: int
    crop: CropRect
    bytes_written: int


def open_static(data: bytes) -> Image.Image:
    """Decode a JPEG or PNG buffer into a detached RGBA image."""
    with error_context("decode static image", DecodeError, logger=logger):
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            return img.convert("RGBA")


def _require_supported(asset: RawAsset) -> None:
    if asset.format is ImageFormat.UNKNOWN:
        raise DecodeError("Unsupported image format", context={"bytes": len(asset.data)})


def build_preview(data: bytes) -> PreviewResult:
    """Full-resolution preview: the first composited frame for GIFs."""
    asset = RawAsset.from_bytes(data)
    _require_supported(asset)

    if asset.format is ImageFormat.GIF:
        stream = decode_gif(asset.data)
        return PreviewResult(asset.format, first_composite(stream).image)
    return PreviewResult(asset.format, open_static(asset.data))


def build_render_sequence(
    asset: RawAsset, size: int, profile: PerformanceProfile
) -> list[RenderFrame]:
    """Decode ``asset`` into display-size frames bounded by ``profile``.

    Raises:
        DecodeError: If the asset cannot be decoded
        OperationFailed: If no frames were produced
    """
    _require_supported(asset)
    frames: list[RenderFrame] = []

    if asset.format is ImageFormat.GIF:
        stream = decode_gif(asset.data)
        sampling = sample_for_profile(stream.frame_count, profile)
        for composite in iter_composites(stream, sampling.sampled_indices):
            try:
                frames.append(
                    RenderFrame(
                        image=resize_frame(composite.image, size, profile.quality),
                        delay=clamp_delay(composite.delay, profile.min_frame_delay),
                    )
                )
            finally:
                composite.image.close()
    else:
        image = open_static(asset.data)
        try:
            frames.append(
                RenderFrame(
                    image=resize_frame(image, size, profile.quality),
                    delay=STATIC_FRAME_DELAY_MS,
                )
            )
        finally:
            image.close()

    if not frames:
        raise OperationFailed("Asset produced no frames")

    logger.debug(
        f"Built render sequence: {len(frames)} frame(s) at {size}px ({profile.name})"
    )
    return frames


def load_render_sequence(
    asset_path: Path, size: int, profile: PerformanceProfile
) -> list[RenderFrame]:
    """Read the stored asset and build its render sequence."""
    return build_render_sequence(RawAsset.from_path(asset_path), size, profile)


def save_cropped_asset(
    source_path: Path,
    crop: CropRect,
    profile: PerformanceProfile,
    asset_path: Path,
) -> SaveResult:
    """Crop ``source_path`` and store it as the new icon asset.

    GIF frames are composited on the full canvas first and cropped
    afterwards, so the crop always refers to full-canvas coordinates.
    Crops reaching outside the canvas are clamped to it.

    Raises:
        OSError: If the source cannot be read
        DecodeError: If the source cannot be decoded
        OperationFailed: If the crop is empty or encoding fails
    """
    asset = RawAsset.from_path(source_path)
    _require_supported(asset)

    if asset.format is ImageFormat.GIF:
        stream = decode_gif(asset.data)
        clamped = crop.clamp(stream.width, stream.height)
        sampling = sample_for_profile(stream.frame_count, profile)

        frames: list[Image.Image] = []
        delays: list[int] = []
        try:
            for composite in iter_composites(stream, sampling.sampled_indices):
                try:
                    frames.append(composite.image.crop(clamped.box))
                    delays.append(clamp_delay(composite.delay, profile.min_frame_delay))
                finally:
                    composite.image.close()

            if not frames:
                raise OperationFailed("Source GIF produced no frames")
            written = write_animated_asset(frames, delays, asset_path)
        finally:
            for frame in frames:
                frame.close()
        return SaveResult(asset.format, len(delays), clamped, written)

    image = open_static(asset.data)
    try:
        clamped = crop.clamp(image.width, image.height)
        with image.crop(clamped.box) as cropped:
            written = write_static_asset(cropped, asset_path, profile.compression_level)
    finally:
        image.close()
    return SaveResult(asset.format, 1, clamped, written)
