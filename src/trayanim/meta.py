"""Metadata extraction and hashing for stored icon assets."""

import hashlib
from dataclasses import dataclass
from pathlib import Path

from .decoder import decode_gif
from .error_handling import DecodeError
from .formats import ImageFormat, sniff_format
from .pipeline import open_static


@dataclass
class AssetMetadata:
    """Metadata extracted from an icon asset or source image."""

    sha256: str
    filename: str
    format: ImageFormat
    kilobytes: float
    width: int
    height: int
    frame_count: int
    total_duration_ms: int
    loop_count: int | None = None


def compute_file_sha256(file_path: Path) -> str:
    """Compute SHA256 hash of a file.

    Args:
        file_path: Path to the file to hash

    Returns:
        Hexadecimal SHA256 hash string
    """
    sha256_hash = hashlib.sha256()
    with open(file_path, "rb") as f:
        for chunk in iter(lambda: f.read(4096), b""):
            sha256_hash.update(chunk)
    return sha256_hash.hexdigest()


def extract_asset_metadata(file_path: Path) -> AssetMetadata:
    """Extract metadata from an image file, sniffing its real format.

    Args:
        file_path: Path to a GIF, JPEG or PNG file (extension is ignored)

    Returns:
        AssetMetadata with dimensions, frame count and durations

    Raises:
        IOError: If file cannot be read
        DecodeError: If the file is not a decodable GIF/JPEG/PNG
    """
    if not file_path.exists():
        raise OSError(f"File not found: {file_path}")

    data = file_path.read_bytes()
    image_format = sniff_format(data)

    loop_count = None
    if image_format is ImageFormat.GIF:
        stream = decode_gif(data)
        width, height = stream.width, stream.height
        frame_count = stream.frame_count
        total_duration_ms = stream.total_duration_ms
        loop_count = stream.loop_count
    elif image_format is ImageFormat.UNKNOWN:
        raise DecodeError(f"Unsupported image format: {file_path}")
    else:
        with open_static(data) as image:
            width, height = image.size
        frame_count = 1
        total_duration_ms = 0

    return AssetMetadata(
        sha256=compute_file_sha256(file_path),
        filename=file_path.name,
        format=image_format,
        kilobytes=len(data) / 1024.0,
        width=width,
        height=height,
        frame_count=frame_count,
        total_duration_ms=total_duration_ms,
        loop_count=loop_count,
    )
