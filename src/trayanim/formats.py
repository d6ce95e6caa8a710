"""Content sniffing for the three supported image formats.

Formats are always identified by magic bytes, never by file extension or a
caller-supplied type.
"""

from enum import Enum


class ImageFormat(Enum):
    """Closed set of recognised image formats."""

    GIF = "gif"
    JPG = "jpg"
    PNG = "png"
    UNKNOWN = "unknown"

    @property
    def is_animated_container(self) -> bool:
        return self is ImageFormat.GIF


def sniff_format(data: bytes) -> ImageFormat:
    """Classify a byte buffer by its first four bytes.

    ``47494638`` is GIF, a ``ffd8`` prefix is JPEG and ``89504e47`` is PNG.
    Anything else, including buffers shorter than four bytes, is UNKNOWN.
    """
    if len(data) < 4:
        return ImageFormat.UNKNOWN

    header = bytes(data[:4]).hex()
    if header == "47494638":
        return ImageFormat.GIF
    if header.startswith("ffd8"):
        return ImageFormat.JPG
    if header == "89504e47":
        return ImageFormat.PNG
    return ImageFormat.UNKNOWN
