"""Serialize processed frames into the single stored icon asset.

Animated sources are written as a looping GIF, static sources as PNG. The
asset file is replaced atomically, so a failed encode never leaves a
partially written asset behind.

The GIF writer is the counterpart of :mod:`trayanim.decoder`: every frame
is written as a full-canvas image with its own color table, so N frames in
always decode back to N frames, repeated frames included.
"""

import io
import logging
import struct
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from PIL import Image

from .decoder import MAX_LZW_CODE_SIZE, DisposalMethod
from .error_handling import OperationFailed, error_context
from .io import write_bytes_atomic

logger = logging.getLogger(__name__)

GIF_INFINITE_LOOP = 0

# One palette slot stays free for the transparent index
MAX_PALETTE_COLORS = 255

# Pixels below this alpha are written as transparent
ALPHA_THRESHOLD = 128

MAX_DELAY_CS = 0xFFFF


@dataclass
class IndexedFrame:
    """A frame reduced to palette indices, ready for LZW compression."""

    indices: np.ndarray  # (height, width) uint8
    palette: np.ndarray  # (n, 3) uint8
    transparent_index: int | None = None

    @property
    def table_bits(self) -> int:
        entries = len(self.palette) + (1 if self.transparent_index is not None else 0)
        return max(1, (max(entries, 2) - 1).bit_length())

    def color_table(self) -> bytes:
        table = np.zeros((1 << self.table_bits, 3), dtype=np.uint8)
        table[: len(self.palette)] = self.palette
        return table.tobytes()


def has_transparency(frame: Image.Image) -> bool:
    if frame.mode != "RGBA":
        frame = frame.convert("RGBA")
    return frame.getchannel("A").getextrema()[0] < ALPHA_THRESHOLD


def plan_disposals(frames: Sequence[Image.Image]) -> list[DisposalMethod]:
    """Choose the disposal of each frame from the frame drawn after it.

    Disposal runs after a frame is shown and before the next one is drawn,
    so a frame is cleared only when its successor has transparent pixels
    that would otherwise show it. The last frame is followed by the first.
    """
    holes = [has_transparency(frame) for frame in frames]
    return [
        DisposalMethod.RESTORE_BACKGROUND
        if holes[(i + 1) % len(frames)]
        else DisposalMethod.NONE
        for i in range(len(frames))
    ]


def index_frame(frame: Image.Image) -> IndexedFrame:
    """Map a frame onto at most 255 colors plus a transparent index.

    Frames with few enough colors keep them exactly; others are reduced
    with Pillow's median-cut quantizer.
    """
    rgba = np.asarray(frame.convert("RGBA"))
    opaque = rgba[..., 3] >= ALPHA_THRESHOLD
    rgb = rgba[..., :3]

    packed = (
        (rgb[..., 0].astype(np.uint32) << 16)
        | (rgb[..., 1].astype(np.uint32) << 8)
        | rgb[..., 2].astype(np.uint32)
    )
    colors, inverse = np.unique(packed[opaque], return_inverse=True)

    if len(colors) <= MAX_PALETTE_COLORS:
        palette = np.stack(
            [(colors >> 16) & 0xFF, (colors >> 8) & 0xFF, colors & 0xFF], axis=-1
        ).astype(np.uint8)
        indices = np.zeros(opaque.shape, dtype=np.uint8)
        indices[opaque] = inverse.reshape(-1)
    else:
        quantized = Image.fromarray(np.ascontiguousarray(rgb)).quantize(
            colors=MAX_PALETTE_COLORS
        )
        indices = np.array(quantized, dtype=np.uint8)
        flat = quantized.getpalette()[: 3 * MAX_PALETTE_COLORS]
        palette = np.array(flat, dtype=np.uint8).reshape(-1, 3)

    transparent_index = None
    if not opaque.all():
        transparent_index = len(palette)
        indices[~opaque] = transparent_index
    return IndexedFrame(indices, palette, transparent_index)


def lzw_encode(indices: bytes, min_code_size: int) -> bytes:
    """Compress color indices into a GIF LZW code stream.

    Codes are packed least-significant-bit first. The code width grows once
    a code that needs the extra bit has been assigned, and a clear code
    restarts the table when all 4096 codes are in use.
    """
    clear_code = 1 << min_code_size
    end_code = clear_code + 1

    out = bytearray()
    datum = 0
    bits = 0
    code_size = min_code_size + 1

    def emit(code: int) -> None:
        nonlocal datum, bits
        datum |= code << bits
        bits += code_size
        while bits >= 8:
            out.append(datum & 0xFF)
            datum >>= 8
            bits -= 8

    table: dict[tuple[int, int], int] = {}
    next_code = end_code + 1
    prefix: int | None = None

    emit(clear_code)
    for value in indices:
        if prefix is None:
            prefix = value
            continue
        code = table.get((prefix, value))
        if code is not None:
            prefix = code
            continue

        emit(prefix)
        if next_code < (1 << MAX_LZW_CODE_SIZE):
            table[(prefix, value)] = next_code
            next_code += 1
            if next_code > (1 << code_size) and code_size < MAX_LZW_CODE_SIZE:
                code_size += 1
        else:
            emit(clear_code)
            table.clear()
            next_code = end_code + 1
            code_size = min_code_size + 1
        prefix = value

    if prefix is not None:
        emit(prefix)
        # The reader still adds an entry for this code before the end code
        if next_code >= (1 << code_size) and code_size < MAX_LZW_CODE_SIZE:
            code_size += 1
    emit(end_code)
    if bits:
        out.append(datum & 0xFF)
    return bytes(out)


def _sub_blocks(data: bytes) -> bytes:
    out = bytearray()
    for start in range(0, len(data), 255):
        chunk = data[start : start + 255]
        out.append(len(chunk))
        out += chunk
    out.append(0)
    return bytes(out)


def _frame_block(frame: IndexedFrame, delay: int, disposal: DisposalMethod) -> bytes:
    height, width = frame.indices.shape
    transparent = frame.transparent_index
    delay_cs = min(MAX_DELAY_CS, max(0, (delay + 5) // 10))

    packed = (int(disposal) << 2) | (1 if transparent is not None else 0)
    block = bytearray(b"\x21\xf9\x04")
    block += struct.pack("<BHBB", packed, delay_cs, transparent or 0, 0)

    bits = frame.table_bits
    block += b"\x2c" + struct.pack("<HHHHB", 0, 0, width, height, 0x80 | (bits - 1))
    block += frame.color_table()

    min_code_size = max(2, bits)
    block.append(min_code_size)
    block += _sub_blocks(lzw_encode(frame.indices.tobytes(), min_code_size))
    return bytes(block)


def encode_animation(frames: Sequence[Image.Image], delays: Sequence[int]) -> bytes:
    """Encode RGBA frames as an infinitely looping GIF.

    Every frame is kept, identical neighbours included. Delays are stored
    in centiseconds, rounded to the nearest 10 ms.

    Raises:
        OperationFailed: If there are no frames, the counts differ or the
            frames differ in size
    """
    if not frames:
        raise OperationFailed("No frames to encode")
    if len(frames) != len(delays):
        raise OperationFailed(
            f"Frame/delay count mismatch: {len(frames)} frames, {len(delays)} delays"
        )
    width, height = frames[0].size
    if any(frame.size != (width, height) for frame in frames):
        raise OperationFailed(
            "All frames must share the canvas size", context={"size": (width, height)}
        )

    out = bytearray(b"GIF89a")
    # No global color table: each frame carries its own
    out += struct.pack("<HHBBB", width, height, 0, 0, 0)
    out += b"\x21\xff\x0bNETSCAPE2.0" + struct.pack("<BBHB", 3, 1, GIF_INFINITE_LOOP, 0)

    for frame, delay, disposal in zip(frames, delays, plan_disposals(frames)):
        out += _frame_block(index_frame(frame), delay, disposal)

    out.append(0x3B)
    return bytes(out)


def encode_static(image: Image.Image, compression_level: int = 6) -> bytes:
    """Encode a single frame as PNG."""
    buffer = io.BytesIO()
    image.save(buffer, format="PNG", compress_level=compression_level)
    return buffer.getvalue()


def write_animated_asset(
    frames: Sequence[Image.Image], delays: Sequence[int], asset_path: Path
) -> int:
    """Encode ``frames`` and atomically replace ``asset_path``.

    Returns:
        Number of bytes written
    """
    with error_context(
        "write animated asset", OperationFailed, context={"path": asset_path}, logger=logger
    ):
        payload = encode_animation(frames, delays)
        write_bytes_atomic(payload, asset_path)

    logger.info(f"Wrote animated asset: {len(frames)} frames, {len(payload)} bytes")
    return len(payload)


def write_static_asset(
    image: Image.Image, asset_path: Path, compression_level: int = 6
) -> int:
    """Encode ``image`` as PNG and atomically replace ``asset_path``."""
    with error_context(
        "write static asset", OperationFailed, context={"path": asset_path}, logger=logger
    ):
        payload = encode_static(image, compression_level)
        write_bytes_atomic(payload, asset_path)

    logger.info(f"Wrote static asset: {image.width}x{image.height}, {len(payload)} bytes")
    return len(payload)
