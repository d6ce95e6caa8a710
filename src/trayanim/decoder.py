"""GIF frame decoding into raw, uncomposited patches.

Each image block of a GIF becomes one :class:`RawPatch`: the RGBA pixels of
its own rectangle plus the disposal method and delay from the graphic
control extension that precedes it. Nothing is drawn onto a canvas here;
see :mod:`trayanim.compositor` for that.
"""

import logging
from dataclasses import dataclass, field
from enum import IntEnum

import numpy as np

from .error_handling import DecodeError

logger = logging.getLogger(__name__)

GIF_SIGNATURES = (b"GIF87a", b"GIF89a")

EXTENSION_INTRODUCER = 0x21
IMAGE_SEPARATOR = 0x2C
TRAILER = 0x3B

GRAPHIC_CONTROL_LABEL = 0xF9
APPLICATION_LABEL = 0xFF

MAX_LZW_CODE_SIZE = 12


class DisposalMethod(IntEnum):
    """Disposal method from the graphic control extension (bits 2-4)."""

    UNSPECIFIED = 0
    NONE = 1
    RESTORE_BACKGROUND = 2
    RESTORE_PREVIOUS = 3

    @classmethod
    def from_bits(cls, value: int) -> "DisposalMethod":
        # Values 4-7 are reserved and handled like "unspecified"
        try:
            return cls(value)
        except ValueError:
            return cls.UNSPECIFIED


@dataclass
class RawPatch:
    """One decoded animation unit, relative to the logical canvas."""

    left: int
    top: int
    width: int
    height: int
    pixels: np.ndarray  # (height, width, 4) uint8 RGBA, alpha is 0 or 255
    disposal: DisposalMethod = DisposalMethod.UNSPECIFIED
    delay: int = 0  # milliseconds as declared, 0 when absent


@dataclass
class GifStream:
    """A parsed GIF: logical screen size and patches in file order."""

    width: int
    height: int
    patches: list[RawPatch] = field(default_factory=list)
    loop_count: int | None = None  # None when no NETSCAPE2.0 block is present

    @property
    def frame_count(self) -> int:
        return len(self.patches)

    @property
    def total_duration_ms(self) -> int:
        return sum(patch.delay for patch in self.patches)


@dataclass
class _GraphicControl:
    disposal: DisposalMethod
    delay: int
    transparent_index: int | None


class _Reader:
    """Bounds-checked cursor over the GIF byte buffer."""

    def __init__(self, data: bytes):
        self.data = memoryview(data)
        self.pos = 0

    @property
    def at_end(self) -> bool:
        return self.pos >= len(self.data)

    def u8(self) -> int:
        if self.pos >= len(self.data):
            raise EOFError("unexpected end of data")
        value = self.data[self.pos]
        self.pos += 1
        return value

    def u16(self) -> int:
        low = self.u8()
        return low | (self.u8() << 8)

    def take(self, n: int) -> bytes:
        if self.pos + n > len(self.data):
            raise EOFError(f"unexpected end of data reading {n} bytes")
        chunk = bytes(self.data[self.pos : self.pos + n])
        self.pos += n
        return chunk

    def sub_blocks(self) -> bytes:
        chunks = []
        while True:
            size = self.u8()
            if size == 0:
                break
            chunks.append(self.take(size))
        return b"".join(chunks)


def _color_table(reader: _Reader, size_exp: int) -> np.ndarray:
    entries = 2 ** (size_exp + 1)
    raw = np.frombuffer(reader.take(3 * entries), dtype=np.uint8).reshape(entries, 3)
    table = np.empty((entries, 4), dtype=np.uint8)
    table[:, :3] = raw
    table[:, 3] = 255
    return table


def lzw_decode(min_code_size: int, data: bytes, pixel_count: int) -> bytes:
    """Decompress GIF LZW data into at most ``pixel_count`` color indices.

    Codes are read least-significant-bit first. The code width grows when
    the table fills the current width, up to 12 bits; a full table stops
    growing until the next clear code.
    """
    if not 1 <= min_code_size <= 11:
        raise DecodeError(f"Invalid LZW minimum code size: {min_code_size}")

    clear_code = 1 << min_code_size
    end_code = clear_code + 1
    base_table = [bytes([i]) for i in range(clear_code)] + [b"", b""]

    table = list(base_table)
    code_size = min_code_size + 1
    mask = (1 << code_size) - 1
    prev: bytes | None = None

    out = bytearray()
    datum = 0
    bits = 0

    for byte in data:
        datum |= byte << bits
        bits += 8
        while bits >= code_size:
            code = datum & mask
            datum >>= code_size
            bits -= code_size

            if code == clear_code:
                table = list(base_table)
                code_size = min_code_size + 1
                mask = (1 << code_size) - 1
                prev = None
                continue
            if code == end_code:
                return bytes(out[:pixel_count])

            if code < len(table):
                entry = table[code]
            elif prev is not None and code == len(table):
                entry = prev + prev[:1]
            else:
                raise DecodeError(f"Invalid LZW code {code}")

            out += entry
            if len(out) >= pixel_count:
                return bytes(out[:pixel_count])

            if prev is not None and len(table) < (1 << MAX_LZW_CODE_SIZE):
                table.append(prev + entry[:1])
                if len(table) == (1 << code_size) and code_size < MAX_LZW_CODE_SIZE:
                    code_size += 1
                    mask = (1 << code_size) - 1
            prev = entry

    return bytes(out)


def _deinterlace(indices: np.ndarray, height: int) -> np.ndarray:
    """Reorder rows stored in the four interlace passes into display order."""
    row_order = []
    for start, step in ((0, 8), (4, 8), (2, 4), (1, 2)):
        row_order.extend(range(start, height, step))
    result = np.empty_like(indices)
    result[row_order] = indices
    return result


def _build_patch(
    reader: _Reader,
    global_table: np.ndarray | None,
    control: _GraphicControl | None,
) -> RawPatch:
    left = reader.u16()
    top = reader.u16()
    width = reader.u16()
    height = reader.u16()
    packed = reader.u8()

    color_table = global_table
    if packed & 0x80:
        color_table = _color_table(reader, packed & 0x07)
    interlaced = bool(packed & 0x40)

    min_code_size = reader.u8()
    data = reader.sub_blocks()

    if color_table is None:
        raise DecodeError("Image block has no global or local color table")

    pixel_count = width * height
    indices = np.frombuffer(
        lzw_decode(min_code_size, data, pixel_count), dtype=np.uint8
    )
    if indices.size < pixel_count:
        # Truncated image data: missing pixels stay transparent
        padded = np.zeros(pixel_count, dtype=np.uint8)
        padded[: indices.size] = indices
        missing = np.zeros(pixel_count, dtype=bool)
        missing[indices.size :] = True
        indices = padded
    else:
        missing = None

    indices = indices.reshape(height, width)
    if interlaced and height > 1:
        indices = _deinterlace(indices, height)
        if missing is not None:
            missing = _deinterlace(missing.reshape(height, width), height)

    palette = color_table.copy()
    if control is not None and control.transparent_index is not None:
        if control.transparent_index < len(palette):
            palette[control.transparent_index, 3] = 0

    pixels = palette[np.minimum(indices, len(palette) - 1)]
    if missing is not None:
        pixels[missing.reshape(height, width)] = 0

    return RawPatch(
        left=left,
        top=top,
        width=width,
        height=height,
        pixels=pixels,
        disposal=control.disposal if control else DisposalMethod.UNSPECIFIED,
        delay=control.delay if control else 0,
    )


def _parse_graphic_control(block: bytes) -> _GraphicControl:
    if len(block) < 4:
        raise DecodeError("Graphic control extension is too short")
    packed = block[0]
    delay_cs = block[1] | (block[2] << 8)
    transparent_index = block[3] if packed & 0x01 else None
    return _GraphicControl(
        disposal=DisposalMethod.from_bits((packed >> 2) & 0x07),
        delay=delay_cs * 10,
        transparent_index=transparent_index,
    )


def _parse_loop_count(block: bytes) -> int | None:
    # NETSCAPE2.0 payload: 11-byte identifier, then sub-block 0x01 <u16 loops>
    identifier, payload = block[:11], block[11:]
    if identifier not in (b"NETSCAPE2.0", b"ANIMEXTS1.0"):
        return None
    if len(payload) >= 3 and payload[0] == 1:
        return payload[1] | (payload[2] << 8)
    return None


def decode_gif(data: bytes) -> GifStream:
    """Parse a GIF byte buffer into its logical screen and raw patches.

    Raises:
        DecodeError: If the header is unreadable or no image blocks decode
    """
    reader = _Reader(data)

    try:
        signature = reader.take(6)
        if signature not in GIF_SIGNATURES:
            raise DecodeError(f"Not a GIF header: {signature!r}")
        width = reader.u16()
        height = reader.u16()
        packed = reader.u8()
        reader.u8()  # background color index
        reader.u8()  # pixel aspect ratio
        global_table = _color_table(reader, packed & 0x07) if packed & 0x80 else None
    except EOFError as e:
        raise DecodeError("Truncated GIF header", cause=e) from e

    if width == 0 or height == 0:
        raise DecodeError(f"Invalid logical screen size {width}x{height}")

    stream = GifStream(width=width, height=height)
    control: _GraphicControl | None = None

    try:
        while not reader.at_end:
            introducer = reader.u8()
            if introducer == TRAILER:
                break
            if introducer == EXTENSION_INTRODUCER:
                label = reader.u8()
                if label == APPLICATION_LABEL:
                    header_size = reader.u8()
                    block = reader.take(header_size) + reader.sub_blocks()
                    loop_count = _parse_loop_count(block)
                    if loop_count is not None:
                        stream.loop_count = loop_count
                elif label == GRAPHIC_CONTROL_LABEL:
                    control = _parse_graphic_control(reader.sub_blocks())
                else:
                    reader.sub_blocks()
            elif introducer == IMAGE_SEPARATOR:
                stream.patches.append(_build_patch(reader, global_table, control))
                control = None
            else:
                raise DecodeError(f"Unknown block introducer 0x{introducer:02X}")
    except EOFError as e:
        if not stream.patches:
            raise DecodeError("GIF data ended before any image block", cause=e) from e
        logger.warning(
            f"GIF data truncated after {len(stream.patches)} frame(s), keeping them"
        )

    if not stream.patches:
        raise DecodeError("GIF contains no image blocks")

    logger.debug(
        f"Decoded GIF {width}x{height} with {len(stream.patches)} patch(es)"
    )
    return stream
