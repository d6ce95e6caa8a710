import io
import struct

import pytest
from PIL import Image

from trayanim.cli.utils import RecordingSurface
from trayanim.config import PathConfig
from trayanim.scheduler import ManualTimerFactory

# ---------------------------------------------------------------------------
# Byte-level GIF builder
# ---------------------------------------------------------------------------
# Pillow's GIF writer crops and merges frames on its own, so tests that need
# exact patch rectangles, disposal methods and transparency build the file
# block by block instead.
# ---------------------------------------------------------------------------

BLACK, RED, GREEN, BLUE, WHITE, YELLOW = range(6)

PALETTE_RGB = {
    BLACK: (0, 0, 0),
    RED: (255, 0, 0),
    GREEN: (0, 255, 0),
    BLUE: (0, 0, 255),
    WHITE: (255, 255, 255),
    YELLOW: (255, 255, 0),
}

_MIN_CODE_SIZE = 8
# Clear often enough that the code width never grows past 9 bits
_CLEAR_EVERY = 200


def _lzw_encode(indices: bytes) -> bytes:
    clear_code = 1 << _MIN_CODE_SIZE
    end_code = clear_code + 1
    code_size = _MIN_CODE_SIZE + 1

    codes = []
    for i, value in enumerate(indices):
        if i % _CLEAR_EVERY == 0:
            codes.append(clear_code)
        codes.append(value)
    if not indices:
        codes.append(clear_code)
    codes.append(end_code)

    out = bytearray()
    datum = 0
    bits = 0
    for code in codes:
        datum |= code << bits
        bits += code_size
        while bits >= 8:
            out.append(datum & 0xFF)
            datum >>= 8
            bits -= 8
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


def build_gif(
    width: int,
    height: int,
    patches: list[dict],
    loop: int | None = 0,
    with_trailer: bool = True,
) -> bytes:
    """Build a GIF89a with a 256-entry global palette.

    Each patch dict takes ``left``, ``top``, ``width``, ``height`` and either
    ``color`` (one palette index for the whole rectangle) or ``indices``
    (row-major palette indices), plus optional ``disposal``, ``delay_cs``
    and ``transparent``. Pass ``gce=False`` to omit the graphic control block.
    """
    out = bytearray(b"GIF89a")
    out += struct.pack("<HHBBB", width, height, 0xF7, 0, 0)

    palette = bytearray(256 * 3)
    for index, rgb in PALETTE_RGB.items():
        palette[index * 3 : index * 3 + 3] = bytes(rgb)
    out += palette

    if loop is not None:
        out += b"\x21\xff\x0bNETSCAPE2.0" + struct.pack("<BBHB", 3, 1, loop, 0)

    for patch in patches:
        pw, ph = patch["width"], patch["height"]
        if patch.get("gce", True):
            transparent = patch.get("transparent")
            packed = (patch.get("disposal", 1) << 2) | (1 if transparent is not None else 0)
            out += b"\x21\xf9\x04" + struct.pack(
                "<BHBB", packed, patch.get("delay_cs", 10), transparent or 0, 0
            )
        out += b"\x2c" + struct.pack(
            "<HHHHB", patch.get("left", 0), patch.get("top", 0), pw, ph, 0
        )
        indices = patch.get("indices")
        if indices is None:
            indices = [patch["color"]] * (pw * ph)
        out.append(_MIN_CODE_SIZE)
        out += _sub_blocks(_lzw_encode(bytes(indices)))

    if with_trailer:
        out.append(0x3B)
    return bytes(out)


def patch(left, top, width, height, color, **extra) -> dict:
    return dict(left=left, top=top, width=width, height=height, color=color, **extra)


def _image_bytes(fmt: str, size=(40, 30), color=(255, 0, 0)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def make_gif():
    """Factory building GIF bytes from patch dicts."""
    return build_gif


@pytest.fixture
def make_patch():
    return patch


@pytest.fixture
def palette_rgb():
    return PALETTE_RGB


@pytest.fixture
def png_bytes() -> bytes:
    return _image_bytes("PNG")


@pytest.fixture
def jpeg_bytes() -> bytes:
    return _image_bytes("JPEG")


@pytest.fixture
def animated_gif_bytes() -> bytes:
    """Ten 20x20 frames, each a distinct solid colour band, 50 ms apart."""
    # The band shifts every frame so consecutive frames always differ
    patches = [
        dict(
            left=0,
            top=0,
            width=20,
            height=20,
            indices=[
                (i % 5) + 1 if (y + i) % 20 < 10 else BLACK
                for y in range(20)
                for _ in range(20)
            ],
            delay_cs=5,
        )
        for i in range(10)
    ]
    return build_gif(20, 20, patches)


@pytest.fixture
def paths(tmp_path) -> PathConfig:
    return PathConfig(DATA_DIR=tmp_path / "data")


@pytest.fixture
def manual_timers() -> ManualTimerFactory:
    return ManualTimerFactory()


class BrokenSurface:
    def set_image(self, image):
        raise RuntimeError("tray surface destroyed")


@pytest.fixture
def recording_surface() -> RecordingSurface:
    return RecordingSurface()


@pytest.fixture
def broken_surface() -> BrokenSurface:
    return BrokenSurface()
