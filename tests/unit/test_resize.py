"""Tests for trayanim.resize module."""

import pytest
from PIL import Image

from trayanim.error_handling import OperationFailed
from trayanim.profiles import ResizeQuality
from trayanim.resize import CropRect, crop_frame, resize_frame


class TestCropRect:
    """Tests for CropRect parsing, rounding and clamping."""

    @pytest.mark.fast
    def test_from_floats_rounds_half_up(self):
        rect = CropRect.from_floats(0.5, 1.49, 10.5, 2.5)

        assert rect == CropRect(1, 1, 11, 3)

    @pytest.mark.fast
    def test_parse(self):
        assert CropRect.parse("10, 20, 30.4, 40.6") == CropRect(10, 20, 30, 41)

    @pytest.mark.fast
    @pytest.mark.parametrize("text", ["1,2,3", "a,b,c,d", "", "1,2,3,4,5"])
    def test_parse_rejects_malformed(self, text):
        with pytest.raises(ValueError):
            CropRect.parse(text)

    @pytest.mark.fast
    def test_clamp_inside_canvas_is_identity(self):
        rect = CropRect(2, 3, 10, 5)

        assert rect.clamp(100, 100) == rect

    @pytest.mark.fast
    def test_clamp_to_canvas_edges(self):
        assert CropRect(-5, -5, 20, 20).clamp(10, 8) == CropRect(0, 0, 10, 8)
        assert CropRect(6, 4, 100, 100).clamp(10, 8) == CropRect(6, 4, 4, 4)

    @pytest.mark.fast
    @pytest.mark.parametrize(
        "rect",
        [CropRect(20, 0, 5, 5), CropRect(0, 0, 0, 5), CropRect(-10, -10, 5, 5), CropRect(2, 2, -3, 4)],
    )
    def test_clamp_empty_intersection_fails(self, rect):
        with pytest.raises(OperationFailed):
            rect.clamp(10, 10)

    @pytest.mark.fast
    def test_box(self):
        assert CropRect(1, 2, 3, 4).box == (1, 2, 4, 6)


class TestCropFrame:
    """Tests for crop_frame function."""

    @pytest.mark.fast
    def test_crop_dimensions(self):
        image = Image.new("RGBA", (40, 30), (255, 0, 0, 255))

        cropped = crop_frame(image, CropRect(5, 5, 10, 20))

        assert cropped.size == (10, 20)

    @pytest.mark.fast
    def test_crop_is_clamped(self):
        image = Image.new("RGBA", (40, 30))

        assert crop_frame(image, CropRect(30, 20, 50, 50)).size == (10, 10)

    @pytest.mark.fast
    def test_crop_selects_region(self):
        image = Image.new("RGBA", (4, 4), (0, 0, 0, 255))
        image.putpixel((2, 1), (0, 255, 0, 255))

        cropped = crop_frame(image, CropRect(2, 1, 2, 2))

        assert cropped.getpixel((0, 0)) == (0, 255, 0, 255)


class TestResizeFrame:
    """Tests for resize_frame function."""

    @pytest.mark.fast
    @pytest.mark.parametrize("quality", list(ResizeQuality))
    @pytest.mark.parametrize("size", [16, 32, 128])
    def test_output_is_square(self, quality, size):
        image = Image.new("RGBA", (40, 30), (0, 0, 255, 255))

        resized = resize_frame(image, size, quality)

        assert resized.size == (size, size)
        assert resized.mode == "RGBA"

    @pytest.mark.fast
    def test_same_size_returns_copy(self):
        image = Image.new("RGBA", (32, 32))

        resized = resize_frame(image, 32)

        assert resized is not image
        assert resized.size == (32, 32)

    @pytest.mark.fast
    def test_solid_color_preserved(self):
        image = Image.new("RGBA", (50, 10), (10, 200, 30, 255))

        resized = resize_frame(image, 16, ResizeQuality.BEST)

        assert resized.getpixel((8, 8)) == (10, 200, 30, 255)

    @pytest.mark.fast
    def test_rejects_non_positive_size(self):
        with pytest.raises(ValueError):
            resize_frame(Image.new("RGBA", (4, 4)), 0)
