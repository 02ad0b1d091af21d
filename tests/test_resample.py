from __future__ import annotations

import errno

import pytest
from PIL import Image as PILImage

from icon_family import resample
from icon_family.errors import MismatchedDimensionsError, ResampleIOError


@pytest.mark.parametrize("name", sorted(resample.FILTERS))
@pytest.mark.parametrize("source_size", [(24, 24), (40, 10), (10, 40), (1, 1), (300, 200)])
@pytest.mark.parametrize("size", [1, 16, 32, 257])
def test_standard_filters_return_exact_squares(
    name: str, source_size: tuple[int, int], size: int
) -> None:
    source = PILImage.new("RGBA", source_size, (255, 0, 0, 255))
    out = resample.apply(resample.FILTERS[name], source, size)
    assert out.size == (size, size)
    assert out.mode == "RGBA"


def test_scale_preserves_aspect_with_truncation() -> None:
    wide = PILImage.new("RGBA", (30, 20))
    assert resample.scale(wide, 16, PILImage.Resampling.BILINEAR).size == (16, 10)

    tall = PILImage.new("RGBA", (20, 30))
    assert resample.scale(tall, 16, PILImage.Resampling.BILINEAR).size == (10, 16)


def test_letterbox_centers_with_transparent_padding() -> None:
    source = PILImage.new("RGBA", (4, 2), (0, 255, 0, 255))
    out = resample.letterbox(source, 8)
    assert out.size == (8, 8)
    assert out.getpixel((0, 0)) == (0, 0, 0, 0)
    # dx = 2, dy = 3
    assert out.getpixel((2, 3)) == (0, 255, 0, 255)
    assert out.getpixel((5, 4)) == (0, 255, 0, 255)
    assert out.getpixel((6, 3)) == (0, 0, 0, 0)
    assert out.getpixel((2, 5)) == (0, 0, 0, 0)


def test_letterbox_of_square_image_is_identity() -> None:
    source = PILImage.new("RGBA", (8, 8), (1, 2, 3, 4))
    out = resample.letterbox(source, 8)
    assert out.size == (8, 8)
    assert out.tobytes() == source.tobytes()


def test_nearest_upscales_small_sources_by_integer_factor() -> None:
    source = PILImage.new("RGBA", (10, 5), (9, 9, 9, 255))
    out = resample.nearest(source, 32)
    assert out.size == (32, 32)
    # factor 3 -> 30x15 content, offsets (1, 8)
    bbox = out.getbbox()
    assert bbox == (1, 8, 31, 23)


def test_nearest_keeps_pixels_crisp() -> None:
    source = PILImage.new("RGBA", (2, 2), (0, 0, 0, 255))
    source.putpixel((0, 0), (255, 255, 255, 255))
    out = resample.nearest(source, 8)
    colors = {c for _, c in out.getcolors(64)}  # type: ignore[union-attr]
    assert colors == {(0, 0, 0, 255), (255, 255, 255, 255)}


def test_nearest_downscale_uses_scale_rule() -> None:
    source = PILImage.new("RGBA", (64, 32), (9, 9, 9, 255))
    out = resample.nearest(source, 16)
    assert out.getbbox() == (0, 4, 16, 12)


def test_apply_rejects_wrong_dimensions() -> None:
    def lazy(source: PILImage.Image, size: int) -> PILImage.Image:
        return source

    source = PILImage.new("RGBA", (10, 12))
    with pytest.raises(MismatchedDimensionsError) as excinfo:
        resample.apply(lazy, source, 16)
    assert excinfo.value.expected == 16
    assert excinfo.value.actual == (10, 12)


def test_apply_wraps_io_errors() -> None:
    def broken(source: PILImage.Image, size: int) -> PILImage.Image:
        raise OSError(errno.EIO, "device gone")

    with pytest.raises(ResampleIOError) as excinfo:
        resample.apply(broken, PILImage.new("RGBA", (4, 4)), 4)
    assert excinfo.value.error.errno == errno.EIO


def test_filters_convert_non_rgba_sources() -> None:
    source = PILImage.new("P", (8, 4))
    out = resample.cubic(source, 8)
    assert out.mode == "RGBA"
