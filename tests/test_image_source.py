from __future__ import annotations

import io
import struct
from pathlib import Path

import pytest

from icon_family import resample
from icon_family.errors import ErrorKind, IconIOError
from icon_family.image import (
    Raster,
    Svg,
    dimensions,
    image_from_bytes,
    load_image,
    open_image,
    rasterize,
    sniff_format,
)


@pytest.mark.parametrize(
    "case",
    [
        {"name": "png", "prefix": b"\x89PNG\r\n\x1a\n", "fmt": "PNG"},
        {"name": "jpeg", "prefix": b"\xff\xd8\xff", "fmt": "JPEG"},
        {"name": "gif87a", "prefix": b"GIF87a", "fmt": "GIF"},
        {"name": "gif89a", "prefix": b"GIF89a", "fmt": "GIF"},
        {"name": "bmp", "prefix": b"BM", "fmt": "BMP"},
        {"name": "webp", "prefix": b"RIFF", "fmt": "WEBP"},
        {"name": "svg", "prefix": b"<svg", "fmt": "SVG"},
        {"name": "xml decl", "prefix": b"<?xml ve", "fmt": "SVG"},
        {"name": "gif other version", "prefix": b"GIF88a", "fmt": "SVG"},
        {"name": "empty", "prefix": b"", "fmt": "SVG"},
    ],
    ids=lambda c: c["name"],
)
def test_signature_table(case: dict[str, object]) -> None:
    assert sniff_format(case["prefix"] + b"\x00" * 8) == case["fmt"]  # type: ignore[operator]


@pytest.mark.parametrize(
    "prefix",
    [
        b"\x89PNG\r\n\x1a\n",
        b"\xff\xd8\xff",
        b"GIF87a",
        b"GIF89a",
        b"BM",
        b"RIFF",
    ],
    ids=["png", "jpeg", "gif87a", "gif89a", "bmp", "webp"],
)
def test_correct_prefix_with_malformed_tail_is_invalid_data(prefix: bytes) -> None:
    with pytest.raises(IconIOError) as excinfo:
        image_from_bytes(prefix + b"\x00\x01garbage-garbage-garbage")
    assert excinfo.value.kind is ErrorKind.INVALID_DATA


@pytest.mark.parametrize("fmt", ["PNG", "JPEG", "GIF", "BMP", "WEBP"])
def test_load_raster_formats(fmt: str, make_hydra, encode_image) -> None:  # type: ignore[no-untyped-def]
    image = image_from_bytes(encode_image(make_hydra(20, 10), fmt))
    assert isinstance(image, Raster)
    assert image.bitmap.mode == "RGBA"
    assert dimensions(image) == (20.0, 10.0)


def test_load_rewinds_to_stream_start(make_hydra, encode_image) -> None:  # type: ignore[no-untyped-def]
    stream = io.BytesIO(b"junk" + encode_image(make_hydra(), "PNG"))
    _ = stream.read(4)
    image = load_image(stream)
    assert isinstance(image, Raster)
    assert image.width == 24.0


def test_open_svg_reports_fractional_view_box(tmp_path: Path) -> None:
    path = tmp_path / "frac.svg"
    _ = path.write_text(
        '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 10.5 20.25"/>', encoding="utf-8"
    )
    image = open_image(path)
    assert isinstance(image, Svg)
    assert dimensions(image) == (10.5, 20.25)


def test_malformed_svg_is_invalid_data() -> None:
    with pytest.raises(IconIOError) as excinfo:
        image_from_bytes(b"this is not an image at all")
    assert excinfo.value.kind is ErrorKind.INVALID_DATA


def test_missing_file_propagates_os_error(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        open_image(tmp_path / "missing.png")


def test_rasterize_raster_goes_through_filter(hydra_png: Path) -> None:
    image = open_image(hydra_png)
    out = rasterize(image, resample.linear, 48)
    assert out.size == (48, 48)


def test_copy_of_svg_shares_document(box_svg_text: str) -> None:
    image = image_from_bytes(box_svg_text.encode("utf-8"))
    assert isinstance(image, Svg)
    assert image.copy().document is image.document


def test_copy_of_raster_is_independent(hydra_png: Path) -> None:
    image = open_image(hydra_png)
    assert isinstance(image, Raster)
    clone = image.copy()
    clone.bitmap.putpixel((0, 0), (1, 2, 3, 4))
    assert image.bitmap.getpixel((0, 0)) != (1, 2, 3, 4)


def test_rasterize_svg_letterboxes(cairo: None, box_svg_text: str) -> None:
    image = image_from_bytes(box_svg_text.encode("utf-8"))
    out = rasterize(image, resample.nearest, 32)
    assert out.size == (32, 32)
    # 32x16 view box fits to 32x16 and is centered vertically.
    assert out.getpixel((16, 0))[3] == 0
    assert out.getpixel((16, 16))[3] == 255


def test_oversized_bitmap_header_is_reported_as_io_other() -> None:
    # BITMAPFILEHEADER + BITMAPINFOHEADER declaring a 200000x200000 24-bit image.
    info = struct.pack("<IiiHHIIiiII", 40, 200_000, 200_000, 1, 24, 0, 0, 0, 0, 0, 0)
    header = struct.pack("<2sIHHI", b"BM", 14 + len(info), 0, 0, 14 + len(info))
    with pytest.raises(IconIOError) as excinfo:
        image_from_bytes(header + info)
    assert excinfo.value.kind is ErrorKind.OTHER
