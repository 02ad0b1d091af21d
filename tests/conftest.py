from __future__ import annotations

import io
from collections.abc import Callable
from pathlib import Path

import pytest
from PIL import Image as PILImage

BOX_SVG = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<svg xmlns="http://www.w3.org/2000/svg" width="32" height="16" viewBox="0 0 32 16">\n'
    '  <rect x="0" y="0" width="32" height="16" fill="#3366ff"/>\n'
    '  <circle cx="16" cy="8" r="4" fill="#ffffff"/>\n'
    "</svg>\n"
)


def _make_hydra(width: int = 24, height: int = 24) -> PILImage.Image:
    # Opaque checkerboard so scaled output is easy to tell apart from padding.
    im = PILImage.new("RGBA", (width, height), (0, 0, 0, 255))
    for y in range(height):
        for x in range(width):
            if (x // 4 + y // 4) % 2 == 0:
                im.putpixel((x, y), (200, 30, 30, 255))
    return im


def _encode(image: PILImage.Image, fmt: str) -> bytes:
    buf = io.BytesIO()
    if fmt == "JPEG":
        image = image.convert("RGB")
    image.save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def make_hydra() -> Callable[..., PILImage.Image]:
    return _make_hydra


@pytest.fixture
def encode_image() -> Callable[[PILImage.Image, str], bytes]:
    return _encode


@pytest.fixture
def box_svg_text() -> str:
    return BOX_SVG


@pytest.fixture
def hydra_png(tmp_path: Path) -> Path:
    path = tmp_path / "hydra.png"
    _ = path.write_bytes(_encode(_make_hydra(), "PNG"))
    return path


@pytest.fixture
def box_svg(tmp_path: Path) -> Path:
    path = tmp_path / "box.svg"
    _ = path.write_text(BOX_SVG, encoding="utf-8")
    return path


@pytest.fixture
def cairo() -> None:
    # cairosvg needs the cairo system library at import time.
    try:
        import cairosvg  # noqa: F401  # pyright: ignore[reportUnusedImport]
    except (ImportError, OSError) as e:
        pytest.skip(f"cairosvg unavailable: {e}")
