"""A collection of commonly used resampling filters.

A filter is any callable ``(image, size) -> image`` that returns an RGBA image
of exactly ``size`` x ``size``. The standard filters scale the source while
preserving its aspect ratio and then letterbox it onto a transparent square.
``apply`` is the single place where the output dimensions are checked.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from PIL import Image as PILImage

from icon_family.errors import MismatchedDimensionsError, ResampleError, resample_error_from

if TYPE_CHECKING:
    from icon_family.svg import SvgDocument

Filter = Callable[[PILImage.Image, int], PILImage.Image]

_TRANSPARENT = (0, 0, 0, 0)


def linear(source: PILImage.Image, size: int) -> PILImage.Image:
    """Bilinear resampling."""
    return letterbox(scale(source, size, PILImage.Resampling.BILINEAR), size)


def cubic(source: PILImage.Image, size: int) -> PILImage.Image:
    """Lanczos-3 resampling."""
    return letterbox(scale(source, size, PILImage.Resampling.LANCZOS), size)


def nearest(source: PILImage.Image, size: int) -> PILImage.Image:
    """Nearest-neighbor resampling.

    Sources smaller than ``size`` on both axes are only ever upscaled by an integer
    factor, which keeps pixel art crisp; the remainder is letterboxed.
    """
    if source.width < size and source.height < size:
        scaled = _nearest_upscale_integer(source, size)
    else:
        scaled = scale(source, size, PILImage.Resampling.NEAREST)
    return letterbox(scaled, size)


FILTERS: dict[str, Filter] = {
    "linear": linear,
    "cubic": cubic,
    "nearest": nearest,
}


def apply(filter: Filter, source: PILImage.Image, size: int) -> PILImage.Image:
    """Runs ``filter`` and checks that the output is exactly ``size`` x ``size``."""
    try:
        icon = filter(source, size)
    except (OSError, ResampleError) as e:
        raise resample_error_from(e) from e

    if icon.size != (size, size):
        raise MismatchedDimensionsError(size, icon.size)
    return icon


def scale(source: PILImage.Image, size: int, resample: PILImage.Resampling) -> PILImage.Image:
    """Rescales ``source`` so that its larger side equals ``size``."""
    w, h = source.size
    if w > h:
        nw, nh = size, size * h // w
    else:
        nw, nh = size * w // h, size
    # Extreme aspect ratios would otherwise collapse to an empty image.
    nw, nh = max(nw, 1), max(nh, 1)
    return _rgba(source).resize((nw, nh), resample)


def _nearest_upscale_integer(source: PILImage.Image, size: int) -> PILImage.Image:
    w, h = source.size
    factor = size // w if w > h else size // h
    return _rgba(source).resize((w * factor, h * factor), PILImage.Resampling.NEAREST)


def letterbox(source: PILImage.Image, size: int) -> PILImage.Image:
    """Centers ``source`` on a transparent ``size`` x ``size`` canvas."""
    source = _rgba(source)
    if source.size == (size, size):
        return source

    output = PILImage.new("RGBA", (size, size), _TRANSPARENT)
    dx = (size - source.width) // 2
    dy = (size - source.height) // 2
    output.paste(source, (dx, dy))
    return output


def svg(document: SvgDocument, size: int) -> PILImage.Image:
    """Rasterizes ``document`` so that it fits a ``size`` x ``size`` square."""
    try:
        if document.width > document.height:
            bitmap = document.render(width=size)
        else:
            bitmap = document.render(height=size)
    except OSError as e:
        raise resample_error_from(e) from e

    # Rounding in the backend can overshoot by a pixel on the fitted side.
    if bitmap.width > size or bitmap.height > size:
        bitmap = bitmap.crop((0, 0, min(bitmap.width, size), min(bitmap.height, size)))
    return letterbox(bitmap, size)


def _rgba(image: PILImage.Image) -> PILImage.Image:
    return image if image.mode == "RGBA" else image.convert("RGBA")
