"""Source images: a union of raster and vector graphics.

``load_image`` sniffs the first bytes of a stream, dispatches to the matching
decoder, and returns either a ``Raster`` or an ``Svg``. Both variants can then be
rasterized to a square bitmap of any size with ``rasterize``.
"""

from __future__ import annotations

import io
import logging
from collections.abc import Callable
from dataclasses import dataclass
from os import PathLike
from typing import BinaryIO, Union

from PIL import Image as PILImage
from PIL import UnidentifiedImageError

from icon_family import resample
from icon_family.errors import ErrorKind, IconIOError
from icon_family.svg import SvgDocument

logger = logging.getLogger(__name__)

Filter = Callable[[PILImage.Image, int], PILImage.Image]

SIGNATURE_LEN = 8

# Prefix -> Pillow format name. Order matters only for readability; prefixes are disjoint.
SIGNATURES: tuple[tuple[bytes, str], ...] = (
    (b"\x89PNG\r\n\x1a\n", "PNG"),
    (b"\xff\xd8\xff", "JPEG"),
    (b"GIF87a", "GIF"),
    (b"GIF89a", "GIF"),
    (b"BM", "BMP"),
    (b"RIFF", "WEBP"),
)


@dataclass(frozen=True, eq=False)
class Raster:
    bitmap: PILImage.Image

    @property
    def width(self) -> float:
        return float(self.bitmap.width)

    @property
    def height(self) -> float:
        return float(self.bitmap.height)

    def copy(self) -> Raster:
        return Raster(self.bitmap.copy())


@dataclass(frozen=True)
class Svg:
    document: SvgDocument

    @property
    def width(self) -> float:
        return self.document.width

    @property
    def height(self) -> float:
        return self.document.height

    def copy(self) -> Svg:
        # The document is never mutated, so copies share it.
        return Svg(self.document)


Image = Union[Raster, Svg]


def sniff_format(signature: bytes) -> str:
    """Returns the raster format for ``signature`` or ``"SVG"`` for anything else."""
    for prefix, fmt in SIGNATURES:
        if signature.startswith(prefix):
            return fmt
    return "SVG"


def open_image(path: str | PathLike[str]) -> Image:
    with open(path, "rb") as fh:
        return load_image(fh)


def load_image(stream: BinaryIO) -> Image:
    """Loads a source image from a seekable byte stream.

    Raises ``IconIOError`` with ``INVALID_DATA`` for malformed content,
    ``INVALID_INPUT`` for variants the decoder flags as unsupported, and ``OTHER``
    when the decoder runs out of memory. Stream failures propagate as ``OSError``.
    """
    start = stream.tell()
    signature = stream.read(SIGNATURE_LEN)
    stream.seek(start)

    fmt = sniff_format(signature)
    logger.debug("sniffed %s from signature %r", fmt, signature)
    if fmt == "SVG":
        return Svg(load_vector(stream))
    return Raster(load_raster(stream, fmt))


def load_raster(stream: BinaryIO, fmt: str) -> PILImage.Image:
    # Pillow rewinds to offset 0; hand it the payload from the current position only.
    data = stream.read()
    try:
        with PILImage.open(io.BytesIO(data), formats=[fmt]) as im:
            im.load()
            return im.convert("RGBA")
    except MemoryError as e:
        raise IconIOError(ErrorKind.OTHER, f"out of memory while decoding {fmt}") from e
    except PILImage.DecompressionBombError as e:
        # Declared dimensions past Pillow's pixel limit; treated like running out of memory.
        raise IconIOError(ErrorKind.OTHER, f"{fmt} image too large: {e}") from e
    except UnidentifiedImageError as e:
        raise IconIOError(ErrorKind.INVALID_DATA, f"malformed {fmt} data") from e
    except NotImplementedError as e:
        raise IconIOError(ErrorKind.INVALID_INPUT, f"unsupported {fmt} variant: {e}") from e
    except (ValueError, SyntaxError, EOFError) as e:
        # Pillow reports truncated/corrupt payloads through these.
        raise IconIOError(ErrorKind.INVALID_DATA, f"malformed {fmt} data: {e}") from e
    except OSError as e:
        if type(e) is OSError and not e.errno:
            # Pillow's decoder errors ("broken data stream", "image file is truncated").
            raise IconIOError(ErrorKind.INVALID_DATA, f"malformed {fmt} data: {e}") from e
        raise


def load_vector(stream: BinaryIO) -> SvgDocument:
    data = stream.read()
    try:
        return SvgDocument.from_bytes(data)
    except MemoryError as e:
        raise IconIOError(ErrorKind.OTHER, "out of memory while parsing SVG") from e


def image_from_bytes(data: bytes) -> Image:
    return load_image(io.BytesIO(data))


def rasterize(image: Image, filter: Filter, size: int) -> PILImage.Image:
    """Renders ``image`` to an RGBA bitmap of exactly ``size`` x ``size``.

    Raster images go through ``filter`` (checked by ``resample.apply``); SVG images
    are rendered by the SVG backend and letterboxed.
    """
    if isinstance(image, Raster):
        return resample.apply(filter, image.bitmap, size)
    if isinstance(image, Svg):
        return resample.svg(image.document, size)
    raise TypeError(f"expected Raster or Svg, got {type(image).__name__}")


def dimensions(image: Image) -> tuple[float, float]:
    return image.width, image.height
