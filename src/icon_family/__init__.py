from __future__ import annotations

from .decode import Decoder, decode_bmp, decode_png, decode_svg
from .encode import Encoder, bmp_bytes, png_bytes, svg_bytes
from .errors import (
    AlreadyIncludedError,
    DecodingError,
    DecodingIOError,
    EncodingError,
    EncodingResampleError,
    ErrorKind,
    IconError,
    IconIOError,
    MismatchedDimensionsError,
    ResampleError,
    ResampleIOError,
    UnsupportedError,
)
from .formats.favicon import Favicon, FaviconEntry
from .formats.icns import Icns, IcnsDecoder
from .formats.ico import Ico, IcoDecoder
from .formats.png_sequence import PngSequence
from .image import Image, Raster, Svg, dimensions, load_image, open_image, rasterize
from .keys import AsSize, FaviconKey, IcnsKey, IcoKey, PngKey
from .svg import SvgDocument

__all__ = [
    "AlreadyIncludedError",
    "AsSize",
    "Decoder",
    "DecodingError",
    "DecodingIOError",
    "Encoder",
    "EncodingError",
    "EncodingResampleError",
    "ErrorKind",
    "Favicon",
    "FaviconEntry",
    "FaviconKey",
    "Icns",
    "IcnsDecoder",
    "IcnsKey",
    "Ico",
    "IcoDecoder",
    "IcoKey",
    "IconError",
    "IconIOError",
    "Image",
    "MismatchedDimensionsError",
    "PngKey",
    "PngSequence",
    "Raster",
    "ResampleError",
    "ResampleIOError",
    "Svg",
    "SvgDocument",
    "UnsupportedError",
    "bmp_bytes",
    "decode_bmp",
    "decode_png",
    "decode_svg",
    "dimensions",
    "load_image",
    "open_image",
    "png_bytes",
    "rasterize",
    "svg_bytes",
]
