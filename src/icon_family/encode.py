"""The encoder contract and helpers shared by the concrete encoders.

An encoder is parameterized by a key type. Adding an entry rasterizes a source
image at ``key.as_size()``, encodes it, and stores it under the key. ``add_entry``
is transactional: on failure the encoder is left exactly as it was.

Example::

    icon = Ico()
    image = open_image("hydra.png")
    icon.add_entries(resample.nearest, image, [32, 64]).add_entry(resample.cubic, image, 128)
    icon.save("hydra.ico")
"""

from __future__ import annotations

import abc
import enum
import io
import logging
from collections.abc import Iterable, Iterator
from os import PathLike
from pathlib import Path
from typing import BinaryIO, ClassVar, Generic, TypeVar

from PIL import Image as PILImage

from icon_family.config import settings
from icon_family.errors import (
    AlreadyIncludedError,
    EncodingResampleError,
    ResampleError,
    resample_error_from,
)
from icon_family.image import Filter, Image, rasterize
from icon_family.keys import AsSize
from icon_family.svg import SvgDocument

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=AsSize)
E = TypeVar("E", bound="Encoder")  # pyright: ignore[reportMissingTypeArgument]


class Encoder(abc.ABC, Generic[K]):
    key_type: ClassVar[type]

    def __init__(self, capacity: int | None = None) -> None:
        self.capacity = settings.default_capacity if capacity is None else int(capacity)
        if self.capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")

    @classmethod
    def with_capacity(cls: type[E], capacity: int) -> E:
        return cls(capacity)

    @classmethod
    def new(cls: type[E]) -> E:
        return cls(settings.default_capacity)

    @abc.abstractmethod
    def __len__(self) -> int: ...

    @abc.abstractmethod
    def keys(self) -> list[K]:
        """Keys of all entries, in a deterministic order."""

    def __contains__(self, key: object) -> bool:
        try:
            k = self.coerce_key(key)  # pyright: ignore[reportArgumentType]
        except (TypeError, ValueError):
            return False
        return k in self.keys()

    def coerce_key(self, key: K | int) -> K:
        if isinstance(key, self.key_type):
            return key  # pyright: ignore[reportReturnType]
        if isinstance(key, int) and not isinstance(key, (bool, enum.Enum)):
            return self.key_type.from_raw(key)  # pyright: ignore[reportAttributeAccessIssue]
        raise TypeError(f"{type(self).__name__} expects {self.key_type.__name__} keys, got {key!r}")

    def add_entry(self: E, filter: Filter, source: Image, key: K | int) -> E:
        """Rasterizes ``source`` at ``key.as_size()`` through ``filter`` and stores it.

        Raises ``AlreadyIncludedError`` if ``key`` is already present and
        ``EncodingResampleError`` if the filter fails or misbehaves.
        """
        k = self.coerce_key(key)
        try:
            self._add_entry(filter, source, k)
        except ResampleError as e:
            logger.debug("%s: entry %r rejected: %s", type(self).__name__, k, e)
            raise EncodingResampleError(e) from e
        except AlreadyIncludedError:
            logger.debug("%s: entry %r already included", type(self).__name__, k)
            raise
        logger.debug("%s: added entry %r", type(self).__name__, k)
        return self

    def add_entries(self: E, filter: Filter, source: Image, keys: Iterable[K | int]) -> E:
        """Adds one entry per key, stopping at the first failure.

        Entries added before the failing key are kept.
        """
        for key in keys:
            self.add_entry(filter, source, key)
        return self

    @abc.abstractmethod
    def _add_entry(self, filter: Filter, source: Image, key: K) -> None: ...

    @abc.abstractmethod
    def write(self: E, sink: BinaryIO) -> E: ...

    def save(self: E, path: str | PathLike[str]) -> E:
        with open(Path(path), "wb") as fh:
            self.write(fh)
        return self

    def to_bytes(self) -> bytes:
        buf = io.BytesIO()
        self.write(buf)
        return buf.getvalue()

    def __iter__(self) -> Iterator[K]:
        return iter(self.keys())

    def __repr__(self) -> str:
        sizes = ", ".join(str(k.as_size()) for k in self.keys())
        return f"{type(self).__name__}([{sizes}])"


def render_entry(filter: Filter, source: Image, size: int) -> PILImage.Image:
    try:
        return rasterize(source, filter, size)
    except OSError as e:
        raise resample_error_from(e) from e


def png_bytes(image: PILImage.Image) -> bytes:
    """Encodes raster graphics as PNG."""
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


def bmp_bytes(image: PILImage.Image) -> bytes:
    """Encodes raster graphics as BMP."""
    buf = io.BytesIO()
    image.save(buf, format="BMP")
    return buf.getvalue()


def svg_bytes(document: SvgDocument) -> bytes:
    """Encodes vector graphics as UTF-8 SVG."""
    return document.to_bytes()


def png_entry(filter: Filter, source: Image, size: int) -> bytes:
    """Rasterizes ``source`` and PNG-encodes it, mapping codec failures to resample errors."""
    bitmap = render_entry(filter, source, size)
    try:
        return png_bytes(bitmap)
    except OSError as e:
        raise resample_error_from(e) from e
