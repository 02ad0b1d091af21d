"""The decoder contract and helpers shared by the concrete decoders.

A decoder parses a whole icon family into memory and then answers lookups by key.
Iteration yields ``(key, image)`` pairs in ascending key order.
"""

from __future__ import annotations

import abc
import enum
import io
from collections.abc import Iterator
from os import PathLike
from typing import BinaryIO, ClassVar, Generic, TypeVar

from PIL import Image as PILImage

from icon_family.image import Image, load_raster, load_vector
from icon_family.keys import AsSize
from icon_family.svg import SvgDocument

K = TypeVar("K", bound=AsSize)
D = TypeVar("D", bound="Decoder")  # pyright: ignore[reportMissingTypeArgument]


class Decoder(abc.ABC, Generic[K]):
    key_type: ClassVar[type]

    def __init__(self, entries: dict[K, Image]) -> None:
        self._entries = dict(entries)

    @classmethod
    @abc.abstractmethod
    def read(cls: type[D], stream: BinaryIO) -> D:
        """Parses an entire icon family from ``stream``.

        Raises ``DecodingIOError`` for malformed input and ``UnsupportedError`` for
        features the decoder does not handle.
        """

    @classmethod
    def open(cls: type[D], path: str | PathLike[str]) -> D:
        with open(path, "rb") as fh:
            return cls.read(fh)

    @classmethod
    def from_bytes(cls: type[D], data: bytes) -> D:
        return cls.read(io.BytesIO(data))

    def _coerce(self, key: object) -> K | None:
        if isinstance(key, self.key_type):
            return key  # pyright: ignore[reportReturnType]
        if isinstance(key, int) and not isinstance(key, (bool, enum.Enum)):
            try:
                return self.key_type.from_raw(key)  # pyright: ignore[reportAttributeAccessIssue]
            except ValueError:
                return None
        return None

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        k = self._coerce(key)
        return k is not None and k in self._entries

    def get(self, key: K | int) -> Image | None:
        k = self._coerce(key)
        return None if k is None else self._entries.get(k)

    def keys(self) -> list[K]:
        return sorted(self._entries)  # pyright: ignore[reportCallIssue, reportArgumentType]

    def __iter__(self) -> Iterator[tuple[K, Image]]:
        return ((k, self._entries[k]) for k in self.keys())


def decode_png(stream: BinaryIO) -> PILImage.Image:
    """Decodes a PNG-encoded buffer to raster graphics."""
    return load_raster(stream, "PNG")


def decode_bmp(stream: BinaryIO) -> PILImage.Image:
    """Decodes a BMP-encoded buffer to raster graphics."""
    return load_raster(stream, "BMP")


def decode_svg(stream: BinaryIO) -> SvgDocument:
    """Decodes a UTF-8 SVG document to vector graphics."""
    return load_vector(stream)
