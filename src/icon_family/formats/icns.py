"""Encoder and decoder for Apple ``.icns`` files.

An ICNS file is a big-endian ``icns`` header followed by ``(ostype, length, data)``
elements. Every size this package writes uses a PNG-payload element type.
"""

from __future__ import annotations

import io
import logging
import struct
from collections.abc import Iterator
from typing import BinaryIO

from icon_family.decode import Decoder, decode_png
from icon_family.encode import Encoder, png_entry
from icon_family.errors import (
    AlreadyIncludedError,
    DecodingIOError,
    ErrorKind,
    IconIOError,
    UnsupportedError,
)
from icon_family.image import Filter, Image, Raster
from icon_family.keys import IcnsKey

logger = logging.getLogger(__name__)

_MAGIC = b"icns"
_HEADER = struct.Struct(">4sI")
_PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def build_icns(entries: list[tuple[IcnsKey, bytes]]) -> bytes:
    elements = [
        _HEADER.pack(key.ostype, _HEADER.size + len(blob)) + blob
        for key, blob in sorted(entries, key=lambda x: x[0])
    ]
    body = b"".join(elements)
    return _HEADER.pack(_MAGIC, _HEADER.size + len(body)) + body


class Icns(Encoder[IcnsKey]):
    key_type = IcnsKey

    def __init__(self, capacity: int | None = None) -> None:
        super().__init__(capacity)
        self._entries: dict[IcnsKey, bytes] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def keys(self) -> list[IcnsKey]:
        return sorted(self._entries)

    def _add_entry(self, filter: Filter, source: Image, key: IcnsKey) -> None:
        if key in self._entries:
            raise AlreadyIncludedError(key)
        self._entries[key] = png_entry(filter, source, key.as_size())

    def write(self, sink: BinaryIO) -> Icns:
        sink.write(build_icns(list(self._entries.items())))
        return self


class IcnsDecoder(Decoder[IcnsKey]):
    key_type = IcnsKey

    @classmethod
    def read(cls, stream: BinaryIO) -> IcnsDecoder:
        data = stream.read()
        entries: dict[IcnsKey, Image] = {}
        try:
            for ostype, payload in _iter_elements(data):
                key = IcnsKey.from_ostype(ostype)
                if key is None:
                    # TOC, icnV, info, legacy bitmap and mask types.
                    logger.debug("icns: element %r skipped", ostype)
                    continue
                if not payload.startswith(_PNG_SIGNATURE):
                    raise UnsupportedError(
                        f"ICNS element {ostype.decode('latin-1')} does not hold a PNG payload"
                    )
                if key in entries:
                    continue
                entries[key] = Raster(decode_png(io.BytesIO(payload)))
        except IconIOError as e:
            raise DecodingIOError(e) from e
        return cls(entries)


def _iter_elements(data: bytes) -> Iterator[tuple[bytes, bytes]]:
    if len(data) < _HEADER.size:
        raise IconIOError(ErrorKind.INVALID_DATA, "ICNS header truncated")
    magic, total = _HEADER.unpack_from(data, 0)
    if magic != _MAGIC:
        raise IconIOError(ErrorKind.INVALID_DATA, "not an ICNS file (magic mismatch)")
    if total > len(data):
        raise IconIOError(ErrorKind.INVALID_DATA, "ICNS file truncated")

    pos = _HEADER.size
    while pos < total:
        if pos + _HEADER.size > total:
            raise IconIOError(ErrorKind.INVALID_DATA, "ICNS element header truncated")
        ostype, length = _HEADER.unpack_from(data, pos)
        if length < _HEADER.size or pos + length > total:
            raise IconIOError(ErrorKind.INVALID_DATA, f"ICNS element {ostype!r} has a bad length")
        yield ostype, data[pos + _HEADER.size : pos + length]
        pos += length
