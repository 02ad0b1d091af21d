"""Encoder and decoder for Windows ``.ico`` files.

Entries are stored as embedded PNGs (supported since Windows Vista); the decoder
also accepts classic BMP/DIB payloads.
"""

from __future__ import annotations

import io
import logging
import struct
from collections.abc import Iterator
from typing import BinaryIO

from PIL import IcoImagePlugin
from PIL import Image as PILImage

from icon_family.decode import Decoder, decode_png
from icon_family.encode import Encoder, png_entry
from icon_family.errors import AlreadyIncludedError, DecodingIOError, ErrorKind, IconIOError
from icon_family.image import Filter, Image, Raster
from icon_family.keys import ICO_MAX_SIZE, IcoKey

logger = logging.getLogger(__name__)

_PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
_ICONDIR = struct.Struct("<HHH")
_ICONDIRENTRY = struct.Struct("<BBBBHHII")
_RESOURCE_ICON = 1


def _width_height_byte(v: int) -> int:
    # ICO uses 1 byte for width/height; 0 means 256.
    if not (1 <= v <= ICO_MAX_SIZE):
        raise ValueError(f"icon size out of range for ICO: {v}")
    return v % ICO_MAX_SIZE


def build_ico(entries: list[tuple[int, bytes]]) -> bytes:
    """Packs ``(size, png_bytes)`` pairs into an ICO file, smallest first."""
    entries = sorted(entries, key=lambda x: x[0])

    count = len(entries)
    header = _ICONDIR.pack(0, _RESOURCE_ICON, count)
    dir_entries: list[bytes] = []
    blobs: list[bytes] = []

    # ICONDIR (6 bytes) + N * ICONDIRENTRY (16 bytes each)
    offset = _ICONDIR.size + _ICONDIRENTRY.size * count
    for size, blob in entries:
        side = _width_height_byte(size)
        dir_entries.append(
            _ICONDIRENTRY.pack(
                side,
                side,
                0,  # color count
                0,  # reserved
                1,  # planes
                32,  # bit count
                len(blob),
                offset,
            )
        )
        blobs.append(blob)
        offset += len(blob)

    return header + b"".join(dir_entries) + b"".join(blobs)


class Ico(Encoder[IcoKey]):
    key_type = IcoKey

    def __init__(self, capacity: int | None = None) -> None:
        super().__init__(capacity)
        self._entries: dict[IcoKey, bytes] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def keys(self) -> list[IcoKey]:
        return sorted(self._entries)

    def _add_entry(self, filter: Filter, source: Image, key: IcoKey) -> None:
        if key in self._entries:
            raise AlreadyIncludedError(key)
        self._entries[key] = png_entry(filter, source, key.as_size())

    def write(self, sink: BinaryIO) -> Ico:
        data = build_ico([(k.as_size(), blob) for k, blob in self._entries.items()])
        sink.write(data)
        return self


class IcoDecoder(Decoder[IcoKey]):
    key_type = IcoKey

    @classmethod
    def read(cls, stream: BinaryIO) -> IcoDecoder:
        data = stream.read()
        entries: dict[IcoKey, Image] = {}
        try:
            for key, payload in _iter_payloads(data):
                if key in entries:
                    logger.debug("ico: duplicate %r entry skipped", key)
                    continue
                entries[key] = Raster(_decode_payload(data, key, payload))
        except IconIOError as e:
            raise DecodingIOError(e) from e
        return cls(entries)


def _iter_payloads(data: bytes) -> Iterator[tuple[IcoKey, bytes]]:
    if len(data) < _ICONDIR.size:
        raise IconIOError(ErrorKind.INVALID_DATA, "ICO header truncated")
    reserved, restype, count = _ICONDIR.unpack_from(data, 0)
    if reserved != 0 or restype != _RESOURCE_ICON:
        raise IconIOError(ErrorKind.INVALID_DATA, "not an ICO file (header mismatch)")

    for i in range(count):
        pos = _ICONDIR.size + i * _ICONDIRENTRY.size
        if pos + _ICONDIRENTRY.size > len(data):
            raise IconIOError(ErrorKind.INVALID_DATA, "ICO directory truncated")
        width, height, _, _, _, _, length, offset = _ICONDIRENTRY.unpack_from(data, pos)
        if width != height:
            logger.debug("ico: non-square %sx%s entry skipped", width or 256, height or 256)
            continue
        if offset + length > len(data):
            raise IconIOError(ErrorKind.INVALID_DATA, "ICO entry points past end of file")
        yield IcoKey.from_raw(width), data[offset : offset + length]


def _decode_payload(data: bytes, key: IcoKey, payload: bytes) -> PILImage.Image:
    if payload.startswith(_PNG_SIGNATURE):
        return decode_png(io.BytesIO(payload))

    # BMP payloads carry an AND mask and a doubled height; Pillow's ICO plugin handles both.
    size = key.as_size()
    try:
        ico_file = IcoImagePlugin.IcoFile(io.BytesIO(data))
        return ico_file.getimage((size, size)).convert("RGBA")
    except (SyntaxError, ValueError, IndexError, EOFError, OSError, struct.error) as e:
        raise IconIOError(ErrorKind.INVALID_DATA, f"malformed ICO bitmap entry: {e}") from e
