"""PNG sequences: a set of ``.png`` files indexed by path, bundled as a tar archive."""

from __future__ import annotations

from os import PathLike
from pathlib import Path
from typing import BinaryIO

from icon_family.archive import append_bytes, open_tar, save_file
from icon_family.encode import Encoder, png_entry
from icon_family.errors import AlreadyIncludedError
from icon_family.image import Filter, Image
from icon_family.keys import PngKey


class PngSequence(Encoder[PngKey]):
    key_type = PngKey

    def __init__(self, capacity: int | None = None) -> None:
        super().__init__(capacity)
        self._entries: dict[PngKey, bytes] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def keys(self) -> list[PngKey]:
        return list(self._entries)

    def _add_entry(self, filter: Filter, source: Image, key: PngKey) -> None:
        if any(k.path == key.path for k in self._entries):
            raise AlreadyIncludedError(key)
        self._entries[key] = png_entry(filter, source, key.as_size())

    def write(self, sink: BinaryIO) -> PngSequence:
        with open_tar(sink) as tar:
            for key, data in self._entries.items():
                append_bytes(tar, key.path, data)
        return self

    def save(self, path: str | PathLike[str]) -> PngSequence:
        target = Path(path)
        if target.is_file():
            return super().save(target)
        for key, data in self._entries.items():
            _ = save_file(target, key.path, data)
        return self
