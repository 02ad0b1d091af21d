"""Helpers for emitting bundles as GNU tar archives or directory trees."""

from __future__ import annotations

import io
import tarfile
from pathlib import Path, PurePosixPath
from typing import BinaryIO


def open_tar(sink: BinaryIO) -> tarfile.TarFile:
    # Stream mode: the sink does not need to be seekable.
    return tarfile.open(fileobj=sink, mode="w|", format=tarfile.GNU_FORMAT)


def append_bytes(tar: tarfile.TarFile, name: str | PurePosixPath, data: bytes) -> None:
    info = tarfile.TarInfo(str(name))
    info.size = len(data)
    info.mode = 0o644
    tar.addfile(info, io.BytesIO(data))


def safe_join(root: Path, name: str | PurePosixPath) -> Path:
    parts = [p for p in PurePosixPath(name).parts if p not in {"/", ""}]
    if any(p in {"..", "."} for p in parts):
        raise ValueError(f"invalid bundle path: {name}")
    return root.joinpath(*parts)


def save_file(root: Path, name: str | PurePosixPath, data: bytes) -> Path:
    path = safe_join(root, name)
    path.parent.mkdir(parents=True, exist_ok=True)
    _ = path.write_bytes(data)
    return path
