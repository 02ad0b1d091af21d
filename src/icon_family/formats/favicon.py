"""Favicon bundles.

A bundle is a set of per-size icon files plus an HTML helper (and optionally a
web app manifest) referencing them::

    icons/favicon-0.png
    icons/favicon-1.svg
    ...
    app.webmanifest        (pwa option)
    helper.html

Raster sources produce one PNG per size. SVG sources are not rasterized: a single
SVG file can serve many sizes, so identical SVG payloads are stored once and the
helper lists every size they serve in one ``<link>`` tag.

Entries are numbered by ascending smallest served size, ties broken by insertion
order, so the emitted layout only depends on what was added.
"""

from __future__ import annotations

import logging
import os
from bisect import insort
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path, PurePosixPath
from typing import BinaryIO, Literal

from icon_family.archive import append_bytes, open_tar, save_file
from icon_family.config import settings
from icon_family.encode import Encoder, png_entry, svg_bytes
from icon_family.errors import AlreadyIncludedError
from icon_family.image import Filter, Image, Svg
from icon_family.keys import FaviconKey
from icon_family.schemas import ManifestIcon, WebManifest

logger = logging.getLogger(__name__)

APPLE_TOUCH_SIZES = frozenset({76, 120, 152, 180})

# Bundle layout.
ICONS_DIR = PurePosixPath("icons")
HELPER_NAME = PurePosixPath("helper.html")
MANIFEST_NAME = PurePosixPath("app.webmanifest")

Kind = Literal["png", "svg"]

_MIME: dict[Kind, str] = {
    "png": "image/png",
    "svg": "image/svg+xml",
}


@dataclass
class _Buffer:
    kind: Kind
    data: bytes
    # Ascending, never empty. Raster buffers serve exactly one size.
    sizes: list[int] = field(default_factory=list)

    @property
    def min_size(self) -> int:
        return self.sizes[0]


@dataclass(frozen=True)
class FaviconEntry:
    """One emitted file of the bundle."""

    index: int
    kind: Kind
    sizes: tuple[int, ...]
    data: bytes
    path: PurePosixPath

    @property
    def mime_type(self) -> str:
        return _MIME[self.kind]

    @property
    def sizes_attr(self) -> str:
        return " ".join(f"{s}x{s}" for s in self.sizes)


def _link(rel: str, mime: str, sizes: str, href: PurePosixPath) -> str:
    return f'<link rel="{rel}" type="{mime}" sizes="{sizes}" href="{href}">\n'


class Favicon(Encoder[FaviconKey]):
    key_type = FaviconKey

    def __init__(
        self,
        capacity: int | None = None,
        *,
        apple_touch: bool | None = None,
        pwa: bool | None = None,
    ) -> None:
        super().__init__(capacity)
        self.apple_touch = settings.favicon_apple_touch if apple_touch is None else apple_touch
        self.pwa = settings.favicon_pwa if pwa is None else pwa

        # Insertion order doubles as the tiebreaker for entry numbering.
        self._buffers: list[_Buffer] = []
        self._png: dict[int, _Buffer] = {}
        self._svg: dict[bytes, _Buffer] = {}
        # Union of all SVG size lists.
        self._svg_sizes: set[int] = set()

    def include_apple_touch_helper(self, value: bool = True) -> Favicon:
        self.apple_touch = value
        return self

    def include_pwa_helper(self, value: bool = True) -> Favicon:
        self.pwa = value
        return self

    def __len__(self) -> int:
        return len(self._png) + sum(len(b.sizes) for b in self._svg.values())

    def keys(self) -> list[FaviconKey]:
        return [FaviconKey(s) for s in sorted(self._sizes())]

    def _sizes(self) -> set[int]:
        return set(self._png) | self._svg_sizes

    def _add_entry(self, filter: Filter, source: Image, key: FaviconKey) -> None:
        size = key.as_size()
        # A size is claimed at most once across PNG and SVG entries.
        if size in self._png or size in self._svg_sizes:
            raise AlreadyIncludedError(key)

        if isinstance(source, Svg):
            self._insert_svg(svg_bytes(source.document), size)
        else:
            self._insert_png(png_entry(filter, source, size), size)

    def _insert_png(self, data: bytes, size: int) -> None:
        buf = _Buffer("png", data, [size])
        self._png[size] = buf
        self._buffers.append(buf)

    def _insert_svg(self, data: bytes, size: int) -> None:
        buf = self._svg.get(data)
        if buf is None:
            buf = _Buffer("svg", data, [size])
            self._svg[data] = buf
            self._buffers.append(buf)
        else:
            insort(buf.sizes, size)
        self._svg_sizes.add(size)

    def entries(self) -> list[FaviconEntry]:
        """The files of the bundle in emission order."""
        ordered = sorted(self._buffers, key=lambda b: b.min_size)
        return [
            FaviconEntry(
                index=i,
                kind=buf.kind,
                sizes=tuple(buf.sizes),
                data=buf.data,
                path=ICONS_DIR / f"favicon-{i}.{buf.kind}",
            )
            for i, buf in enumerate(ordered)
        ]

    def html_helper(self, entries: list[FaviconEntry] | None = None) -> str:
        if entries is None:
            entries = self.entries()

        lines: list[str] = []
        for entry in entries:
            lines.append(_link("icon", entry.mime_type, entry.sizes_attr, entry.path))
            if self.apple_touch:
                touch = [s for s in entry.sizes if s in APPLE_TOUCH_SIZES]
                if touch:
                    sizes = " ".join(f"{s}x{s}" for s in touch)
                    lines.append(
                        _link("apple-touch-icon-precomposed", entry.mime_type, sizes, entry.path)
                    )
        if self.pwa:
            lines.append(f'<link rel="manifest" href="{MANIFEST_NAME}">\n')
        return "".join(lines)

    def manifest(self, entries: list[FaviconEntry] | None = None) -> WebManifest:
        if entries is None:
            entries = self.entries()
        return WebManifest(
            icons=[
                ManifestIcon(src=str(e.path), sizes=e.sizes_attr, mime_type=e.mime_type)
                for e in entries
            ]
        )

    def _files(self) -> list[tuple[PurePosixPath, bytes]]:
        entries = self.entries()
        files = [(e.path, e.data) for e in entries]
        if self.pwa:
            files.append(
                (
                    MANIFEST_NAME,
                    self.manifest(entries).to_json().encode("utf-8"),
                )
            )
        files.append(
            (
                HELPER_NAME,
                self.html_helper(entries).encode("utf-8"),
            )
        )
        return files

    def write(self, sink: BinaryIO) -> Favicon:
        """Writes the bundle to ``sink`` as a GNU tar archive."""
        files = self._files()
        with open_tar(sink) as tar:
            for name, data in files:
                append_bytes(tar, name, data)
        logger.debug("favicon: wrote tar bundle with %d files", len(files))
        return self

    def save(self, path: str | PathLike[str]) -> Favicon:
        """Writes the bundle to a directory, or as a tar into an existing regular file."""
        target = Path(path)
        if target.is_file():
            return super().save(target)

        files = self._files()
        for name, data in files:
            _ = save_file(target, name, data)
        logger.debug("favicon: saved %d files under %s", len(files), os.fspath(target))
        return self
