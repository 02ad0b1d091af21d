from __future__ import annotations

import copy
import io
import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass

from PIL import Image as PILImage

from icon_family.config import settings
from icon_family.errors import ErrorKind, IconIOError

logger = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"

# Serialization prefixes. Applied to a copy of the tree in to_bytes(), so the
# process-wide ElementTree prefix map is left alone.
_PREFIXES = {SVG_NS: "", XLINK_NS: "xlink"}

_LENGTH_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)\s*(px)?\s*$")
_SPLIT_RE = re.compile(r"[\s,]+")


@dataclass(frozen=True)
class ViewBox:
    x: float
    y: float
    width: float
    height: float


def _parse_length(value: str | None) -> float | None:
    if not value:
        return None
    m = _LENGTH_RE.match(value)
    if not m:
        # Relative units (%, em) have no intrinsic size.
        return None
    v = float(m.group(1))
    return v if v > 0 else None


def _parse_view_box(value: str | None) -> ViewBox | None:
    if not value:
        return None
    parts = [p for p in _SPLIT_RE.split(value.strip()) if p]
    if len(parts) != 4:
        raise IconIOError(ErrorKind.INVALID_DATA, f"invalid viewBox: {value!r}")
    try:
        x, y, w, h = (float(p) for p in parts)
    except ValueError as e:
        raise IconIOError(ErrorKind.INVALID_DATA, f"invalid viewBox: {value!r}") from e
    if w <= 0 or h <= 0:
        raise IconIOError(ErrorKind.INVALID_DATA, f"viewBox must have a positive size: {value!r}")
    return ViewBox(x, y, w, h)


def _prefixed(name: object, used: set[str]) -> object:
    if not isinstance(name, str) or name[:1] != "{":
        return name
    uri, local = name[1:].split("}", 1)
    prefix = _PREFIXES.get(uri)
    if prefix is None:
        return name
    used.add(uri)
    return f"{prefix}:{local}" if prefix else local


def _strip_whitespace(elem: ET.Element) -> None:
    if elem.text is not None and not elem.text.strip():
        elem.text = None
    if elem.tail is not None and not elem.tail.strip():
        elem.tail = None
    for child in elem:
        _strip_whitespace(child)


class SvgDocument:
    """A parsed SVG document.

    The tree is treated as immutable once parsed; copies share nothing with the
    original, so they are safe to hand out.
    """

    def __init__(self, root: ET.Element) -> None:
        if root.tag not in {f"{{{SVG_NS}}}svg", "svg"}:
            raise IconIOError(ErrorKind.INVALID_DATA, f"root element is not <svg>: {root.tag}")
        _strip_whitespace(root)
        self._root = root
        self._view_box = self._compute_view_box()

    @classmethod
    def from_bytes(cls, data: bytes) -> SvgDocument:
        try:
            root = ET.fromstring(data)
        except ET.ParseError as e:
            raise IconIOError(ErrorKind.INVALID_DATA, f"malformed SVG: {e}") from e
        return cls(root)

    def _compute_view_box(self) -> ViewBox:
        vb = _parse_view_box(self._root.get("viewBox"))
        if vb is not None:
            return vb

        w = _parse_length(self._root.get("width"))
        h = _parse_length(self._root.get("height"))
        if w is not None and h is not None:
            return ViewBox(0.0, 0.0, w, h)

        fallback = settings.svg_fallback_size
        logger.debug("svg without intrinsic size, using %sx%s", fallback, fallback)
        return ViewBox(0.0, 0.0, w or fallback, h or fallback)

    @property
    def root(self) -> ET.Element:
        return copy.deepcopy(self._root)

    @property
    def view_box(self) -> ViewBox:
        return self._view_box

    @property
    def width(self) -> float:
        return self._view_box.width

    @property
    def height(self) -> float:
        return self._view_box.height

    def to_bytes(self) -> bytes:
        """Canonical UTF-8 serialization: no indentation, double-quoted attributes."""
        root = copy.deepcopy(self._root)
        used: set[str] = set()
        for elem in root.iter():
            elem.tag = _prefixed(elem.tag, used)  # pyright: ignore[reportAttributeAccessIssue]
            elem.attrib = {_prefixed(k, used): v for k, v in elem.attrib.items()}  # pyright: ignore[reportAttributeAccessIssue]

        xmlns = {
            (f"xmlns:{_PREFIXES[uri]}" if _PREFIXES[uri] else "xmlns"): uri
            for uri in sorted(used, key=_PREFIXES.__getitem__)
        }
        root.attrib = {**xmlns, **root.attrib}
        return ET.tostring(root, encoding="utf-8", xml_declaration=False)

    def render(self, *, width: int | None = None, height: int | None = None) -> PILImage.Image:
        """Rasterize into an RGBA image.

        Pass exactly one of ``width``/``height``; the other side follows the view-box
        aspect ratio.
        """
        if (width is None) == (height is None):
            raise ValueError("render() needs exactly one of width or height")

        import cairosvg

        try:
            png = cairosvg.svg2png(
                bytestring=self.to_bytes(),
                output_width=width,
                output_height=height,
            )
        except MemoryError as e:
            raise IconIOError(ErrorKind.OTHER, "out of memory while rendering SVG") from e
        except (ValueError, ET.ParseError) as e:
            raise IconIOError(ErrorKind.INVALID_DATA, f"cannot render SVG: {e}") from e

        with PILImage.open(io.BytesIO(png)) as im:
            return im.convert("RGBA")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SvgDocument):
            return NotImplemented
        return self.to_bytes() == other.to_bytes()

    def __hash__(self) -> int:
        return hash(self.to_bytes())

    def __repr__(self) -> str:
        vb = self._view_box
        return f"SvgDocument(view_box=({vb.x}, {vb.y}, {vb.width}, {vb.height}))"
