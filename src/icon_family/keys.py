from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Protocol, runtime_checkable

# ICO stores width/height in one byte; 0 means 256.
ICO_MAX_SIZE = 256
# Favicon sizes are bounded by a u16 field; 0 means 65536.
FAVICON_MAX_SIZE = 65_536


@runtime_checkable
class AsSize(Protocol):
    """A key type that projects to a square pixel dimension."""

    def as_size(self) -> int: ...


def _check_int(value: object, type_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{type_name} expects an integer, got {value!r}")
    return value


@dataclass(frozen=True, order=True)
class IcoKey:
    size: int

    def __post_init__(self) -> None:
        size = _check_int(self.size, "IcoKey")
        if not 1 <= size <= ICO_MAX_SIZE:
            raise ValueError(f"ICO entries must be 1..{ICO_MAX_SIZE} pixels wide, got {size}")

    @classmethod
    def from_raw(cls, raw: int) -> IcoKey:
        """Accepts 0..=256, where 0 is the on-wire spelling of 256."""
        raw = _check_int(raw, "IcoKey")
        return cls(ICO_MAX_SIZE if raw == 0 else raw)

    @property
    def raw(self) -> int:
        return self.size % ICO_MAX_SIZE

    def as_size(self) -> int:
        return self.size


class IcnsKey(enum.IntEnum):
    RGBA16 = 16
    RGBA32 = 32
    RGBA64 = 64
    RGBA128 = 128
    RGBA256 = 256
    RGBA512 = 512
    RGBA1024 = 1024

    @classmethod
    def from_raw(cls, raw: int) -> IcnsKey:
        raw = _check_int(raw, "IcnsKey")
        try:
            return cls(raw)
        except ValueError:
            allowed = ", ".join(str(int(k)) for k in cls)
            raise ValueError(f"ICNS does not support {raw}x{raw} entries (allowed: {allowed})") from None

    @property
    def ostype(self) -> bytes:
        return _ICNS_OSTYPES[self]

    @classmethod
    def from_ostype(cls, ostype: bytes) -> IcnsKey | None:
        return _ICNS_BY_OSTYPE.get(ostype)

    def as_size(self) -> int:
        return int(self.value)


# PNG-payload element types.
_ICNS_OSTYPES: dict[IcnsKey, bytes] = {
    IcnsKey.RGBA16: b"icp4",
    IcnsKey.RGBA32: b"icp5",
    IcnsKey.RGBA64: b"icp6",
    IcnsKey.RGBA128: b"ic07",
    IcnsKey.RGBA256: b"ic08",
    IcnsKey.RGBA512: b"ic09",
    IcnsKey.RGBA1024: b"ic10",
}
_ICNS_BY_OSTYPE = {v: k for k, v in _ICNS_OSTYPES.items()}


@dataclass(frozen=True, order=True)
class FaviconKey:
    size: int

    def __post_init__(self) -> None:
        size = _check_int(self.size, "FaviconKey")
        if not 1 <= size <= FAVICON_MAX_SIZE:
            raise ValueError(
                f"favicon entries must be 1..{FAVICON_MAX_SIZE} pixels wide, got {size}"
            )

    @classmethod
    def from_raw(cls, raw: int) -> FaviconKey:
        """Accepts 0..=65536; 0 and 65536 are two spellings of the same key."""
        raw = _check_int(raw, "FaviconKey")
        return cls(FAVICON_MAX_SIZE if raw == 0 else raw)

    @property
    def raw(self) -> int:
        return self.size % FAVICON_MAX_SIZE

    def as_size(self) -> int:
        return self.size


@dataclass(frozen=True)
class PngKey:
    size: int
    path: PurePosixPath

    def __post_init__(self) -> None:
        size = _check_int(self.size, "PngKey")
        if size <= 0:
            raise ValueError(f"PngKey size must be positive, got {size}")
        path = PurePosixPath(self.path)
        if path.is_absolute() or any(p == ".." for p in path.parts) or not path.parts:
            raise ValueError(f"PngKey path must be a relative path, got {str(self.path)!r}")
        object.__setattr__(self, "path", path)

    @classmethod
    def from_raw(cls, raw: int) -> PngKey:
        raw = _check_int(raw, "PngKey")
        return cls(raw, PurePosixPath(f"{raw}.png"))

    def as_size(self) -> int:
        return self.size
