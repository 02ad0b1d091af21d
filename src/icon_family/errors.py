"""Error taxonomy.

Two error kinds carry the interesting failures of the library:

- ``ResampleError``: a resampling filter failed, either with an I/O error or by
  returning an image of the wrong dimensions.
- ``EncodingError``: an encoder rejected an entry, either because its key is
  already included or because resampling failed.

Both convert to a generic ``OSError`` through ``to_io_error()`` so that callers
that only care about "did the I/O work" can treat every failure uniformly.
"""

from __future__ import annotations

import enum
from typing import Generic, TypeVar

K = TypeVar("K")

_MISMATCHED_DIM_ERR = (
    "a resampling filter returned an image of dimensions other than the ones "
    "specified by its arguments"
)


class ErrorKind(enum.Enum):
    OTHER = "other"
    INVALID_DATA = "invalid data"
    INVALID_INPUT = "invalid input"


class IconIOError(OSError):
    """Generic I/O failure tagged with an ``ErrorKind``."""

    def __init__(self, kind: ErrorKind, message: str | None = None) -> None:
        self.kind = kind
        super().__init__(message or kind.value)

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else self.kind.value


class IconError(Exception):
    def to_io_error(self) -> OSError:
        return IconIOError(ErrorKind.OTHER, str(self))


class ResampleError(IconError):
    pass


class ResampleIOError(ResampleError):
    def __init__(self, error: OSError) -> None:
        self.error = error
        super().__init__(str(error))

    def to_io_error(self) -> OSError:
        return self.error


class MismatchedDimensionsError(ResampleError):
    def __init__(self, expected: int, actual: tuple[int, int]) -> None:
        self.expected = expected
        self.actual = (int(actual[0]), int(actual[1]))
        super().__init__(
            f"{_MISMATCHED_DIM_ERR}: expected {expected}x{expected}, "
            f"got {self.actual[0]}x{self.actual[1]}"
        )

    def to_io_error(self) -> OSError:
        return IconIOError(ErrorKind.INVALID_DATA, str(self))


class EncodingError(IconError, Generic[K]):
    pass


class AlreadyIncludedError(EncodingError[K]):
    def __init__(self, key: K) -> None:
        self.key = key
        super().__init__(f"the icon already contains an entry associated with the key {key!r}")

    def to_io_error(self) -> OSError:
        return IconIOError(ErrorKind.INVALID_INPUT, str(self))


class EncodingResampleError(EncodingError[K]):
    def __init__(self, error: ResampleError) -> None:
        self.error = error
        super().__init__(str(error))

    def to_io_error(self) -> OSError:
        return self.error.to_io_error()


class DecodingError(IconError):
    pass


class DecodingIOError(DecodingError):
    def __init__(self, error: OSError) -> None:
        self.error = error
        super().__init__(str(error))

    def to_io_error(self) -> OSError:
        return self.error


class UnsupportedError(DecodingError):
    """The decoder does not support a feature present in its input."""

    def to_io_error(self) -> OSError:
        return IconIOError(ErrorKind.INVALID_INPUT, str(self))


def resample_error_from(exc: OSError | ResampleError) -> ResampleError:
    if isinstance(exc, ResampleError):
        return exc
    err = ResampleIOError(exc)
    err.__cause__ = exc
    return err
