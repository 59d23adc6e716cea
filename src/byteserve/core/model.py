from __future__ import annotations
from dataclasses import dataclass
from typing import Mapping, Tuple

from requests.structures import CaseInsensitiveDict


@dataclass(frozen=True, slots=True)
class ByteRange:
    start: int
    end: int                   # inclusive

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"


@dataclass(frozen=True, slots=True)
class RangeRequest:
    unit: str                  # echoed verbatim in Content-Range
    ranges: Tuple[ByteRange, ...]


class RangeParseError(ValueError):
    """Raised when a Range header value cannot be served."""
    pass


class InvalidRangeError(RangeParseError):
    """Raised for a malformed, inverted or out-of-bounds range spec."""

    def __init__(self, spec: str, reason: str):
        self.spec = spec
        self.reason = reason
        super().__init__(f"Invalid range {spec!r}: {reason}")


class EmitError(IOError):
    """Raised when a body stops part way through emission."""
    pass


class SeekFailedError(EmitError):
    pass


class ShortReadError(EmitError):

    def __init__(self, offset: int, expected: int, actual: int):
        self.offset = offset
        self.expected = expected
        self.actual = actual
        super().__init__(f"Short read at offset {offset}: expected {expected} bytes, got {actual}")


class SinkFailedError(EmitError):
    """Raised when the body writer refuses further writes."""
    pass


class SerializationError(RuntimeError):
    """Raised by body serializers; recovered inside the response body."""
    pass


class HeaderMap(CaseInsensitiveDict):
    """Header name -> value, case-insensitive, last write wins."""

    def merge(self, other: Mapping[str, str] | None) -> "HeaderMap":
        if other:
            for name, value in other.items():
                # drop the old key so the new spelling is kept
                self.pop(name, None)
                self[name] = value
        return self
