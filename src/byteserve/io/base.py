"""Base protocols and shared types for I/O layer."""

from typing import Protocol, Union, runtime_checkable


class RangeNotSupportedError(RuntimeError):
    """Raised when upstream rejects Range and object size > range_fallback_max."""


Chunk = Union[bytes, bytearray, memoryview, str]


@runtime_checkable
class ByteSource(Protocol):
    """Protocol for seekable, closable byte sources of fixed size."""

    @property
    def size(self) -> int:
        ...

    def seek(self, offset: int) -> bool:
        """Move to absolute `offset`. Return False if that is not possible."""
        ...

    def read_exactly(self, length: int) -> bytes:
        """Return up to `length` bytes from the current offset.
        Fewer bytes than requested means the source ran out.
        """
        ...

    def close(self) -> None:
        ...


@runtime_checkable
class BodyWriter(Protocol):
    """Protocol for response body sinks. Every write may raise SinkFailedError."""

    def write(self, chunk: Chunk) -> None:
        """Write raw bytes, or text encoded as UTF-8."""
        ...

    def write_source(self, source: ByteSource, chunk_size: int) -> None:
        """Write the whole of `source` from offset 0."""
        ...
