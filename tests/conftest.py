"""Shared test doubles."""

import pytest

from byteserve.core.model import SinkFailedError
from byteserve.io.sinks import BufferBodyWriter


class CountingSource:
    """In-memory ByteSource that records calls.

    `truncate_to` makes reads stop at that offset; `refuse_seek_from` makes
    seeks to that offset or beyond fail.
    """

    def __init__(self, data: bytes, *, truncate_to=None, refuse_seek_from=None):
        self.data = data
        self.truncate_to = len(data) if truncate_to is None else truncate_to
        self.refuse_seek_from = refuse_seek_from
        self.offset = 0
        self.seeks = []
        self.read_sizes = []
        self.close_calls = 0

    @property
    def size(self) -> int:
        return len(self.data)

    def seek(self, offset: int) -> bool:
        self.seeks.append(offset)
        if self.refuse_seek_from is not None and offset >= self.refuse_seek_from:
            return False
        self.offset = offset
        return True

    def read_exactly(self, length: int) -> bytes:
        self.read_sizes.append(length)
        end = min(self.offset + length, self.truncate_to)
        chunk = self.data[self.offset:end]
        self.offset += len(chunk)
        return chunk

    def close(self) -> None:
        self.close_calls += 1


class FailingWriter(BufferBodyWriter):
    """Buffer writer that fails once `limit` writes have been accepted."""

    def __init__(self, limit: int):
        super().__init__()
        self.limit = limit
        self.writes = 0

    def write(self, chunk) -> None:
        if self.writes >= self.limit:
            raise SinkFailedError("peer went away")
        self.writes += 1
        super().write(chunk)


@pytest.fixture
def payload() -> bytes:
    """100 bytes where byte i is i."""
    return bytes(range(100))


class DeadWriter(BufferBodyWriter):
    """Writer whose peer is already gone: every write fails."""

    def write(self, chunk) -> None:
        raise SinkFailedError("peer went away")
