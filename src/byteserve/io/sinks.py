"""Body writers that response bodies are streamed into."""

import logging
from typing import BinaryIO

from ..core.model import SeekFailedError, ShortReadError, SinkFailedError
from .base import ByteSource, Chunk

logger = logging.getLogger(__name__)


def _as_bytes(chunk: Chunk) -> bytes:
    if isinstance(chunk, str):
        return chunk.encode('utf-8')
    return bytes(chunk)


class _SourceCopyMixin:
    """`write_source` shared by the concrete writers."""

    def write_source(self, source: ByteSource, chunk_size: int) -> None:
        if not source.seek(0):
            raise SeekFailedError("Could not seek to offset 0")
        remaining = source.size
        offset = 0
        while remaining > 0:
            want = min(chunk_size, remaining)
            try:
                data = source.read_exactly(want)
            except OSError as e:
                raise ShortReadError(offset, want, 0) from e
            if len(data) < want:
                raise ShortReadError(offset, want, len(data))
            self.write(data)
            offset += want
            remaining -= want


class StreamBodyWriter(_SourceCopyMixin):
    """Writes into a binary stream such as a socket file or stdout buffer."""

    def __init__(self, stream: BinaryIO):
        self._stream = stream
        self.bytes_written = 0
        self.failed = False

    def write(self, chunk: Chunk) -> None:
        if self.failed:
            raise SinkFailedError("Writer already failed")
        data = _as_bytes(chunk)
        try:
            self._stream.write(data)
        except (OSError, ValueError) as e:
            self.failed = True
            logger.warning("Body write failed after %s bytes: %s", self.bytes_written, e)
            raise SinkFailedError(f"Write failed: {e}") from e
        self.bytes_written += len(data)

    def flush(self) -> None:
        try:
            self._stream.flush()
        except (OSError, ValueError) as e:
            self.failed = True
            raise SinkFailedError(f"Flush failed: {e}") from e


class BufferBodyWriter(_SourceCopyMixin):
    """Collects the body in memory."""

    def __init__(self):
        self._buf = bytearray()

    def write(self, chunk: Chunk) -> None:
        self._buf.extend(_as_bytes(chunk))

    @property
    def bytes_written(self) -> int:
        return len(self._buf)

    def getvalue(self) -> bytes:
        return bytes(self._buf)
