"""Local file byte sources."""

import io
import logging
import os
from pathlib import Path
from typing import BinaryIO, Union

logger = logging.getLogger(__name__)


class LocalByteSource:
    """Byte source over a local file or a seekable binary file object.

    A file object handed in is owned by the source from then on and is
    closed with it.
    """

    def __init__(self, source: Union[Path, str, BinaryIO]):
        self.bytes_read = 0
        self.reads_made = 0
        self.closed = False

        if hasattr(source, 'read'):
            # BinaryIO object
            self._file = source
            if not self._file.seekable():
                raise IOError("File is not seekable")
        else:
            # Path or str
            self._file = open(source, 'rb')
        self.name = getattr(self._file, 'name', None)
        self._size = self._measure()

    def _measure(self) -> int:
        if isinstance(self._file, io.BytesIO):
            return len(self._file.getbuffer())
        try:
            return os.fstat(self._file.fileno()).st_size
        except (io.UnsupportedOperation, OSError, AttributeError):
            # Fallback for file objects without a descriptor
            current_pos = self._file.tell()
            end = self._file.seek(0, os.SEEK_END)
            self._file.seek(current_pos)
            return end

    @property
    def size(self) -> int:
        """Return the total size of the source in bytes."""
        return self._size

    def seek(self, offset: int) -> bool:
        if self.closed or offset < 0 or offset > self._size:
            return False
        try:
            self._file.seek(offset)
        except (OSError, ValueError) as e:
            logger.warning("Seek to %s failed on %s: %s", offset, self.name, e)
            return False
        return True

    def read_exactly(self, length: int) -> bytes:
        """Return `length` bytes from the current offset, or fewer at EOF."""
        if self.closed:
            raise IOError("Source is closed")
        self.reads_made += 1
        buf = bytearray()
        while len(buf) < length:
            chunk = self._file.read(length - len(buf))
            if not chunk:
                break
            buf.extend(chunk)
        self.bytes_read += len(buf)
        return bytes(buf)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        """Close the underlying file. Safe to call more than once."""
        if self.closed:
            return
        self.closed = True
        self._file.close()


def open_local_source(source: Union[Path, str, BinaryIO]) -> LocalByteSource:
    """Create a local byte source."""
    return LocalByteSource(source)
