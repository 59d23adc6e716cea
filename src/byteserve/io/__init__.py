"""I/O layer for byteserve - byte sources in, body writers out."""

from ..config import DEFAULT_CONFIG

# Re-export these for import convenience
from .base import ByteSource, BodyWriter, RangeNotSupportedError
from .local import LocalByteSource, open_local_source
from .http_sync import HTTPByteSource, open_http_source
from .sinks import BufferBodyWriter, StreamBodyWriter


def open_source(source, config=None):
    """Factory function to create the appropriate ByteSource for `source`.

    `config` only affects remote sources; local files have no settings.
    """
    if hasattr(source, 'read'):  # BinaryIO
        return open_local_source(source)

    source_str = str(source)
    if source_str.startswith(("http://", "https://")):
        return open_http_source(source_str, config or DEFAULT_CONFIG)
    else:
        return open_local_source(source)
