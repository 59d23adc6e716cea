"""Writes planned byte ranges, or a whole source, into a body writer."""

from __future__ import annotations
import logging
from typing import Iterator

from ..config import DEFAULT_CONFIG
from ..io.base import BodyWriter, ByteSource
from .model import ByteRange, EmitError, SeekFailedError, ShortReadError, SinkFailedError
from .plan import PlanDescriptor

logger = logging.getLogger(__name__)

CRLF = "\r\n"


def _part_header(plan: PlanDescriptor, start: int, end: int) -> str:
    return (
        f"{CRLF}--{plan.boundary}{CRLF}"
        f"Content-Type: {plan.mime_type}{CRLF}"
        f"Content-Range: bytes {start}-{end}/{plan.file_size}{CRLF}"
        f"{CRLF}"
    )


def _write(sink: BodyWriter, chunk) -> None:
    try:
        sink.write(chunk)
    except EmitError:
        raise
    except OSError as e:
        raise SinkFailedError(f"Write failed: {e}") from e


def _read_chunk(source: ByteSource, offset: int, length: int) -> bytes:
    try:
        data = source.read_exactly(length)
    except EmitError:
        raise
    except OSError as e:
        raise ShortReadError(offset, length, 0) from e
    if len(data) < length:
        raise ShortReadError(offset, length, len(data))
    return data


def _iter_part(source: ByteSource, part: ByteRange, chunk_size: int) -> Iterator[bytes]:
    """Yield the bytes of `part` in pieces of at most `chunk_size`."""
    if not source.seek(part.start):
        raise SeekFailedError(f"Could not seek to offset {part.start}")
    offset = part.start
    remaining = part.length
    while remaining > 0:
        want = min(chunk_size, remaining)
        yield _read_chunk(source, offset, want)
        offset += want
        remaining -= want


def emit(plan: PlanDescriptor, source: ByteSource, sink: BodyWriter,
         chunk_size: int = DEFAULT_CONFIG.chunk_size) -> None:
    """Stream every part of `plan` from `source` into `sink`, in request order.

    The source is closed exactly once whether emission completes or not.
    Each range is read in pieces of at most `chunk_size` bytes. Seek, read
    and sink failures stop at the failing part and propagate as
    :class:`EmitError` subclasses.
    """
    try:
        for part in plan.parts:
            for index, data in enumerate(_iter_part(source, part, chunk_size)):
                if index == 0 and plan.is_multipart:
                    # part header only once the first chunk is in hand
                    _write(sink, _part_header(plan, part.start, part.end))
                _write(sink, data)
            logger.debug("Emitted range %s (%s bytes)", part, part.length)
        if plan.is_multipart:
            _write(sink, f"{CRLF}--{plan.boundary}--{CRLF}")
    except EmitError as e:
        logger.warning("Range emission aborted: %s", e)
        raise
    finally:
        source.close()


def emit_full(source: ByteSource, sink: BodyWriter, chunk_size: int) -> None:
    """Stream the whole of `source` into `sink`, then close the source."""
    try:
        sink.write_source(source, chunk_size)
    except EmitError as e:
        logger.warning("Body emission aborted: %s", e)
        raise
    finally:
        source.close()
