"""Single-range / multi-range response planning."""

from __future__ import annotations
import logging
import uuid
from dataclasses import dataclass
from typing import Optional, Tuple

from .model import ByteRange, HeaderMap, InvalidRangeError, RangeRequest

logger = logging.getLogger(__name__)

PARTIAL_CONTENT = 206
MULTIPART_BYTERANGES = "multipart/byteranges"


def new_boundary() -> str:
    """Return a fresh 128-bit multipart boundary token (32 hex chars)."""
    return uuid.uuid4().hex


@dataclass(frozen=True)
class PlanDescriptor:
    status: int
    headers: HeaderMap
    parts: Tuple[ByteRange, ...]
    mime_type: str
    file_size: int
    boundary: Optional[str] = None

    @property
    def is_multipart(self) -> bool:
        return self.boundary is not None


def plan_content(ranges: RangeRequest, file_size: int, mime_type: str) -> PlanDescriptor:
    """Decide the headers and parts of a 206 response for parsed `ranges`.

    Every header, ``Content-Range`` included, is fixed here; nothing about
    the header block changes once streaming starts.
    """
    parts = tuple(ranges.ranges)
    if not parts:
        raise InvalidRangeError("", "no ranges to serve")

    headers = HeaderMap()
    if len(parts) == 1:
        only = parts[0]
        headers["Content-Type"] = mime_type
        headers["Content-Range"] = f"{ranges.unit} {only.start}-{only.end}/{file_size}"
        headers["Accept-Ranges"] = "bytes"
        logger.debug("Single-range plan %s of %s bytes", only, file_size)
        return PlanDescriptor(PARTIAL_CONTENT, headers, parts, mime_type, file_size)

    boundary = new_boundary()
    headers["Content-Type"] = f"{MULTIPART_BYTERANGES}; boundary={boundary}"
    headers["Accept-Ranges"] = "bytes"
    logger.debug("Multipart plan with %s parts, boundary %s", len(parts), boundary)
    return PlanDescriptor(PARTIAL_CONTENT, headers, parts, mime_type, file_size, boundary)
