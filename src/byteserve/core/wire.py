"""Rendering of a response into HTTP/1.1 wire bytes."""

from __future__ import annotations
import logging

from ..config import DEFAULT_CONFIG, ServerConfig
from ..io.base import BodyWriter
from .response import HttpResponse

logger = logging.getLogger(__name__)

HTTP_VERSION = "HTTP/1.1"


def render_head(response: HttpResponse, length: int, *, has_body: bool = True,
                config: ServerConfig = DEFAULT_CONFIG) -> bytes:
    """Status line, header lines and the blank separator line."""
    headers = response.headers(config)
    if length >= 0:
        headers["Content-Length"] = str(length)
    elif has_body:
        # unknown length: the body ends when the connection does
        headers["Connection"] = "close"
    elif response.status_code() >= 200:
        headers["Content-Length"] = "0"
    lines = [f"{HTTP_VERSION} {response.status_code()} {response.reason_phrase()}"]
    lines.extend(f"{name}: {value}" for name, value in headers.items())
    return ("\r\n".join(lines) + "\r\n\r\n").encode("latin-1")


def write_response(response: HttpResponse, sink: BodyWriter, config: ServerConfig = DEFAULT_CONFIG) -> int:
    """Write the head and then the body of `response` into `sink`.

    If the head cannot be written the response is released before the
    error propagates. Returns the status code written.
    """
    length, writer = response.content()
    try:
        sink.write(render_head(response, length, has_body=writer is not None, config=config))
    except OSError:
        # the body callback will never run, so it cannot release its source
        response.release()
        raise
    if writer is not None:
        writer(sink)
    logger.debug("Wrote %s %s", response.status_code(), response.reason_phrase())
    return response.status_code()
