"""Request handlers that serve files, whole or by byte range."""

from __future__ import annotations
import logging
import mimetypes
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional, Union

from .config import DEFAULT_CONFIG, ServerConfig
from .core.emitter import emit, emit_full
from .core.model import HeaderMap, InvalidRangeError, RangeParseError
from .core.plan import plan_content
from .core.ranges import parse_range_header
from .core.response import HttpResponse, NotFound, PartialContent, Raw
from .io.base import ByteSource
from .io.local import LocalByteSource

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"


@dataclass
class HttpRequest:
    """The parts of an already-parsed request that file handlers look at."""
    path: str = "/"
    headers: HeaderMap = field(default_factory=HeaderMap)
    params: Dict[str, str] = field(default_factory=dict)   # first value is the relative file path

    def __post_init__(self):
        if not isinstance(self.headers, HeaderMap):
            self.headers = HeaderMap(self.headers)


Handler = Callable[[HttpRequest], HttpResponse]


def guess_mime_type(path: Union[str, Path]) -> str:
    mime_type, _ = mimetypes.guess_type(str(path))
    return mime_type or DEFAULT_MIME_TYPE


def range_not_satisfiable(size: int) -> Raw:
    return Raw(416, "Range Not Satisfiable", {"Content-Range": f"bytes */{size}"})


def serve_source(source: ByteSource, mime_type: str, range_header: Optional[str] = None,
                 config: ServerConfig = DEFAULT_CONFIG) -> HttpResponse:
    """Build the response for an open `source`.

    Without a Range header the whole source is streamed with status 200.
    With one, the header is parsed and planned before the response exists,
    so every header is final. The returned response owns `source`: it is
    closed when the body is written, or by `release()` when it never is.
    If the header is rejected the source is closed here and
    :class:`InvalidRangeError` propagates.
    """
    if range_header is None:
        headers = HeaderMap({"Accept-Ranges": "bytes", "Content-Type": mime_type})
        return Raw(200, "OK", headers, partial(emit_full, source, chunk_size=config.chunk_size),
                   on_release=source.close)

    try:
        ranges = parse_range_header(range_header, source.size)
        plan = plan_content(ranges, source.size, mime_type)
    except RangeParseError:
        source.close()
        raise
    return PartialContent(plan.headers, partial(emit, plan, source, chunk_size=config.chunk_size),
                          on_release=source.close)


def _open_file(path: Path) -> Optional[LocalByteSource]:
    if not path.is_file():
        return None
    try:
        return LocalByteSource(path)
    except OSError as e:
        logger.warning("Could not open %s: %s", path, e)
        return None


def _serve_file(source: LocalByteSource, path: Path, request: HttpRequest,
                config: ServerConfig) -> HttpResponse:
    size = source.size
    try:
        return serve_source(source, guess_mime_type(path), request.headers.get("Range"), config)
    except InvalidRangeError as e:
        logger.warning("Rejected Range for %s: %s", path, e)
        return range_not_satisfiable(size)


def share_file(path: Union[str, Path], config: ServerConfig = DEFAULT_CONFIG) -> Handler:
    """Return a handler that serves the single file at `path`."""
    path = Path(path)

    def handler(request: HttpRequest) -> HttpResponse:
        source = _open_file(path)
        if source is None:
            return NotFound()
        return _serve_file(source, path, request, config)

    return handler


def share_files_from_directory(directory: Union[str, Path],
                               defaults: Iterable[str] = ("index.html", "default.html"),
                               config: ServerConfig = DEFAULT_CONFIG) -> Handler:
    """Return a handler that serves files below `directory`.

    The first request param is the path relative to `directory`. An empty
    path falls back to the first existing file named in `defaults`. Paths
    that resolve outside `directory`, and directories, are not found.
    """
    base = Path(directory).resolve()
    defaults = tuple(defaults)

    def handler(request: HttpRequest) -> HttpResponse:
        if not request.params:
            return NotFound()
        relative = next(iter(request.params.values()))

        if not relative:
            for name in defaults:
                candidate = base / name
                source = _open_file(candidate)
                if source is not None:
                    return _serve_file(source, candidate, request, config)
            return NotFound()

        target = (base / relative.lstrip("/")).resolve()
        if base not in target.parents:
            logger.warning("Refusing path outside %s: %r", base, relative)
            return NotFound()
        source = _open_file(target)
        if source is None:
            return NotFound()
        return _serve_file(source, target, request, config)

    return handler
