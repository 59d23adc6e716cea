"""byteserve - HTTP response construction and byte-range content delivery."""

from .config import DEFAULT_CONFIG, ServerConfig, __version__
from .core.model import (                                              # re-export
    ByteRange, RangeRequest, HeaderMap,
    RangeParseError, InvalidRangeError,
    EmitError, SeekFailedError, ShortReadError, SinkFailedError,
    SerializationError,
)
from .core.ranges import parse_range_header
from .core.plan import PlanDescriptor, plan_content, new_boundary
from .core.emitter import emit, emit_full
from .core.response import (
    HttpResponse, SwitchProtocols, Ok, Created, Accepted, PartialContent,
    MovedPermanently, MovedTemporarily, BadRequest, Unauthorized, Forbidden,
    NotFound, InternalServerError, Raw,
    JsonBody, HtmlBody, TextBody, DataBody, CustomBody,
)
from .core.wire import render_head, write_response
from .io import open_source, BufferBodyWriter, StreamBodyWriter
from .files import HttpRequest, serve_source, share_file, share_files_from_directory


__all__ = [
    "ServerConfig", "DEFAULT_CONFIG", "__version__",
    "ByteRange", "RangeRequest", "HeaderMap",
    "RangeParseError", "InvalidRangeError",
    "EmitError", "SeekFailedError", "ShortReadError", "SinkFailedError", "SerializationError",
    "parse_range_header", "PlanDescriptor", "plan_content", "new_boundary", "emit", "emit_full",
    "HttpResponse", "SwitchProtocols", "Ok", "Created", "Accepted", "PartialContent",
    "MovedPermanently", "MovedTemporarily", "BadRequest", "Unauthorized", "Forbidden",
    "NotFound", "InternalServerError", "Raw",
    "JsonBody", "HtmlBody", "TextBody", "DataBody", "CustomBody",
    "render_head", "write_response",
    "open_source", "BufferBodyWriter", "StreamBodyWriter",
    "HttpRequest", "serve_source", "share_file", "share_files_from_directory",
]
