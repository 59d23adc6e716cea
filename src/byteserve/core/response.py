"""HTTP response model: bodies, response variants and their wire contract.

Every response is one of a closed set of variants. Status line, headers and
body content are plain functions that ``match`` over the variant; the methods
on :class:`HttpResponse` only forward to them.

Content is reported as ``(length, writer)``. A known ``length`` means the
body was serialized up front; ``-1`` means the body is streamed by `writer`
(or absent when `writer` is None) and the transport must not rely on
``Content-Length``.
"""

from __future__ import annotations
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Tuple, Union

from ..config import DEFAULT_CONFIG, ServerConfig
from ..io.base import BodyWriter
from .model import HeaderMap, SerializationError

logger = logging.getLogger(__name__)

BodyCallback = Callable[[BodyWriter], None]
SessionHandler = Callable[[Any], None]
Content = Tuple[int, Optional[BodyCallback]]


# --------------------------------------------------------------------------- #
# bodies

@dataclass(frozen=True)
class JsonBody:
    value: Any


@dataclass(frozen=True)
class HtmlBody:
    html: str


@dataclass(frozen=True)
class TextBody:
    text: str


@dataclass(frozen=True)
class DataBody:
    data: bytes


@dataclass(frozen=True)
class CustomBody:
    value: Any
    serializer: Callable[[Any], str]


ResponseBody = Union[JsonBody, HtmlBody, TextBody, DataBody, CustomBody]


def _to_json(value: Any) -> bytes:
    if not isinstance(value, (dict, list)):
        raise SerializationError(f"top-level JSON value must be an object or array, not {type(value).__name__}")
    try:
        return json.dumps(value, allow_nan=False, separators=(",", ":")).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise SerializationError(str(e)) from e


def serialize_body(body: ResponseBody) -> bytes:
    """Return the encoded bytes of `body`; raises on serialization failure."""
    match body:
        case JsonBody(value=value):
            return _to_json(value)
        case HtmlBody(html=html):
            return f'<html><meta charset="UTF-8"><body>{html}</body></html>'.encode("utf-8")
        case TextBody(text=text):
            return text.encode("utf-8")
        case DataBody(data=data):
            return bytes(data)
        case CustomBody(value=value, serializer=serializer):
            return serializer(value).encode("utf-8")
    raise TypeError(f"Not a response body: {body!r}")


def _write_all(data: bytes) -> BodyCallback:
    def write(writer: BodyWriter) -> None:
        writer.write(data)
    return write


def body_content(body: ResponseBody) -> Content:
    """Serialize `body` eagerly. Failures become an in-band error text."""
    try:
        data = serialize_body(body)
    except Exception as e:  # serializers are caller code; any failure is reported in-band
        logger.warning("Body serialization failed: %s", e)
        data = f"Serialisation error: {e}".encode("utf-8")
    return len(data), _write_all(data)


# --------------------------------------------------------------------------- #
# responses

class HttpResponse:
    """Base of the response variants. Equality compares status codes only."""

    def status_code(self) -> int:
        return status_line(self)[0]

    def reason_phrase(self) -> str:
        return status_line(self)[1]

    def headers(self, config: ServerConfig = DEFAULT_CONFIG) -> HeaderMap:
        return response_headers(self, config)

    def content(self) -> Content:
        return response_content(self)

    def release(self) -> None:
        """Free what a streamed body holds, for bodies that will not be written."""
        match self:
            case PartialContent(on_release=hook) | Raw(on_release=hook) if hook is not None:
                hook()

    def socket_session(self) -> Optional[SessionHandler]:
        match self:
            case SwitchProtocols(session=session):
                return session
        return None

    def __eq__(self, other):
        if not isinstance(other, HttpResponse):
            return NotImplemented
        return self.status_code() == other.status_code()

    def __hash__(self):
        return hash(self.status_code())


@dataclass(frozen=True, eq=False)
class SwitchProtocols(HttpResponse):
    switch_headers: Mapping[str, str]
    session: SessionHandler


@dataclass(frozen=True, eq=False)
class Ok(HttpResponse):
    body: ResponseBody


@dataclass(frozen=True, eq=False)
class Created(HttpResponse):
    pass


@dataclass(frozen=True, eq=False)
class Accepted(HttpResponse):
    pass


@dataclass(frozen=True, eq=False)
class PartialContent(HttpResponse):
    extra_headers: Optional[Mapping[str, str]] = None
    writer: Optional[BodyCallback] = None
    on_release: Optional[Callable[[], None]] = None   # frees the body when it is never written


@dataclass(frozen=True, eq=False)
class MovedPermanently(HttpResponse):
    location: str


@dataclass(frozen=True, eq=False)
class MovedTemporarily(HttpResponse):
    location: str


@dataclass(frozen=True, eq=False)
class BadRequest(HttpResponse):
    body: Optional[ResponseBody] = None


@dataclass(frozen=True, eq=False)
class Unauthorized(HttpResponse):
    pass


@dataclass(frozen=True, eq=False)
class Forbidden(HttpResponse):
    pass


@dataclass(frozen=True, eq=False)
class NotFound(HttpResponse):
    pass


@dataclass(frozen=True, eq=False)
class InternalServerError(HttpResponse):
    pass


@dataclass(frozen=True, eq=False)
class Raw(HttpResponse):
    code: int
    phrase: str
    extra_headers: Optional[Mapping[str, str]] = None
    writer: Optional[BodyCallback] = None
    on_release: Optional[Callable[[], None]] = None


def status_line(response: HttpResponse) -> Tuple[int, str]:
    match response:
        case SwitchProtocols():
            return 101, "Switching Protocols"
        case Ok():
            return 200, "OK"
        case Created():
            return 201, "Created"
        case Accepted():
            return 202, "Accepted"
        case PartialContent():
            return 206, "Partial Content"
        case MovedPermanently():
            return 301, "Moved Permanently"
        case MovedTemporarily():
            return 307, "Moved Temporarily"
        case BadRequest():
            return 400, "Bad Request"
        case Unauthorized():
            return 401, "Unauthorized"
        case Forbidden():
            return 403, "Forbidden"
        case NotFound():
            return 404, "Not Found"
        case InternalServerError():
            return 500, "Internal Server Error"
        case Raw(code=code, phrase=phrase):
            return code, phrase
    raise TypeError(f"Unknown response variant: {type(response).__name__}")


def response_headers(response: HttpResponse, config: ServerConfig = DEFAULT_CONFIG) -> HeaderMap:
    headers = HeaderMap({"Server": config.server_header})
    match response:
        case SwitchProtocols(switch_headers=extra) | PartialContent(extra_headers=extra) | Raw(extra_headers=extra):
            headers.merge(extra)
        case Ok(body=JsonBody()) | BadRequest(body=JsonBody()):
            headers["Content-Type"] = "application/json"
        case Ok(body=HtmlBody()) | BadRequest(body=HtmlBody()):
            headers["Content-Type"] = "text/html"
        case MovedPermanently(location=location) | MovedTemporarily(location=location):
            headers["Location"] = location
    return headers


def response_content(response: HttpResponse) -> Content:
    match response:
        case Ok(body=body):
            return body_content(body)
        case BadRequest(body=None):
            return -1, None
        case BadRequest(body=body):
            return body_content(body)
        case PartialContent(writer=writer) | Raw(writer=writer):
            return -1, writer
    return -1, None
