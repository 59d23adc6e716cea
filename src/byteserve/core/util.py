from __future__ import annotations
from typing import Any, Dict

from ..config import DEFAULT_CONFIG, ServerConfig
from .response import HttpResponse


def response_asdict(response: HttpResponse, *, config: ServerConfig = DEFAULT_CONFIG) -> Dict[str, Any]:
    """Return a JSON-serialisable summary of a response, without its body."""
    length, writer = response.content()
    return {
        "status": response.status_code(),
        "reason": response.reason_phrase(),
        "headers": dict(response.headers(config).items()),
        "content_length": length if length >= 0 else None,
        "streamed": writer is not None and length < 0,
    }
