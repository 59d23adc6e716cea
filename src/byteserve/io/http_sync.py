"""Remote byte source using HTTP Range requests via requests."""

import logging
from typing import Optional

import requests

from ..config import DEFAULT_CONFIG, ServerConfig
from .base import RangeNotSupportedError

logger = logging.getLogger(__name__)

# Module-level session for connection pooling
_session = None


def _get_session():
    """Get or create the global requests session."""
    global _session
    if _session is None:
        _session = requests.Session()
    return _session


def _decide_full_get(content_length: Optional[int], accept_ranges: bool, fallback_max: int) -> bool:
    """Return True only when not accept_ranges and content_length and content_length < fallback_max."""
    return (not accept_ranges and
            content_length is not None and
            content_length < fallback_max)


class HTTPByteSource:
    """Byte source over a remote object, read with Range GETs."""

    def __init__(self, url: str, config: ServerConfig = DEFAULT_CONFIG):
        self.url = url
        self.name = url
        self.config = config
        self.bytes_fetched = 0
        self.requests_made = 0
        self.closed = False
        self.content_length: Optional[int] = None
        self._accept_ranges = False
        self._full_content: Optional[bytes] = None
        self._offset = 0
        self._session = _get_session()

        # Perform HEAD request immediately
        self._perform_head()

    def _perform_head(self):
        """Perform HEAD request to learn the size and range support."""
        try:
            self.requests_made += 1
            response = self._session.head(self.url, timeout=self.config.timeout, allow_redirects=True)
            if response.status_code >= 400:
                raise IOError(f"HEAD request failed with status {response.status_code}")

            content_length_header = response.headers.get('content-length')
            if content_length_header is None:
                raise IOError("HEAD response carries no Content-Length")
            self.content_length = int(content_length_header)

            accept_ranges = response.headers.get('accept-ranges', '').lower()
            self._accept_ranges = accept_ranges == 'bytes'

        except requests.RequestException as e:
            raise IOError(f"HEAD request failed: {e}") from e

    def _fetch_full_content(self):
        """Download the entire object for small upstreams without range support."""
        if self._full_content is not None:
            return

        try:
            self.requests_made += 1
            response = self._session.get(self.url, timeout=self.config.timeout)
            if response.status_code >= 400:
                raise IOError(f"GET request failed with status {response.status_code}")

            self._full_content = response.content
            self.bytes_fetched = len(self._full_content)

        except requests.RequestException as e:
            raise IOError(f"GET request failed: {e}") from e

    def _fetch_range(self, start: int, length: int) -> bytes:
        """Fetch a specific byte range."""
        end = start + length - 1
        headers = {'Range': f'bytes={start}-{end}'}

        try:
            self.requests_made += 1
            response = self._session.get(self.url, headers=headers, timeout=self.config.timeout)
        except requests.RequestException as e:
            raise IOError(f"Range request failed: {e}") from e

        if response.status_code == 200:
            # Upstream ignored the range and sent everything
            if self.content_length and self.content_length >= self.config.range_fallback_max:
                raise RangeNotSupportedError("Upstream doesn't support ranges and object is too large")
            self._full_content = response.content
            self.bytes_fetched = len(self._full_content)
            return self._full_content[start:start + length]

        if response.status_code == 206:
            data = response.content[:length]
            self.bytes_fetched += len(data)
            return data

        raise IOError(f"Range request failed with status {response.status_code}")

    @property
    def size(self) -> int:
        return self.content_length

    def seek(self, offset: int) -> bool:
        if self.closed or offset < 0 or offset > self.content_length:
            return False
        self._offset = offset
        return True

    def read_exactly(self, length: int) -> bytes:
        """Return `length` bytes from the current offset, or fewer at the end."""
        if self.closed:
            raise IOError("Source is closed")

        start = self._offset
        length = max(0, min(length, self.content_length - start))
        if length == 0:
            return b''

        if self._full_content is None and _decide_full_get(
                self.content_length, self._accept_ranges, self.config.range_fallback_max):
            self._fetch_full_content()

        if self._full_content is not None:
            data = self._full_content[start:start + length]
        elif not self._accept_ranges:
            raise RangeNotSupportedError("Upstream doesn't support ranges and object is too large")
        else:
            data = self._fetch_range(start, length)

        self._offset = start + len(data)
        logger.debug("Read %s bytes at %s from %s", len(data), start, self.url)
        return data

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        # Session is shared, don't close it here
        self.closed = True
        self._full_content = None


def open_http_source(url: str, config: ServerConfig = DEFAULT_CONFIG) -> HTTPByteSource:
    """Create a remote byte source."""
    return HTTPByteSource(url, config)
