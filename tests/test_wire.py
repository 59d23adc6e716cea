"""Tests for rendering responses to wire bytes."""

import io

import pytest

from byteserve.core.model import SinkFailedError
from byteserve.core.response import NotFound, Ok, PartialContent, Raw, TextBody
from byteserve.core.wire import render_head, write_response
from byteserve.files import serve_source
from byteserve.io.sinks import BufferBodyWriter, StreamBodyWriter

from conftest import CountingSource, DeadWriter, FailingWriter


def _split(raw: bytes):
    head, _, body = raw.partition(b"\r\n\r\n")
    status, *header_lines = head.decode("latin-1").split("\r\n")
    headers = dict(line.split(": ", 1) for line in header_lines)
    return status, headers, body


class TestWriteResponse:

    def test_known_length(self):
        sink = BufferBodyWriter()
        code = write_response(Ok(TextBody("hello")), sink)

        status, headers, body = _split(sink.getvalue())
        assert code == 200
        assert status == "HTTP/1.1 200 OK"
        assert headers["Content-Length"] == "5"
        assert "Server" in headers
        assert body == b"hello"

    def test_streamed_body_closes_connection(self):
        def writer(sink):
            sink.write(b"abc")
            sink.write("def")

        sink = BufferBodyWriter()
        write_response(PartialContent({"Content-Range": "bytes 0-5/10"}, writer), sink)

        status, headers, body = _split(sink.getvalue())
        assert status == "HTTP/1.1 206 Partial Content"
        assert headers["Connection"] == "close"
        assert "Content-Length" not in headers
        assert headers["Content-Range"] == "bytes 0-5/10"
        assert body == b"abcdef"

    def test_no_body(self):
        sink = BufferBodyWriter()
        write_response(NotFound(), sink)

        status, headers, body = _split(sink.getvalue())
        assert status == "HTTP/1.1 404 Not Found"
        assert headers["Content-Length"] == "0"
        assert body == b""

    def test_served_range(self, payload):
        source = CountingSource(payload)
        sink = BufferBodyWriter()

        write_response(serve_source(source, "text/plain", "bytes=0-0"), sink)

        status, headers, body = _split(sink.getvalue())
        assert status == "HTTP/1.1 206 Partial Content"
        assert headers["Content-Range"] == "bytes 0-0/100"
        assert body == payload[:1]
        assert source.close_calls == 1


class TestWriteResponseSinkFailures:
    """The byte source is released whichever write fails."""

    @pytest.mark.parametrize("range_header", ["bytes=0-9", "bytes=0-9,20-29", None])
    def test_head_write_fails(self, payload, range_header):
        source = CountingSource(payload)
        response = serve_source(source, "text/plain", range_header)

        with pytest.raises(SinkFailedError):
            write_response(response, DeadWriter())

        assert source.close_calls == 1
        assert source.seeks == []

    def test_closed_stream(self, payload):
        source = CountingSource(payload)
        stream = io.BytesIO()
        stream.close()

        with pytest.raises(SinkFailedError):
            write_response(serve_source(source, "text/plain", "bytes=0-9"), StreamBodyWriter(stream))

        assert source.close_calls == 1

    def test_body_write_fails_after_head(self, payload):
        source = CountingSource(payload)
        sink = FailingWriter(limit=1)

        with pytest.raises(SinkFailedError):
            write_response(serve_source(source, "text/plain", "bytes=0-9,20-29"), sink)

        assert sink.writes == 1
        assert source.close_calls == 1

    def test_head_failure_without_release_hook(self):
        def writer(sink):
            raise AssertionError("body must not be written")

        with pytest.raises(SinkFailedError):
            write_response(Raw(200, "OK", None, writer), DeadWriter())


class TestRenderHead:

    def test_head_ends_with_blank_line(self):
        head = render_head(Raw(204, "No Content"), -1, has_body=False)
        assert head.startswith(b"HTTP/1.1 204 No Content\r\n")
        assert head.endswith(b"\r\n\r\n")
