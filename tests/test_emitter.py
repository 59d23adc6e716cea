"""Tests for streaming range emission."""

import pytest

from byteserve.core.emitter import emit, emit_full
from byteserve.core.model import (
    ByteRange, EmitError, RangeRequest, SeekFailedError, ShortReadError, SinkFailedError,
)
from byteserve.core.plan import plan_content
from byteserve.io.sinks import BufferBodyWriter

from conftest import CountingSource, FailingWriter


def _plan(*spans, size=100, mime="application/octet-stream"):
    return plan_content(RangeRequest("bytes", tuple(ByteRange(a, b) for a, b in spans)), size, mime)


class TestEmitSingleRange:

    def test_first_byte(self, payload):
        source = CountingSource(payload)
        sink = BufferBodyWriter()

        emit(_plan((0, 0)), source, sink)

        assert sink.getvalue() == payload[:1]
        assert source.close_calls == 1

    def test_only_raw_bytes_are_written(self, payload):
        source = CountingSource(payload)
        sink = BufferBodyWriter()

        emit(_plan((10, 19)), source, sink)

        assert sink.getvalue() == payload[10:20]


class TestEmitMultiRange:

    def test_exact_framing(self, payload):
        plan = _plan((0, 9), (20, 29), mime="text/plain")
        source = CountingSource(payload)
        sink = BufferBodyWriter()

        emit(plan, source, sink)

        b = plan.boundary.encode()
        expected = (
            b"\r\n--" + b + b"\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Range: bytes 0-9/100\r\n"
            b"\r\n" + payload[0:10] +
            b"\r\n--" + b + b"\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Range: bytes 20-29/100\r\n"
            b"\r\n" + payload[20:30] +
            b"\r\n--" + b + b"--\r\n"
        )
        assert sink.getvalue() == expected
        assert source.close_calls == 1

    def test_parts_reproduce_source_slices(self, payload):
        spans = [(50, 59), (0, 4), (3, 7), (99, 99)]
        plan = _plan(*spans)
        sink = BufferBodyWriter()

        emit(plan, CountingSource(payload), sink)

        body = sink.getvalue()
        delimiter = f"\r\n--{plan.boundary}".encode()
        chunks = body.split(delimiter)[1:-1]
        payloads = [chunk.split(b"\r\n\r\n", 1)[1] for chunk in chunks]
        assert payloads == [payload[a:b + 1] for a, b in spans]
        assert b"".join(payloads) == b"".join(payload[a:b + 1] for a, b in spans)

    def test_ranges_in_request_order(self, payload):
        source = CountingSource(payload)
        emit(_plan((40, 49), (0, 9), (20, 29)), source, BufferBodyWriter())
        assert source.seeks == [40, 0, 20]


class TestEmitFailures:

    def test_seek_failure_stops_later_parts(self, payload):
        source = CountingSource(payload, refuse_seek_from=20)
        sink = BufferBodyWriter()

        with pytest.raises(SeekFailedError):
            emit(_plan((0, 9), (20, 29), (40, 49)), source, sink)

        assert source.seeks == [0, 20]
        assert payload[0:10] in sink.getvalue()
        assert payload[40:50] not in sink.getvalue()
        assert source.close_calls == 1

    def test_short_read(self, payload):
        source = CountingSource(payload, truncate_to=15)
        sink = BufferBodyWriter()

        with pytest.raises(ShortReadError) as exc_info:
            emit(_plan((10, 19)), source, sink)

        assert exc_info.value.expected == 10
        assert exc_info.value.actual == 5
        assert sink.getvalue() == b""
        assert source.close_calls == 1

    def test_sink_failure(self, payload):
        source = CountingSource(payload)
        sink = FailingWriter(limit=2)

        with pytest.raises(SinkFailedError):
            emit(_plan((0, 9), (20, 29)), source, sink)

        # part header and payload of the first range only
        assert sink.writes == 2
        assert source.seeks == [0, 20]
        assert source.close_calls == 1

    def test_errors_are_emit_errors(self, payload):
        with pytest.raises(EmitError):
            emit(_plan((0, 9)), CountingSource(payload, truncate_to=0), BufferBodyWriter())


class TestEmitFull:

    def test_whole_source_in_chunks(self, payload):
        source = CountingSource(payload)
        sink = BufferBodyWriter()

        emit_full(source, sink, chunk_size=7)

        assert sink.getvalue() == payload
        assert source.close_calls == 1

    def test_empty_source(self):
        source = CountingSource(b"")
        sink = BufferBodyWriter()

        emit_full(source, sink, chunk_size=7)

        assert sink.getvalue() == b""
        assert source.close_calls == 1

    def test_truncated_source(self, payload):
        source = CountingSource(payload, truncate_to=50)

        with pytest.raises(ShortReadError):
            emit_full(source, BufferBodyWriter(), chunk_size=32)

        assert source.close_calls == 1


class TestEmitRawSinkErrors:

    def test_os_error_from_sink_becomes_sink_failed(self, payload):
        class ResetSink(BufferBodyWriter):
            def write(self, chunk):
                raise ConnectionResetError("reset by peer")

        source = CountingSource(payload)
        with pytest.raises(SinkFailedError) as exc_info:
            emit(_plan((0, 9)), source, ResetSink())

        assert isinstance(exc_info.value.__cause__, ConnectionResetError)
        assert source.close_calls == 1


class TestEmitChunking:
    """Large ranges are streamed in bounded pieces."""

    def test_whole_file_range_is_read_in_chunks(self):
        data = bytes(i % 251 for i in range(200_000))
        source = CountingSource(data)
        sink = BufferBodyWriter()

        emit(_plan((0, 199_999), size=200_000), source, sink, chunk_size=65_536)

        assert sink.getvalue() == data
        assert max(source.read_sizes) <= 65_536
        assert source.read_sizes == [65_536, 65_536, 65_536, 3_392]
        assert source.seeks == [0]
        assert source.close_calls == 1

    def test_multipart_header_written_once_per_part(self, payload):
        plan = _plan((0, 24), (50, 74))
        sink = BufferBodyWriter()

        emit(plan, CountingSource(payload), sink, chunk_size=10)

        body = sink.getvalue()
        assert body.count(b"Content-Range: bytes 0-24/100") == 1
        assert b"Content-Range: bytes 0-24/100\r\n\r\n" + payload[0:25] in body
        assert b"Content-Range: bytes 50-74/100\r\n\r\n" + payload[50:75] in body

    def test_short_chunk_mid_range(self, payload):
        source = CountingSource(payload, truncate_to=35)

        with pytest.raises(ShortReadError) as exc_info:
            emit(_plan((10, 49)), source, BufferBodyWriter(), chunk_size=10)

        assert exc_info.value.offset == 30
        assert exc_info.value.actual == 5
        assert source.close_calls == 1
