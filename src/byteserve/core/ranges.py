"""Parsing of ``Range`` request header values."""

from __future__ import annotations
import logging
import re

from .model import ByteRange, InvalidRangeError, RangeRequest

logger = logging.getLogger(__name__)

_DIGITS = re.compile(r"[0-9]+")


def _parse_bound(token: str, spec: str, which: str) -> int:
    token = token.strip()
    if not token:
        # open (``a-``) and suffix (``-n``) forms are not served
        raise InvalidRangeError(spec, f"missing {which} offset")
    if not _DIGITS.fullmatch(token):
        raise InvalidRangeError(spec, f"{which} offset is not a non-negative integer")
    return int(token)


def _parse_spec(spec: str, total_size: int) -> ByteRange:
    if "-" not in spec:
        raise InvalidRangeError(spec, "expected <start>-<end>")
    start_tok, end_tok = spec.split("-", 1)
    start = _parse_bound(start_tok, spec, "start")
    end = _parse_bound(end_tok, spec, "end")
    if start > end:
        raise InvalidRangeError(spec, "start is after end")
    if end >= total_size:
        raise InvalidRangeError(spec, f"end is beyond the last byte of a {total_size} byte resource")
    return ByteRange(start, end)


def parse_range_header(value: str, total_size: int) -> RangeRequest:
    """Parse ``<unit>=<start>-<end>[,<start>-<end>...]`` against `total_size`.

    Ranges keep the order in which they were requested; overlapping or
    repeated ranges are not merged. Any bad spec rejects the whole header
    with :class:`InvalidRangeError`.
    """
    if value is None or "=" not in value:
        raise InvalidRangeError(value or "", "expected <unit>=<ranges>")

    unit, _, spec_list = value.partition("=")
    unit = unit.strip()
    if not unit:
        raise InvalidRangeError(value, "missing range unit")
    if not spec_list.strip():
        raise InvalidRangeError(value, "no ranges given")

    ranges = tuple(_parse_spec(spec, total_size) for spec in spec_list.split(","))

    logger.debug("Parsed %s range(s) from %r against %s bytes", len(ranges), value, total_size)
    return RangeRequest(unit=unit, ranges=ranges)
