import re
from dataclasses import dataclass
from typing import Optional, Tuple

from errors import BadRequestError, RangeNotSatisfiableError

RANGE_RE = re.compile(r"^\s*bytes\s*=\s*(\d*)\s*-\s*(\d*)\s*$", re.IGNORECASE)

RequestedRange = Tuple[Optional[int], Optional[int]]


@dataclass(frozen=True)
class ByteRange:
    start: int
    end: int
    total: int

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    @property
    def content_range(self) -> str:
        return f"bytes {self.start}-{self.end}/{self.total}"


def parse_range_header(value: str) -> RequestedRange:
    # end is None for "bytes=<start>-"; start is None for the suffix form "bytes=-<n>".
    match = RANGE_RE.match(value or "")
    if match is None:
        raise BadRequestError(f"Malformed Range header: {value!r}")

    raw_start, raw_end = match.groups()
    if not raw_start and not raw_end:
        raise BadRequestError(f"Malformed Range header: {value!r}")

    start = int(raw_start) if raw_start else None
    end = int(raw_end) if raw_end else None
    if start is not None and end is not None and start > end:
        raise BadRequestError(f"Range start is after range end: {value!r}")
    return start, end


def resolve_range(requested: RequestedRange, total_size: int) -> ByteRange:
    start, end = requested

    if start is None:
        suffix = end or 0
        if suffix == 0 or total_size == 0:
            raise RangeNotSatisfiableError("Requested range not satisfiable", total_size)
        return ByteRange(max(total_size - suffix, 0), total_size - 1, total_size)

    if start >= total_size:
        raise RangeNotSatisfiableError("Requested range not satisfiable", total_size)

    last = total_size - 1
    end = last if end is None else min(end, last)
    return ByteRange(start, end, total_size)


def full_range(total_size: int) -> ByteRange:
    return ByteRange(0, total_size - 1, total_size)
