"""Find the APE header/footer block inside a seekable stream."""

import os
from typing import BinaryIO, Optional, Tuple

from ape_header import APEHeader, HEADER_SIZE, PREAMBLE, PREAMBLE_SIZE, parse_header

DEFAULT_CHUNK_SIZE = 4096


class PreambleMatcher:
    """Incremental matcher for the APE preamble across independent chunks."""

    def __init__(self):
        self.matched = 0

    def feed(self, chunk: bytes) -> Optional[int]:
        """
        Advance the match over one chunk.

        Args:
            chunk: Next bytes of the stream

        Returns:
            Index in chunk just past the byte that completed the preamble,
            or None if the preamble has not been completed yet.
        """
        for i, byte in enumerate(chunk):
            # A mismatching byte starts nothing, even if it is an "A"
            if byte != PREAMBLE[self.matched]:
                self.matched = 0
                continue

            self.matched += 1
            if self.matched == PREAMBLE_SIZE:
                self.matched = 0
                return i + 1
        return None


def read_chunk(stream: BinaryIO, size: int) -> bytes:
    """
    Read up to size bytes, retrying interrupted and would-block reads.

    Other OSErrors propagate to the caller.
    """
    while True:
        try:
            data = stream.read(size)
        except (InterruptedError, BlockingIOError):
            continue
        if data is None:
            # Non-blocking raw stream with nothing available yet
            continue
        return data


def read_exact(stream: BinaryIO, size: int) -> bytes:
    """Read until size bytes are collected or the stream ends."""
    parts = []
    remaining = size
    while remaining > 0:
        data = read_chunk(stream, remaining)
        if not data:
            break
        parts.append(data)
        remaining -= len(data)
    return b"".join(parts)


def stream_length(stream: BinaryIO) -> int:
    """Return the total length of a seekable stream (moves the cursor)."""
    return stream.seek(0, os.SEEK_END)


def find_preamble(stream: BinaryIO,
                  chunk_size: int = DEFAULT_CHUNK_SIZE) -> Optional[int]:
    """
    Scan the whole stream from the start for the APE preamble.

    Args:
        stream: Seekable binary stream
        chunk_size: Bytes read per step

    Returns:
        Absolute offset of the first preamble byte, or None if the stream
        holds no preamble or a non-transient read error occurs.
    """
    matcher = PreambleMatcher()
    pos = 0

    try:
        stream.seek(0)
        while True:
            chunk = read_chunk(stream, chunk_size)
            if not chunk:
                return None

            end = matcher.feed(chunk)
            if end is not None:
                return pos + end - PREAMBLE_SIZE
            pos += len(chunk)
    except OSError:
        return None


def _read_header_at(stream: BinaryIO, offset: int) -> Optional[APEHeader]:
    """Seek to offset and parse the block there; stream is left after it."""
    stream.seek(offset)
    return parse_header(read_exact(stream, HEADER_SIZE))


def locate(stream: BinaryIO, allow_slow_scan: bool = False,
           chunk_size: int = DEFAULT_CHUNK_SIZE) -> Optional[Tuple[int, APEHeader]]:
    """
    Locate the APE header/footer block.

    Tries the last 32 bytes of the stream first. If no footer is there and
    allow_slow_scan is set, scans the whole stream for the preamble.

    Args:
        stream: Seekable binary stream
        allow_slow_scan: Permit the full forward scan as a fallback
        chunk_size: Read size used by the forward scan

    Returns:
        (offset, header) with the stream positioned right after the block,
        or None if no tag was found.
    """
    try:
        length = stream_length(stream)
        if length >= HEADER_SIZE:
            offset = length - HEADER_SIZE
            header = _read_header_at(stream, offset)
            if header is not None:
                return offset, header
    except OSError:
        return None

    if not allow_slow_scan:
        return None

    offset = find_preamble(stream, chunk_size)
    if offset is None:
        return None

    try:
        header = _read_header_at(stream, offset)
    except OSError:
        return None
    if header is None:
        return None
    return offset, header
