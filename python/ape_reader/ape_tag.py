"""APE tag body reading and item decoding."""

import struct
from contextlib import contextmanager
from typing import BinaryIO, Iterator, Optional, Tuple

from ape_header import APEHeader, ITEM_OVERHEAD, MAX_TAG_SIZE, PREAMBLE, is_utf8
from ape_locator import DEFAULT_CHUNK_SIZE, locate, read_exact, stream_length
from models import APEComment

# Keys rewritten to "date" (compared case-insensitively)
DATE_KEY_ALIASES = ("record date", "year")

# Only the year is kept from values like "1999-08-11 12:34" or "1999-W34"
DATE_VALUE_LENGTH = 4

_ITEM_PREFIX = struct.Struct("<II")


class APETagError(Exception):
    """Base class for APE tag read failures."""


class TagNotFoundError(APETagError):
    """No APE preamble was found by any permitted strategy."""


class TagTooLargeError(APETagError):
    """The declared tag body exceeds the size cap."""


class TagReadError(APETagError):
    """Seek or read failure while loading the tag body."""


class CorruptItemError(APETagError):
    """An item's length fields or key are inconsistent with the body."""


@contextmanager
def preserved_position(stream: BinaryIO) -> Iterator[int]:
    """Restore the stream's cursor on exit, whatever happens inside."""
    old_pos = stream.tell()
    try:
        yield old_pos
    finally:
        stream.seek(old_pos)


def normalize_comment(key: str, value: bytes) -> APEComment:
    """
    Apply key aliasing and date truncation.

    Args:
        key: Key as stored in the tag
        value: Raw value bytes

    Returns:
        The comment with 'year'/'record date' renamed to 'date' and date
        values cut down to the year.
    """
    if key.lower() in DATE_KEY_ALIASES:
        key = "date"
    if key.lower() == "date" and len(value) > DATE_VALUE_LENGTH:
        value = value[:DATE_VALUE_LENGTH]
    return APEComment(key, value)


def parse_item(buf: bytes, pos: int) -> Tuple[Optional[APEComment], int]:
    """
    Decode one item record starting at pos.

    Record layout: value_length (u32) | flags (u32) | key | 0x00 | value.

    Args:
        buf: Tag body
        pos: Offset of the record within buf

    Returns:
        (comment, next_pos). comment is None for binary/locator items,
        which are skipped.

    Raises:
        CorruptItemError: If the lengths or key terminator don't fit in buf.
    """
    size = len(buf)
    if pos < 0 or size - pos < ITEM_OVERHEAD:
        raise CorruptItemError(f"item header at {pos} runs past end of tag")

    value_len, flags = _ITEM_PREFIX.unpack_from(buf, pos)
    pos += ITEM_OVERHEAD

    max_key_len = size - pos - value_len - 1
    if max_key_len < 0:
        raise CorruptItemError(f"value length {value_len} exceeds tag body")

    key_end = buf.find(b"\x00", pos, pos + max_key_len + 1)
    if key_end == -1:
        raise CorruptItemError(f"unterminated key at {pos}")

    value_start = key_end + 1
    value_end = value_start + value_len
    if value_end > size:
        raise CorruptItemError(f"value at {value_start} runs past end of tag")

    if not is_utf8(flags):
        return None, value_end

    key = buf[pos:key_end].decode("latin-1")
    return normalize_comment(key, bytes(buf[value_start:value_end])), value_end


class APETag:
    """
    A single APE tag read from a stream.

    Created empty, filled once by read_tags(), then drained with
    next_comment() until it returns None.
    """

    def __init__(self, max_tag_size: int = MAX_TAG_SIZE,
                 chunk_size: int = DEFAULT_CHUNK_SIZE):
        """
        Initialize an empty tag handle.

        Args:
            max_tag_size: Largest tag body accepted, in bytes
            chunk_size: Read size for the slow preamble scan
        """
        self.max_tag_size = max_tag_size
        self.chunk_size = chunk_size
        self.header: Optional[APEHeader] = None
        self.buffer: Optional[bytes] = None
        self.pos = 0
        self.corrupt = False

    def __enter__(self) -> "APETag":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def size(self) -> int:
        """Size of the loaded tag body."""
        return len(self.buffer) if self.buffer is not None else 0

    def read_tags(self, stream: BinaryIO, allow_slow_scan: bool = False) -> int:
        """
        Locate the tag in stream and load its body.

        The stream's position is the same after the call as before it,
        whether or not the read succeeds.

        Args:
            stream: Open, seekable, readable binary stream
            allow_slow_scan: Scan the whole stream if no footer is at the end

        Returns:
            Number of items declared by the tag header.

        Raises:
            TagNotFoundError: No APE tag in the stream
            TagTooLargeError: Declared body larger than max_tag_size
            TagReadError: Seek/read failure or truncated body
        """
        if self.buffer is not None:
            raise RuntimeError("APE tag already read")

        with preserved_position(stream):
            found = locate(stream, allow_slow_scan, self.chunk_size)
            if found is None:
                raise TagNotFoundError("no APE tag found")
            _, header = found

            if header.size > self.max_tag_size:
                raise TagTooLargeError(
                    f"tag size {header.size} exceeds limit of {self.max_tag_size}"
                )

            try:
                if header.is_footer:
                    # Body sits right before the end of the stream
                    start = stream_length(stream) - header.size
                    if start < 0:
                        raise TagReadError(
                            f"tag size {header.size} is larger than the stream"
                        )
                    stream.seek(start)
                buf = read_exact(stream, header.size)
            except OSError as e:
                raise TagReadError(f"failed to read tag body: {e}") from e

            if len(buf) != header.size:
                raise TagReadError(
                    f"short read: got {len(buf)} of {header.size} bytes"
                )

        self.header = header
        self.buffer = buf
        self.pos = 0
        return header.count

    def next_comment(self) -> Optional[APEComment]:
        """
        Return the next UTF-8 comment, or None when none are left.

        Binary items are skipped. A corrupt item ends iteration for good
        (and sets corrupt); comments returned before it stay valid.
        """
        if self.buffer is None or self.corrupt:
            return None

        while self.size - self.pos > ITEM_OVERHEAD:
            # Footer copy at the end of the body, no more items
            if self.buffer.startswith(PREAMBLE, self.pos):
                return None
            try:
                comment, self.pos = parse_item(self.buffer, self.pos)
            except CorruptItemError:
                self.corrupt = True
                return None
            if comment is not None:
                return comment
        return None

    def comments(self) -> Iterator[APEComment]:
        """Yield the remaining comments in storage order."""
        while True:
            comment = self.next_comment()
            if comment is None:
                return
            yield comment

    def close(self) -> None:
        """Release the tag body."""
        self.buffer = None
        self.pos = 0
