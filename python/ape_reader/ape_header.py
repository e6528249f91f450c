"""APE tag header/footer block parsing."""

import struct
from dataclasses import dataclass
from typing import Optional

PREAMBLE = b"APETAGEX"
PREAMBLE_SIZE = len(PREAMBLE)

# Header and footer blocks share this layout; bytes 24-31 are reserved
HEADER_SIZE = 32

# value_length (u32) + item_flags (u32)
ITEM_OVERHEAD = 8

# Tags declaring a larger body are rejected before anything is allocated
MAX_TAG_SIZE = 1024 * 1024

FLAG_HAS_HEADER = 1 << 31
FLAG_HAS_FOOTER = 1 << 30
FLAG_IS_HEADER = 1 << 29

# Item flag bits 1-2: 0 = UTF-8 text, 1 = binary, 2 = external locator
ITEM_TYPE_MASK = 0b110

_FIELDS = struct.Struct("<IIII")


def is_utf8(item_flags: int) -> bool:
    """Check if an item holds UTF-8 text (as opposed to binary/locator data)."""
    return (item_flags & ITEM_TYPE_MASK) == 0


def is_footer(tag_flags: int) -> bool:
    """Check if a parsed block is a footer (bit 29 clear)."""
    return (tag_flags & FLAG_IS_HEADER) == 0


@dataclass(frozen=True)
class APEHeader:
    """Fields of an APE header or footer block."""
    version: int   # 1000 or 2000
    size: int      # tag body size, excluding the leading header
    count: int     # declared number of items
    flags: int     # global tag flags (0 for version 1.0)

    @property
    def is_footer(self) -> bool:
        """True if this block was read from a trailing footer."""
        return is_footer(self.flags)

    @property
    def has_header(self) -> bool:
        """True if the tag claims to carry a leading header (APEv2 only)."""
        return bool(self.flags & FLAG_HAS_HEADER)

    @property
    def version_string(self) -> str:
        """Version as shown to users, e.g. '2.0'."""
        return f"{self.version // 1000}.{(self.version % 1000) // 100}"


def parse_header(block: bytes) -> Optional[APEHeader]:
    """
    Parse a 32-byte header or footer block.

    Args:
        block: Raw bytes starting at the candidate preamble

    Returns:
        APEHeader if the block starts with the APE preamble, otherwise None.
    """
    if len(block) < HEADER_SIZE or block[:PREAMBLE_SIZE] != PREAMBLE:
        return None

    version, size, count, flags = _FIELDS.unpack_from(block, PREAMBLE_SIZE)
    return APEHeader(version=version, size=size, count=count, flags=flags)
