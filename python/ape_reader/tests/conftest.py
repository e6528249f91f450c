"""Shared test fixtures for ape_reader tests."""

import struct
import sys
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from ape_header import FLAG_HAS_FOOTER, FLAG_HAS_HEADER, FLAG_IS_HEADER
from models import TrackMetadata


AUDIO_PREFIX = b"\xff\xfb\x90\x00" + b"\x00" * 508


def make_item(key, value, flags=0):
    """Encode one item record."""
    if isinstance(key, str):
        key = key.encode("ascii")
    if isinstance(value, str):
        value = value.encode("utf-8")
    return struct.pack("<II", len(value), flags) + key + b"\x00" + value


def make_block(size, count, flags=0, version=2000):
    """Encode a 32-byte header/footer block."""
    return b"APETAGEX" + struct.pack("<IIII", version, size, count, flags) + b"\x00" * 8


def footer_tagged(items, prefix=AUDIO_PREFIX, with_header=True, count=None):
    """
    Build file contents with a footer-terminated APEv2 tag.

    The declared size covers items plus footer, as real encoders write it.
    """
    body = b"".join(items)
    size = len(body) + 32
    count = len(items) if count is None else count
    data = prefix
    if with_header:
        data += make_block(size, count, FLAG_HAS_HEADER | FLAG_HAS_FOOTER | FLAG_IS_HEADER)
    data += body
    data += make_block(size, count, (FLAG_HAS_HEADER | FLAG_HAS_FOOTER) if with_header else 0)
    return data


def header_only_tagged(items, prefix=AUDIO_PREFIX, suffix=b"", count=None):
    """Build file contents with a leading header and no footer."""
    body = b"".join(items)
    count = len(items) if count is None else count
    return prefix + make_block(len(body), count, FLAG_HAS_HEADER | FLAG_IS_HEADER) + body + suffix


class TrackingStream:
    """Wraps a file object and records how it is read."""

    def __init__(self, fileobj):
        self.fileobj = fileobj
        self.seeks = []
        self.reads = []

    def seek(self, offset, whence=0):
        self.seeks.append((offset, whence))
        return self.fileobj.seek(offset, whence)

    def tell(self):
        return self.fileobj.tell()

    def read(self, size=-1):
        data = self.fileobj.read(size)
        self.reads.append(len(data))
        return data

    @property
    def bytes_read(self):
        return sum(self.reads)


@pytest.fixture
def sample_metadata():
    """Basic complete metadata for a single track."""
    return TrackMetadata(
        title="Test Song",
        artist="Test Artist",
        album="Test Album",
        track_number=1,
        total_tracks=10,
        year=2020,
    )


@pytest.fixture
def basic_items():
    """A small set of text items in storage order."""
    return [
        make_item("Title", "Test Song"),
        make_item("Artist", "Test Artist"),
        make_item("Album", "Test Album"),
        make_item("Track", "3/12"),
        make_item("Year", "2020-01-15"),
    ]


@pytest.fixture
def write_file(tmp_path):
    """Write bytes to a file in tmp_path and return its path."""
    def _write(data, name="song.ape"):
        path = tmp_path / name
        path.write_bytes(data)
        return str(path)
    return _write
