"""Data models for APE Reader."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, NamedTuple, Optional

from utils import decode_value


class APEComment(NamedTuple):
    """A single decoded tag item."""
    key: str
    value: bytes

    @property
    def text(self) -> str:
        """Value decoded as UTF-8, with undecodable bytes replaced."""
        return decode_value(self.value)


class TagStatus(Enum):
    """Status of the tags found in an audio file."""
    COMPLETE = "complete"
    PARTIAL = "partial"
    MISSING = "missing"


@dataclass
class TrackMetadata:
    """Represents metadata for a single track."""
    title: Optional[str] = None
    artist: Optional[str] = None
    album: Optional[str] = None
    album_artist: Optional[str] = None
    track_number: Optional[int] = None
    total_tracks: Optional[int] = None
    disc_number: Optional[int] = None
    total_discs: Optional[int] = None
    year: Optional[int] = None
    genre: Optional[str] = None

    def is_complete(self) -> bool:
        """Check if required tags are present."""
        required = [self.title, self.artist, self.track_number]
        return all(r is not None for r in required)

    def get_status(self) -> TagStatus:
        """Get the overall tag status."""
        if self.is_complete():
            return TagStatus.COMPLETE
        if any([self.title, self.artist, self.album]):
            return TagStatus.PARTIAL
        return TagStatus.MISSING


@dataclass
class TaggedFile:
    """Represents an audio file and whatever tags were read from it."""
    file_path: str
    format: Optional[str] = None  # 'ape', 'mpc', 'mp3', ...
    tag_source: Optional[str] = None  # 'ape', 'mutagen' or None
    tag_version: Optional[str] = None  # e.g. '2.0' for APE tags
    tag_size: int = 0  # APE tag body size in bytes
    item_count: int = 0  # items declared by the APE header
    comments: List[APEComment] = field(default_factory=list)
    metadata: TrackMetadata = field(default_factory=TrackMetadata)
    truncated: bool = False  # APE iteration stopped on a corrupt item
    error: Optional[str] = None

    @property
    def tag_status(self) -> TagStatus:
        """Get current tag status."""
        return self.metadata.get_status()

    @property
    def has_tags(self) -> bool:
        """Check if any tag source produced data."""
        return self.tag_source is not None


@dataclass
class ScanStats:
    """Statistics for a scan run."""
    total_files: int = 0
    ape_tags: int = 0
    fallback_tags: int = 0
    untagged: int = 0
    comments_read: int = 0
    errors: List[str] = field(default_factory=list)
    truncated_files: List[str] = field(default_factory=list)
