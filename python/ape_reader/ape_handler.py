"""APE tag handler, with mutagen as a fallback for other tag formats."""

from pathlib import Path
from typing import Dict, List, Optional, Tuple

import mutagen
from mutagen import File

from ape_header import MAX_TAG_SIZE
from ape_locator import DEFAULT_CHUNK_SIZE
from ape_tag import APETag, APETagError, TagNotFoundError, TagTooLargeError
from config import eprint
from models import APEComment, TaggedFile, TrackMetadata
from utils import decode_value, parse_track_disc, parse_year


class APEHandler:
    """Reads APE tags from audio files and maps them to track metadata."""

    SUPPORTED_EXTENSIONS = {
        ".ape", ".mpc", ".mp+", ".wv", ".ofr", ".ofs", ".tak",
        ".mp3", ".flac", ".m4a",
    }

    # APE item keys (lowercased) -> TrackMetadata text fields
    TEXT_FIELDS = {
        "title": "title",
        "artist": "artist",
        "album": "album",
        "album artist": "album_artist",
        "albumartist": "album_artist",
        "genre": "genre",
    }

    TRACK_KEYS = ("track", "tracknumber")
    # "discnumber" is the Vorbis name, "disc" is non-standard but common
    DISC_KEYS = ("disc", "discnumber")

    # mutagen easy-interface keys -> APE style keys
    EASY_KEYS = {
        "title": "Title",
        "artist": "Artist",
        "album": "Album",
        "albumartist": "Album Artist",
        "tracknumber": "Track",
        "discnumber": "Disc",
        "date": "date",
        "genre": "Genre",
    }

    def __init__(self, allow_slow_scan: bool = False,
                 max_tag_size: int = MAX_TAG_SIZE,
                 chunk_size: int = DEFAULT_CHUNK_SIZE,
                 use_fallback: bool = True):
        """
        Initialize handler.

        Args:
            allow_slow_scan: Scan whole files when no footer is at the end
            max_tag_size: Largest APE tag body accepted
            chunk_size: Read size for the slow scan
            use_fallback: Try mutagen when a file has no usable APE tag
        """
        self.allow_slow_scan = allow_slow_scan
        self.max_tag_size = max_tag_size
        self.chunk_size = chunk_size
        self.use_fallback = use_fallback

    @classmethod
    def is_supported(cls, file_path: str) -> bool:
        """Check if file format is supported."""
        return Path(file_path).suffix.lower() in cls.SUPPORTED_EXTENSIONS

    @classmethod
    def get_format(cls, file_path: str) -> Optional[str]:
        """Get audio format from file extension."""
        ext = Path(file_path).suffix.lower()
        if ext in cls.SUPPORTED_EXTENSIONS:
            return ext[1:]  # Remove leading dot
        return None

    def read_comments(self, file_path: str) -> Tuple[APETag, List[APEComment]]:
        """
        Read all comments from the APE tag of a file.

        Args:
            file_path: Path to audio file

        Returns:
            (tag, comments). The tag's buffer is already released; its
            header and corrupt flag remain available.

        Raises:
            APETagError: If no tag could be read
        """
        with open(file_path, "rb") as f, APETag(self.max_tag_size,
                                                self.chunk_size) as tag:
            tag.read_tags(f, self.allow_slow_scan)
            comments = list(tag.comments())
        return tag, comments

    def scan_file(self, file_path: str) -> TaggedFile:
        """
        Read whatever tags a file has, APE first.

        Args:
            file_path: Path to audio file

        Returns:
            TaggedFile describing the result (error set on failure)
        """
        tagged = TaggedFile(file_path=file_path, format=self.get_format(file_path))

        try:
            tag, comments = self.read_comments(file_path)
        except TagNotFoundError:
            if self.use_fallback:
                self._read_fallback(tagged)
            return tagged
        except TagTooLargeError as e:
            eprint(f"Ignoring APE tag in {file_path}: {e}")
            if self.use_fallback:
                self._read_fallback(tagged)
            return tagged
        except (APETagError, OSError) as e:
            eprint(f"Error reading APE tag from {file_path}: {e}")
            tagged.error = str(e)
            return tagged

        tagged.tag_source = "ape"
        tagged.tag_version = tag.header.version_string
        tagged.tag_size = tag.header.size
        tagged.item_count = tag.header.count
        tagged.comments = comments
        tagged.truncated = tag.corrupt
        tagged.metadata = self.comments_to_metadata(comments)
        return tagged

    def read_tags(self, file_path: str) -> TrackMetadata:
        """
        Read track metadata from audio file.

        Args:
            file_path: Path to audio file

        Returns:
            TrackMetadata with current tags (empty if none were found)
        """
        return self.scan_file(file_path).metadata

    def _read_fallback(self, tagged: TaggedFile) -> None:
        """Fill tagged from non-APE tags using mutagen."""
        try:
            audio = File(tagged.file_path, easy=True)
        except mutagen.MutagenError as e:
            eprint(f"Error reading tags from {tagged.file_path}: {e}")
            tagged.error = str(e)
            return

        if audio is None or not audio.tags:
            return

        comments = self._easy_tags_to_comments(audio.tags)
        tagged.tag_source = "mutagen"
        tagged.comments = comments
        tagged.metadata = self.comments_to_metadata(comments)

    def _easy_tags_to_comments(self, tags) -> List[APEComment]:
        """Convert mutagen easy tags to comments with APE style keys."""
        comments = []
        for easy_key, ape_key in self.EASY_KEYS.items():
            values = tags.get(easy_key)
            if not values:
                continue
            comments.append(APEComment(ape_key, str(values[0]).encode("utf-8")))
        return comments

    def comments_to_metadata(self, comments: List[APEComment]) -> TrackMetadata:
        """
        Map comments to TrackMetadata.

        Keys are matched case-insensitively; the first occurrence wins.

        Args:
            comments: Decoded comments

        Returns:
            TrackMetadata populated from the known keys
        """
        values: Dict[str, str] = {}
        for comment in comments:
            values.setdefault(comment.key.lower(), decode_value(comment.value))

        metadata = TrackMetadata()
        for key, attr in self.TEXT_FIELDS.items():
            if getattr(metadata, attr) is None and values.get(key):
                setattr(metadata, attr, values[key])

        metadata.track_number, metadata.total_tracks = parse_track_disc(
            self._first_of(values, self.TRACK_KEYS)
        )
        metadata.disc_number, metadata.total_discs = parse_track_disc(
            self._first_of(values, self.DISC_KEYS)
        )
        metadata.year = parse_year(values.get("date", ""))
        return metadata

    def _first_of(self, values: Dict[str, str], keys: Tuple[str, ...]) -> str:
        """Return the first non-empty value among keys."""
        for key in keys:
            if values.get(key):
                return values[key]
        return ""
