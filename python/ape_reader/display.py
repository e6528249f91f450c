"""Terminal output for scan results."""

from pathlib import Path

from models import ScanStats, TaggedFile, TagStatus
from utils import decode_value, format_size


class Display:
    """Handles printing of tags and summaries."""

    COLORS = {
        "reset": "\033[0m",
        "bold": "\033[1m",
        "green": "\033[92m",
        "yellow": "\033[93m",
        "red": "\033[91m",
        "cyan": "\033[96m",
        "dim": "\033[2m",
    }

    STATUS_COLORS = {
        TagStatus.COMPLETE: "green",
        TagStatus.PARTIAL: "yellow",
        TagStatus.MISSING: "red",
    }

    TRUNCATE_LEN = 60

    def __init__(self, no_color: bool = False, quiet: bool = False):
        """
        Initialize display.

        Args:
            no_color: Disable colored output
            quiet: Suppress non-essential output
        """
        self.no_color = no_color
        self.quiet = quiet

        if no_color:
            self.COLORS = {k: "" for k in self.COLORS}

    def _c(self, color: str, text: str) -> str:
        """Apply color to text."""
        return f"{self.COLORS.get(color, '')}{text}{self.COLORS['reset']}"

    def _truncate(self, text: str) -> str:
        if len(text) > self.TRUNCATE_LEN:
            return text[:self.TRUNCATE_LEN - 3] + "..."
        return text

    def print(self, *args, **kwargs):
        """Print unless quiet mode."""
        if not self.quiet:
            print(*args, **kwargs)

    def show_file_header(self, tagged: TaggedFile) -> None:
        """Display the file name and where its tags came from."""
        filename = Path(tagged.file_path).name
        print(f"\n{self._c('bold', 'File:')} {filename}")

        if tagged.error:
            print(f"  {self._c('red', 'Error:')} {tagged.error}")
        elif tagged.tag_source == "ape":
            self.print(self._c(
                "dim",
                f"  APE {tagged.tag_version} tag, {tagged.item_count} items, "
                f"{format_size(tagged.tag_size)}"
            ))
        elif tagged.tag_source == "mutagen":
            self.print(self._c("dim", "  No APE tag, read other tags with mutagen"))
        else:
            print(f"  {self._c('dim', '(no tags)')}")

        if tagged.truncated:
            print(f"  {self._c('yellow', 'Warning:')} tag contains a corrupt item, "
                  "remaining items skipped")

    def show_comments(self, tagged: TaggedFile) -> None:
        """Display raw comments, one per line."""
        self.show_file_header(tagged)
        if not tagged.comments:
            return

        print("-" * 60)
        for comment in tagged.comments:
            value = self._truncate(decode_value(comment.value))
            print(f"{comment.key:<20} {value}")

    def show_metadata(self, tagged: TaggedFile) -> None:
        """Display mapped track metadata."""
        self.show_file_header(tagged)
        if not tagged.has_tags:
            return

        meta = tagged.metadata
        status = tagged.tag_status
        print(f"  Status: {self._c(self.STATUS_COLORS[status], status.value)}")
        print("-" * 60)

        fields = [
            ("Title", meta.title),
            ("Artist", meta.artist),
            ("Album", meta.album),
            ("Album Artist", meta.album_artist),
            ("Track #",
             f"{meta.track_number or '?'}/{meta.total_tracks or '?'}" if meta.track_number else None),
            ("Disc #",
             f"{meta.disc_number or '?'}/{meta.total_discs or '?'}" if meta.disc_number else None),
            ("Year", meta.year),
            ("Genre", meta.genre),
        ]

        for field, value in fields:
            value_str = self._truncate(str(value)) if value else self._c("dim", "(empty)")
            print(f"{field:<14} {value_str}")

    def show_progress(self, current: int, total: int, filename: str) -> None:
        """Show processing progress."""
        self.print(self._c("dim", f"[{current}/{total}] {filename}"))

    def show_summary(self, stats: ScanStats) -> None:
        """Display scan summary."""
        print(f"\n{self._c('bold', 'Summary:')}")
        print(f"  Files scanned:     {stats.total_files}")
        print(f"  APE tags:          {stats.ape_tags}")
        print(f"  Other tags:        {stats.fallback_tags}")
        print(f"  Untagged:          {stats.untagged}")
        print(f"  Comments read:     {stats.comments_read}")

        if stats.truncated_files:
            print(f"\n{self._c('yellow', 'Tags with corrupt items:')}")
            for path in stats.truncated_files:
                print(f"  - {path}")

        if stats.errors:
            print(f"\n{self._c('red', 'Errors:')}")
            for error in stats.errors:
                print(f"  - {error}")
