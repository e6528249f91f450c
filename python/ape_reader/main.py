#!/usr/bin/env python3
"""
APE Reader - Print APE tags from audio files.

Usage:
    python main.py /path/to/album [options]
"""

import argparse
import os
import sys
from pathlib import Path
from typing import List

from config import load_config, validate_config, eprint
from models import ScanStats, TaggedFile
from ape_handler import APEHandler
from display import Display


class APEProcessor:
    """Main processor for scanning files for tags."""

    def __init__(self, config: dict, args: argparse.Namespace,
                 display: Display):
        """
        Initialize processor.

        Args:
            config: Configuration dictionary
            args: CLI arguments
            display: Output handler
        """
        self.config = config
        self.args = args
        self.display = display
        self.stats = ScanStats()

        # CLI flags override config values
        self.handler = APEHandler(
            allow_slow_scan=args.slow_scan or config["slow_scan"],
            max_tag_size=args.max_tag_size or config["max_tag_size"],
            chunk_size=args.chunk_size or config["scan_chunk_size"],
            use_fallback=config["use_fallback"] and not args.no_fallback,
        )

    def process(self, path: str) -> None:
        """
        Main entry point for processing.

        Args:
            path: Path to process (file or folder)
        """
        path_obj = Path(path)

        if path_obj.is_file():
            files = [str(path_obj)]
        else:
            files = self._discover_audio_files(path, self.args.recursive)
            if not files:
                self.display.print(f"No audio files found in: {path}")

        for i, file_path in enumerate(files):
            self.display.show_progress(i + 1, len(files), Path(file_path).name)
            self._process_file(file_path)

        self.display.show_summary(self.stats)

    def _process_file(self, file_path: str) -> TaggedFile:
        """Scan a single file, record stats and print the result."""
        tagged = self.handler.scan_file(file_path)
        self._record(tagged)

        if self.args.raw:
            self.display.show_comments(tagged)
        else:
            self.display.show_metadata(tagged)
        return tagged

    def _record(self, tagged: TaggedFile) -> None:
        """Update run statistics from one scanned file."""
        self.stats.total_files += 1
        self.stats.comments_read += len(tagged.comments)

        if tagged.error:
            self.stats.errors.append(f"{tagged.file_path}: {tagged.error}")
        elif tagged.tag_source == "ape":
            self.stats.ape_tags += 1
        elif tagged.tag_source == "mutagen":
            self.stats.fallback_tags += 1
        else:
            self.stats.untagged += 1

        if tagged.truncated:
            self.stats.truncated_files.append(tagged.file_path)

    def _discover_audio_files(self, folder_path: str,
                              recursive: bool = False) -> List[str]:
        """Find supported audio files in folder, sorted by path."""
        path = Path(folder_path)
        candidates = path.rglob("*") if recursive else path.iterdir()
        return sorted(
            str(f) for f in candidates
            if f.is_file() and APEHandler.is_supported(str(f))
        )


def _positive_int(value: str) -> int:
    """argparse type for strictly positive integers."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value}")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        description="Locate and print APE tags in audio files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s song.ape                  Show tags of one file
  %(prog)s /music/album --raw        Show raw APE items for a folder
  %(prog)s /music -r --slow-scan     Scan a library, search whole files for tags
"""
    )

    parser.add_argument(
        "path",
        help="Audio file or folder to scan"
    )

    parser.add_argument(
        "--recursive", "-r",
        action="store_true",
        help="Scan subfolders too"
    )

    # Tag location
    parser.add_argument(
        "--slow-scan",
        action="store_true",
        help="Search the whole file for an APE tag when none is at the end"
    )

    parser.add_argument(
        "--max-tag-size",
        type=_positive_int,
        help="Reject APE tags larger than this many bytes (default: 1 MiB)"
    )

    parser.add_argument(
        "--chunk-size",
        type=_positive_int,
        help="Read size in bytes used by --slow-scan (default: 4096)"
    )

    parser.add_argument(
        "--no-fallback",
        action="store_true",
        help="Don't read other tag formats when a file has no APE tag"
    )

    # Output
    parser.add_argument(
        "--raw",
        action="store_true",
        help="Print raw tag items instead of track metadata"
    )

    # Configuration
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to .env file (default: ./.env)"
    )

    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output"
    )

    # Verbosity
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress non-essential output"
    )

    return parser


def main():
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args()

    # Validate path
    if not os.path.exists(args.path):
        eprint(f"Error: Path does not exist: {args.path}")
        sys.exit(1)

    # Load configuration
    config = load_config(args.env_file)
    problems = validate_config(config)

    if problems:
        eprint("\nInvalid configuration:")
        for problem in problems:
            eprint(f"  - {problem}")
        sys.exit(1)

    display = Display(no_color=args.no_color, quiet=args.quiet)

    # Run processor
    processor = APEProcessor(config, args, display)

    try:
        processor.process(args.path)
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
        sys.exit(1)


if __name__ == "__main__":
    main()
