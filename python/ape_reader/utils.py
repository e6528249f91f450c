"""Utility functions for APE Reader."""

from typing import Optional, Tuple


def decode_value(value: bytes) -> str:
    """Decode a tag value as UTF-8, replacing invalid sequences."""
    return value.decode("utf-8", errors="replace")


def parse_track_disc(value: str) -> Tuple[Optional[int], Optional[int]]:
    """
    Parse track/disc string like '3/12' or '3'.

    Returns:
        (number, total) tuple
    """
    if not value:
        return None, None

    parts = value.split("/")
    try:
        num = int(parts[0]) if parts[0].strip() else None
        total = int(parts[1]) if len(parts) > 1 and parts[1].strip() else None
        return num, total
    except ValueError:
        return None, None


def parse_year(value: str) -> Optional[int]:
    """Parse year from various date formats."""
    if not value:
        return None
    try:
        # Handle formats like "2020", "2020-01-15", etc.
        return int(str(value)[:4])
    except (ValueError, IndexError):
        return None


def format_size(num_bytes: int) -> str:
    """Format a byte count for display."""
    if num_bytes < 1024:
        return f"{num_bytes} B"
    if num_bytes < 1024 * 1024:
        return f"{num_bytes / 1024:.1f} KiB"
    return f"{num_bytes / (1024 * 1024):.1f} MiB"
