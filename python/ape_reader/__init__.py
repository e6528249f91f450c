"""
APE Reader - Locate and decode APE metadata tags in audio files.

This package provides tools to:
- Find APEv1/APEv2 tags at the end of a file or by scanning for the preamble
- Decode tag items into normalized key/value comments
- Map comments to track metadata, falling back to other formats via mutagen
- Print tags for single files or whole folders from the command line
"""

__version__ = "1.0.0"
