"""Overlay resolution for Stratum.

A build reads from an ordered list of roots (highest priority first). The
roots are merged into one logical tree:

  - a file in the highest-priority root that has the path wins outright
  - directories present in several roots have their contents merged
"""

from .resolver import (
    DirectoryListing,
    DirEntry,
    EntryKind,
    FileLocation,
    OverlayResolver,
    Resolution,
)

__all__ = [
    "DirectoryListing",
    "DirEntry",
    "EntryKind",
    "FileLocation",
    "OverlayResolver",
    "Resolution",
]
