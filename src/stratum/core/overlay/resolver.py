"""Overlay resolution across an ordered set of source roots.

Roots are given highest priority first. A tree path is looked up in every
root in that order:

- the first root holding a regular file there wins outright, even when a
  higher-priority root holds a directory at the same path;
- otherwise every directory found there is merged, walking roots from lowest
  to highest priority so that higher-priority entries overwrite
  lower-priority ones of the same name.

Symbolic links are followed; a dangling link counts as absent, but a listed
name that is nothing but dangling links is an error, as is anything that is
neither a file nor a directory. Hidden entries (names starting with ``.``)
never appear in a listing.
"""
from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

from stratum.core.exceptions import InvalidObjectError

logger = logging.getLogger(__name__)


class EntryKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class DirEntry:
    """One entry of a merged directory listing."""

    name: str
    kind: EntryKind
    path: Path


@dataclass(frozen=True)
class FileLocation:
    """A tree path that resolved to a regular file."""

    path: Path


@dataclass(frozen=True)
class DirectoryListing:
    """A tree path that resolved to one or more merged directories."""

    paths: Tuple[Path, ...]  # high → low priority
    entries: Tuple[DirEntry, ...]

    def names(self) -> List[str]:
        return [e.name for e in self.entries]


Resolution = Union[FileLocation, DirectoryListing]


def _stat_kind(path: Path) -> Optional[EntryKind]:
    """Classify ``path``, following symlinks.

    Returns None when nothing (or a dangling link) is there.
    """
    try:
        st = os.stat(path)
    except FileNotFoundError:
        return None
    except NotADirectoryError:
        return None
    if stat.S_ISREG(st.st_mode):
        return EntryKind.FILE
    if stat.S_ISDIR(st.st_mode):
        return EntryKind.DIRECTORY
    raise InvalidObjectError(str(path))


def _join(root: Path, tree_path: str) -> Path:
    return root / tree_path if tree_path else root


class OverlayResolver:
    """Merge an ordered list of roots into single-path lookups."""

    def __init__(self, roots: Sequence[Union[str, Path]]) -> None:
        self.roots: Tuple[Path, ...] = tuple(Path(r) for r in roots)

    def _candidate_roots(self, tree_path: str) -> List[Path]:
        # A root that is a plain file can only stand for the whole tree.
        out: List[Path] = []
        for root in self.roots:
            kind = _stat_kind(root)
            if kind is EntryKind.DIRECTORY or (kind is not None and tree_path == ""):
                out.append(root)
        return out

    def resolve(self, tree_path: str) -> Optional[Resolution]:
        """Resolve ``tree_path`` against the roots.

        Returns:
            FileLocation, DirectoryListing, or None when no root has the path.

        Raises:
            InvalidObjectError: If an entry is neither file nor directory, or
                a listed name is only ever a dangling link.
        """
        dirs: List[Path] = []
        for root in self._candidate_roots(tree_path):
            candidate = _join(root, tree_path)
            kind = _stat_kind(candidate)
            if kind is None:
                continue
            if kind is EntryKind.FILE:
                logger.debug("resolve %r: file %s", tree_path, candidate)
                return FileLocation(candidate)
            dirs.append(candidate)

        if not dirs:
            logger.debug("resolve %r: not found", tree_path)
            return None

        merged: Dict[str, DirEntry] = {}
        dangling: Dict[str, Path] = {}
        for directory in reversed(dirs):
            for name in os.listdir(directory):
                if name.startswith("."):
                    continue
                full = directory / name
                kind = _stat_kind(full)
                if kind is None:
                    if name not in merged:
                        dangling.setdefault(name, full)
                    continue
                previous = merged.get(name)
                # A file anywhere shadows a directory of the same name.
                if (
                    previous is not None
                    and previous.kind is EntryKind.FILE
                    and kind is EntryKind.DIRECTORY
                ):
                    continue
                merged[name] = DirEntry(name=name, kind=kind, path=full)
                dangling.pop(name, None)
        if dangling:
            raise InvalidObjectError(str(next(iter(dangling.values()))))
        logger.debug("resolve %r: directory merged from %d root(s)", tree_path, len(dirs))
        return DirectoryListing(paths=tuple(dirs), entries=tuple(merged.values()))


__all__ = [
    "EntryKind",
    "DirEntry",
    "FileLocation",
    "DirectoryListing",
    "Resolution",
    "OverlayResolver",
]
