"""Output paths and file writing.

A node's output path is its tree path with the build path prefix removed,
joined onto the output directory. Leaves lose their template marker (and its
priority numeral) from the final component; directory names are kept as is.
"""
from __future__ import annotations

import logging
import posixpath
import shutil
from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

from stratum.core.exceptions import StratumError
from stratum.core.tree.markers import FilenameMarkers

logger = logging.getLogger(__name__)


def relative_tree_path(tree_path: str, build_path: str) -> str:
    """``tree_path`` relative to ``build_path`` (which must be a prefix)."""
    if not build_path:
        return tree_path
    if tree_path == build_path:
        return ""
    prefix = build_path + "/"
    if not tree_path.startswith(prefix):
        raise ValueError(f"'{tree_path}' is not below '{build_path}'")
    return tree_path[len(prefix):]


def map_output_path(
    tree_path: str,
    build_path: str,
    output_dir: Union[str, Path],
    *,
    markers: Optional[FilenameMarkers] = None,
    strip_template: bool = True,
) -> Path:
    rel = relative_tree_path(tree_path, build_path)
    if strip_template and rel:
        markers = markers or FilenameMarkers()
        head, tail = posixpath.split(rel)
        rel = posixpath.join(head, markers.strip_template(tail)) if head else markers.strip_template(tail)
    return Path(output_dir) / rel if rel else Path(output_dir)


class OutputWriter:
    """Write expansion results below an output directory.

    Directories holding one of ``protected`` paths are never emptied.
    """

    def __init__(self, encoding: str = "utf-8", protected: Iterable[Path] = ()) -> None:
        self.encoding = encoding
        self.protected: Sequence[Path] = tuple(Path(p).resolve() for p in protected)

    def _check_protected(self, path: Path) -> None:
        target = path.resolve()
        for p in self.protected:
            if p == target or target in p.parents:
                raise StratumError(
                    f"refusing to empty '{path}': it contains input '{p}'",
                    context={"path": str(path)},
                )

    def reset_directory(self, path: Path) -> Path:
        """Empty ``path``, creating it if needed."""
        path = Path(path)
        if path.is_dir() and not path.is_symlink():
            self._check_protected(path)
            for child in path.iterdir():
                if child.is_dir() and not child.is_symlink():
                    shutil.rmtree(child)
                else:
                    child.unlink()
        elif path.exists() or path.is_symlink():
            path.unlink()
        path.mkdir(parents=True, exist_ok=True)
        logger.debug("reset output directory %s", path)
        return path

    def write_text(self, path: Path, content: str) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding=self.encoding)
        logger.debug("wrote %s (%d chars)", path, len(content))
        return path

    def copy_file(self, source: Path, path: Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, path)
        logger.debug("copied %s -> %s", source, path)
        return path


__all__ = ["relative_tree_path", "map_output_path", "OutputWriter"]
