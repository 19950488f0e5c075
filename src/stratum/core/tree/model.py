"""Document model.

The Document is an arena of immutable Nodes keyed by tree path. Updating a
node means storing a new Node under the same key; anything holding a tree
path always sees the current value.

Tree paths are root-relative and ``/``-joined; the root's path is ``""``.
"""
from __future__ import annotations

import posixpath
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

from stratum.core.exceptions import NotFoundError
from .markers import TemplateMarker


class NodeKind(str, Enum):
    DIRECTORY = "directory"
    FILE = "file"
    EXECUTABLE = "executable"
    MODULE = "module"


@dataclass(frozen=True)
class Node:
    """One entry of the Document.

    ``text`` is the serialized form used for evaluation; it is None when the
    content was never read. ``fragment`` holds the parsed XML of structured
    files.
    """

    path: str
    name: str
    kind: NodeKind
    source: Optional[Path] = None
    children: Tuple[str, ...] = ()
    text: Optional[str] = None
    fragment: Any = field(default=None, compare=False, repr=False)
    template: Optional[TemplateMarker] = None
    no_copy: bool = False

    @property
    def is_directory(self) -> bool:
        return self.kind is NodeKind.DIRECTORY

    @property
    def is_template(self) -> bool:
        return self.template is not None

    @property
    def is_structured(self) -> bool:
        return self.fragment is not None

    @property
    def bucket(self) -> int:
        return self.template.bucket if self.template is not None else 0

    @property
    def dirname(self) -> str:
        """Tree path of the directory that holds this node."""
        return posixpath.dirname(self.path)

    def serialized(self) -> str:
        return self.text or ""

    def with_content(self, text: str, fragment: Any = None) -> "Node":
        return replace(self, text=text, fragment=fragment)


def child_path(parent: str, name: str) -> str:
    return f"{parent}/{name}" if parent else name


def normalize_tree_path(path: str) -> str:
    """Normalize a user-supplied tree path (``./a/b/`` → ``a/b``)."""
    cleaned = posixpath.normpath(path.replace("\\", "/")) if path else ""
    cleaned = cleaned.strip("/")
    return "" if cleaned == "." else cleaned


class Document:
    """Arena of Nodes addressed by tree path."""

    def __init__(self) -> None:
        self._nodes: Dict[str, Node] = {}

    def __contains__(self, path: object) -> bool:
        return path in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    @property
    def root(self) -> Node:
        return self.get("")

    def add(self, node: Node) -> None:
        if node.path in self._nodes:
            raise ValueError(f"duplicate tree path '{node.path}'")
        self._nodes[node.path] = node

    def replace(self, node: Node) -> None:
        if node.path not in self._nodes:
            raise NotFoundError(f"no such file or directory '{node.path}'")
        self._nodes[node.path] = node

    def find(self, path: str) -> Optional[Node]:
        return self._nodes.get(path)

    def get(self, path: str) -> Node:
        node = self._nodes.get(path)
        if node is None:
            raise NotFoundError(
                f"no such file or directory '{path}'", context={"path": path}
            )
        return node

    def children(self, path: str) -> List[Node]:
        node = self.get(path)
        return [self.get(child_path(node.path, name)) for name in node.children]

    def parent(self, path: str) -> Optional[Node]:
        if path == "":
            return None
        return self.get(posixpath.dirname(path))

    def walk(self, path: str = "") -> Iterator[Node]:
        """Depth-first, in child order."""
        node = self.get(path)
        yield node
        for name in node.children:
            yield from self.walk(child_path(node.path, name))


__all__ = ["NodeKind", "Node", "Document", "child_path", "normalize_tree_path"]
