"""Read-only views of the Document handed to queries.

A view holds a tree path, not a Node, so it always reflects the node's
current content even after the scheduler has replaced it.
"""
from __future__ import annotations

import posixpath
from typing import Iterator, List, Optional

from stratum.core.exceptions import NotFoundError
from stratum.core.tree.model import Document, Node, NodeKind, child_path


def _join(base: str, rel: str) -> Optional[str]:
    """Resolve ``rel`` against the tree path ``base``; None if it leaves the root."""
    if rel.startswith("/"):
        joined = rel.lstrip("/")
    else:
        joined = posixpath.join(base, rel) if base else rel
    if not joined:
        return ""
    normalized = posixpath.normpath(joined)
    if normalized == ".":
        return ""
    if normalized == ".." or normalized.startswith("../"):
        return None
    return normalized


class NodeView:
    """One node of the Document as seen from a query."""

    __slots__ = ("_document", "_path")

    def __init__(self, document: Document, path: str) -> None:
        self._document = document
        self._path = path

    @property
    def _node(self) -> Node:
        return self._document.get(self._path)

    @property
    def name(self) -> str:
        return self._node.name

    @property
    def path(self) -> str:
        return self._path

    @property
    def kind(self) -> str:
        return self._node.kind.value

    @property
    def is_directory(self) -> bool:
        return self._node.kind is NodeKind.DIRECTORY

    @property
    def directory(self) -> str:
        """Tree path against which relative paths are resolved."""
        node = self._node
        return node.path if node.is_directory else node.dirname

    @property
    def children(self) -> List["NodeView"]:
        node = self._node
        return [NodeView(self._document, child_path(node.path, n)) for n in node.children]

    @property
    def parent(self) -> Optional["NodeView"]:
        if self._path == "":
            return None
        return NodeView(self._document, posixpath.dirname(self._path))

    @property
    def source(self) -> Optional[str]:
        src = self._node.source
        return str(src) if src is not None else None

    @property
    def text(self) -> str:
        node = self._node
        if node.text is not None:
            return node.text
        if node.kind is NodeKind.FILE and node.source is not None:
            return node.source.read_text(encoding="utf-8")
        return ""

    @property
    def xml(self):
        """Parsed fragment under its ``<file>`` wrapper, or None."""
        return self._node.fragment

    def find(self, rel: str) -> Optional["NodeView"]:
        """Node at ``rel`` relative to this node's directory, or None."""
        target = _join(self.directory, rel)
        if target is None or target not in self._document:
            return None
        return NodeView(self._document, target)

    def select(self, xpath: str, **variables) -> list:
        """Evaluate ``xpath`` against the fragment; empty for unstructured nodes."""
        fragment = self._node.fragment
        if fragment is None:
            return []
        result = fragment.xpath(xpath, **variables)
        return result if isinstance(result, list) else [result]

    def __getitem__(self, name: str) -> "NodeView":
        found = self.find(name) if self.is_directory else None
        if found is None:
            raise KeyError(name)
        return found

    def __iter__(self) -> Iterator["NodeView"]:
        return iter(self.children)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NodeView):
            return NotImplemented
        return self._document is other._document and self._path == other._path

    def __hash__(self) -> int:
        return hash(self._path)

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f"<NodeView {self._path or '/'} ({self.kind})>"


class DocumentView:
    """The whole Document, addressed by absolute tree path."""

    def __init__(self, document: Document) -> None:
        self._document = document

    @property
    def root(self) -> NodeView:
        return NodeView(self._document, "")

    def find(self, path: str) -> Optional[NodeView]:
        target = _join("", path)
        if target is None or target not in self._document:
            return None
        return NodeView(self._document, target)

    def get(self, path: str) -> NodeView:
        found = self.find(path)
        if found is None:
            raise NotFoundError(f"no such file or directory '{path}'", context={"path": path})
        return found

    def walk(self, path: str = "") -> Iterator[NodeView]:
        for node in self._document.walk(path):
            yield NodeView(self._document, node.path)

    def __getitem__(self, path: str) -> NodeView:
        found = self.find(path)
        if found is None:
            raise KeyError(path)
        return found

    def __len__(self) -> int:
        return len(self._document)

    def __repr__(self) -> str:
        return f"<DocumentView {len(self._document)} node(s)>"


__all__ = ["NodeView", "DocumentView"]
