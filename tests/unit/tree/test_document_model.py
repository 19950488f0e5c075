from __future__ import annotations

import pytest

from stratum.core.exceptions import NotFoundError
from stratum.core.tree import Document, Node, NodeKind, child_path, normalize_tree_path


def _doc() -> Document:
    doc = Document()
    doc.add(Node(path="", name="", kind=NodeKind.DIRECTORY, children=("a", "f.txt")))
    doc.add(Node(path="a", name="a", kind=NodeKind.DIRECTORY, children=("b.txt",)))
    doc.add(Node(path="a/b.txt", name="b.txt", kind=NodeKind.FILE, text="B"))
    doc.add(Node(path="f.txt", name="f.txt", kind=NodeKind.FILE))
    return doc


def test_walk_is_depth_first_in_child_order() -> None:
    assert [n.path for n in _doc().walk()] == ["", "a", "a/b.txt", "f.txt"]


def test_replace_keeps_address_and_updates_content() -> None:
    doc = _doc()
    node = doc.get("a/b.txt")
    doc.replace(node.with_content("new"))

    assert doc.get("a/b.txt").text == "new"
    assert doc.parent("a/b.txt").path == "a"
    assert [c.path for c in doc.children("a")] == ["a/b.txt"]


def test_missing_lookups() -> None:
    doc = _doc()
    assert doc.find("nope") is None
    with pytest.raises(NotFoundError, match="no such file or directory 'nope'"):
        doc.get("nope")
    with pytest.raises(NotFoundError):
        doc.replace(Node(path="nope", name="nope", kind=NodeKind.FILE))
    with pytest.raises(ValueError):
        doc.add(Node(path="f.txt", name="f.txt", kind=NodeKind.FILE))


def test_root_has_no_parent() -> None:
    assert _doc().parent("") is None


@pytest.mark.parametrize(
    "raw, expected",
    [("", ""), (".", ""), ("/", ""), ("./pages/", "pages"), ("/a/b", "a/b"), ("a//b/./c", "a/b/c")],
)
def test_normalize_tree_path(raw: str, expected: str) -> None:
    assert normalize_tree_path(raw) == expected


def test_child_path() -> None:
    assert child_path("", "a") == "a"
    assert child_path("a", "b") == "a/b"
