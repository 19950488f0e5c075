from __future__ import annotations

import os
import socket
from pathlib import Path

import pytest

from stratum.core.exceptions import InvalidObjectError
from stratum.core.overlay import DirectoryListing, EntryKind, FileLocation, OverlayResolver


def test_single_root_directory_listing(make_tree) -> None:
    root = make_tree("a", {"index.xhtml": "<p/>", "pages": {"one.txt": "1"}})
    found = OverlayResolver([root]).resolve("")

    assert isinstance(found, DirectoryListing)
    kinds = {e.name: e.kind for e in found.entries}
    assert kinds == {"index.xhtml": EntryKind.FILE, "pages": EntryKind.DIRECTORY}


def test_higher_priority_file_shadows_lower(make_tree) -> None:
    high = make_tree("high", {"style.css": "high"})
    low = make_tree("low", {"style.css": "low", "extra.css": "extra"})
    resolver = OverlayResolver([high, low])

    found = resolver.resolve("style.css")
    assert isinstance(found, FileLocation)
    assert found.path == high / "style.css"

    listing = resolver.resolve("")
    assert sorted(listing.names()) == ["extra.css", "style.css"]
    entry = {e.name: e for e in listing.entries}["style.css"]
    assert entry.path == high / "style.css"


def test_directories_are_merged_across_roots(make_tree) -> None:
    high = make_tree("high", {"pages": {"a.txt": "A"}})
    low = make_tree("low", {"pages": {"b.txt": "B"}})

    found = OverlayResolver([high, low]).resolve("pages")

    assert isinstance(found, DirectoryListing)
    assert sorted(found.names()) == ["a.txt", "b.txt"]
    assert found.paths == (high / "pages", low / "pages")


def test_file_in_any_root_wins_over_directories(make_tree) -> None:
    high = make_tree("high", {"thing": {"inner.txt": "x"}})
    low = make_tree("low", {"thing": "a file"})

    found = OverlayResolver([high, low]).resolve("thing")
    assert isinstance(found, FileLocation)
    assert found.path == low / "thing"
    assert isinstance(OverlayResolver([low, high]).resolve("thing"), FileLocation)


def test_listing_kind_agrees_with_file_precedence(make_tree) -> None:
    high = make_tree("high", {"thing": {"inner.txt": "x"}, "other": "high"})
    low = make_tree("low", {"thing": "a file", "other": {"deep.txt": "d"}})

    entries = {e.name: e for e in OverlayResolver([high, low]).resolve("").entries}
    assert entries["thing"].kind is EntryKind.FILE
    assert entries["thing"].path == low / "thing"
    assert entries["other"].kind is EntryKind.FILE
    assert entries["other"].path == high / "other"


def test_missing_path_resolves_to_none(make_tree) -> None:
    root = make_tree("a", {"x.txt": "x"})
    assert OverlayResolver([root]).resolve("nope") is None
    assert OverlayResolver([root]).resolve("x.txt/below") is None


def test_hidden_entries_are_excluded(make_tree) -> None:
    root = make_tree("a", {".git": {"HEAD": "ref"}, ".hidden": "h", "shown": "s"})
    assert OverlayResolver([root]).resolve("").names() == ["shown"]


def test_missing_root_is_skipped(make_tree, tmp_path: Path) -> None:
    root = make_tree("a", {"x.txt": "x"})
    found = OverlayResolver([tmp_path / "absent", root]).resolve("")
    assert found.names() == ["x.txt"]


def test_single_file_root_only_provides_tree_root(make_tree, tmp_path: Path) -> None:
    make_tree("a", {"page.txt": "p"})
    resolver = OverlayResolver([tmp_path / "a" / "page.txt"])

    found = resolver.resolve("")
    assert isinstance(found, FileLocation)
    assert resolver.resolve("page.txt") is None


@pytest.mark.skipif(os.name != "posix", reason="needs symlinks")
def test_symlinks_are_followed(make_tree, tmp_path: Path) -> None:
    target = make_tree("target", {"shared.txt": "shared"})
    root = make_tree("a", {})
    (root / "linked").symlink_to(target, target_is_directory=True)

    found = OverlayResolver([root]).resolve("linked")
    assert isinstance(found, DirectoryListing)
    assert found.names() == ["shared.txt"]


@pytest.mark.skipif(not hasattr(socket, "AF_UNIX"), reason="needs unix sockets")
def test_special_file_is_invalid_object(tmp_path: Path) -> None:
    root = tmp_path / "r"
    root.mkdir()
    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        sock.bind(str(root / "sock"))
        with pytest.raises(InvalidObjectError, match="is not a file or directory"):
            OverlayResolver([root]).resolve("")
    finally:
        sock.close()


@pytest.mark.skipif(os.name != "posix", reason="needs symlinks")
def test_dangling_link_in_listing_is_invalid(make_tree) -> None:
    root = make_tree("a", {"ok.txt": "ok"})
    (root / "broken").symlink_to(root / "missing")

    with pytest.raises(InvalidObjectError, match="broken' is not a file or directory"):
        OverlayResolver([root]).resolve("")


@pytest.mark.skipif(os.name != "posix", reason="needs symlinks")
def test_dangling_link_falls_through_to_lower_root(make_tree) -> None:
    high = make_tree("high", {})
    low = make_tree("low", {"page.txt": "low"})
    (high / "page.txt").symlink_to(high / "missing")
    resolver = OverlayResolver([high, low])

    entries = {e.name: e for e in resolver.resolve("").entries}
    assert entries["page.txt"].path == low / "page.txt"
    assert resolver.resolve("page.txt") == FileLocation(low / "page.txt")
