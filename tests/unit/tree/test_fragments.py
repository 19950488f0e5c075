from __future__ import annotations

import pytest

from stratum.core.exceptions import ParseError
from stratum.core.tree import inner_xml, parse_fragment, serialize


def test_fragment_may_hold_several_elements_and_text() -> None:
    root = parse_fragment("lead <b>one</b> mid <i>two</i> tail", "a.xml")

    assert root.tag == "file"
    assert root.get("path") == "a.xml"
    assert [c.tag for c in root] == ["b", "i"]
    assert inner_xml(root) == "lead <b>one</b> mid <i>two</i> tail"


def test_malformed_fragment_raises_parse_error() -> None:
    with pytest.raises(ParseError, match="error parsing 'bad.xhtml'"):
        parse_fragment("<p>unclosed", "bad.xhtml")


def test_serialize_values() -> None:
    root = parse_fragment("<p>x</p>tail", "a.xml")
    assert serialize(root[0]) == "<p>x</p>"
    assert serialize([root[0], " and ", "y"]) == "<p>x</p> and y"
    assert serialize(None) == ""
    assert serialize(b"raw") == "raw"
    assert serialize(3) == "3"
