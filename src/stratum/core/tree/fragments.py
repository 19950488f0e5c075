"""Structured (XML) fragments.

A structured file is parsed as the content of a synthetic ``<file>`` wrapper
element, so a file may hold any sequence of elements and text rather than a
single document element.
"""
from __future__ import annotations

import copy
from typing import Any, Callable, Iterable, List

from lxml import etree

from stratum.core.exceptions import ParseError

WRAPPER_TAG = "file"

_PARSER = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=True)


def parse_fragment(text: str, path: str) -> etree._Element:
    """Parse ``text`` under a ``<file>`` wrapper.

    Raises:
        ParseError: If the wrapped text is not well-formed XML.
    """
    wrapped = f"<{WRAPPER_TAG}>{text}</{WRAPPER_TAG}>"
    try:
        root = etree.fromstring(wrapped, _PARSER)
    except etree.XMLSyntaxError as exc:
        raise ParseError(path, exc) from exc
    root.set("path", path)
    return root


def inner_xml(element: etree._Element) -> str:
    """Serialize the content of ``element`` without its own tags."""
    parts = [element.text or ""]
    for child in element:
        parts.append(etree.tostring(child, encoding="unicode", with_tail=True))
    return "".join(parts)


def serialize(value: Any) -> str:
    """Serialize an element, a string, or a sequence of either."""
    if value is None:
        return ""
    if isinstance(value, etree._Element):
        return etree.tostring(value, encoding="unicode", with_tail=False)
    if isinstance(value, (str, bytes)):
        return value.decode("utf-8") if isinstance(value, bytes) else value
    if isinstance(value, Iterable):
        return "".join(serialize(v) for v in value)
    return str(value)


def map_elements(
    query: str,
    transform: Callable[[etree._Element], Any],
    elements: Iterable[etree._Element],
    path: str,
) -> List[etree._Element]:
    """Rewrite copies of ``elements``.

    Each element is deep-copied, ``query`` is run against the copy, and every
    matching element is replaced by ``transform(match)``. A transform may
    return an element or markup, of which the first element is used. When
    ``query`` matches the copy itself, the result stands in for it. The
    source elements are left untouched.

    Raises:
        ParseError: If a transform returns markup that is not well-formed.
        ValueError: If a transform result holds no element.
    """
    results: List[etree._Element] = []
    for element in elements:
        clone = copy.deepcopy(element)
        for match in clone.xpath(query):
            if not isinstance(match, etree._Element):
                continue
            replacement = _as_element(transform(match), path)
            if match is clone:
                clone = replacement
                continue
            replacement.tail = match.tail
            match.getparent().replace(match, replacement)
        results.append(clone)
    return results


def _as_element(value: Any, path: str) -> etree._Element:
    if isinstance(value, etree._Element):
        return copy.deepcopy(value)
    wrapper = parse_fragment(str(value), path)
    for child in wrapper:
        if isinstance(child.tag, str):
            wrapper.remove(child)
            child.tail = None
            return child
    raise ValueError(f"transform result has no element: {str(value)!r}")


__all__ = ["WRAPPER_TAG", "parse_fragment", "inner_xml", "serialize", "map_elements"]
