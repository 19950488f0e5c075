"""Filename conventions.

A file is a template when its name contains the template token as a
dot-delimited component, optionally followed by a priority numeral, and
followed either by another extension or by the end of the name:

    index.stratum.xhtml      template, bucket 0
    nav.stratum2.xhtml       template, bucket 2
    header.in.xhtml          no-copy (evaluated or queried, never written)

Both tokens are removed from output names.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class TemplateMarker:
    """Template token found in a filename."""

    token: str
    priority: Optional[int] = None

    @property
    def bucket(self) -> int:
        return self.priority if self.priority is not None else 0


class FilenameMarkers:
    """Recognize and strip the template and no-copy tokens."""

    def __init__(self, template_token: str = "stratum", no_copy_token: str = "in") -> None:
        self.template_token = template_token
        self.no_copy_token = no_copy_token
        self._template_re = re.compile(
            r"\." + re.escape(template_token) + r"([0-9]+)?(?=\.[^.]|$)"
        )
        self._no_copy_re = re.compile(r"\." + re.escape(no_copy_token) + r"(?=\.[^.]|$)")

    def template(self, name: str) -> Optional[TemplateMarker]:
        m = self._template_re.search(name)
        if m is None:
            return None
        digits = m.group(1)
        return TemplateMarker(
            token=m.group(0),
            priority=int(digits, 10) if digits is not None else None,
        )

    def is_no_copy(self, name: str) -> bool:
        return self._no_copy_re.search(name) is not None

    def strip_template(self, name: str) -> str:
        return self._template_re.sub("", name, count=1)

    @staticmethod
    def function_name(name: str) -> str:
        """Name under which an executable is callable: its leading dot-free segment."""
        return name.split(".", 1)[0]


__all__ = ["TemplateMarker", "FilenameMarkers"]
