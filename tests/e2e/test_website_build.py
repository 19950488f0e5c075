"""Build a small website from a site directory overlaid on a theme."""
from __future__ import annotations

import os
from pathlib import Path

import pytest

from conftest import Executable
from stratum.cli._dispatcher import main

pytestmark = pytest.mark.skipif(os.name != "posix", reason="needs POSIX executables")

SITE_MODULE = """\
{% set namespace = "site" %}
{% macro title(page) %}{{ page.select('string(//h1)')[0] }}{% endmacro %}
"""

NAV = "<ul>{% for p in tree['pages'] %}<li>{{ site.title(p) }}</li>{% endfor %}</ul>"

INDEX = (
    "{{ tree['header.in.xhtml'] }}"
    "{{ tree['nav.stratum.in.xhtml'] }}"
    "<footer>{{ stratum.upper([], 'done') }}</footer>"
)


@pytest.fixture
def website(make_tree):
    theme = make_tree(
        "theme",
        {
            "lib": {"site.in.jinja": SITE_MODULE},
            "bin": {"upper.in": Executable("#!/bin/sh\ntr a-z A-Z\n")},
            "header.in.xhtml": "<header>My Site</header>",
            "style.css": "body{}",
        },
    )
    site = make_tree(
        "site",
        {
            "style.css": "body{color:red}",
            "pages": {"a.xhtml": "<h1>Alpha</h1><p>a</p>", "b.xhtml": "<h1>Beta</h1><p>b</p>"},
            "nav.stratum.in.xhtml": NAV,
            "index.stratum1.xhtml": INDEX,
        },
    )
    return os.pathsep.join([str(site), str(theme)])


def test_full_site(website: str, tmp_path: Path, tree_contents, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    out = tmp_path / "public"

    assert main(["build", website, str(out)]) == 0

    assert tree_contents(out) == {
        "index.xhtml": "<header>My Site</header><ul><li>Alpha</li><li>Beta</li></ul><footer>DONE</footer>",
        "style.css": "body{color:red}",
        "pages/a.xhtml": "<h1>Alpha</h1><p>a</p>",
        "pages/b.xhtml": "<h1>Beta</h1><p>b</p>",
    }
    assert sorted(p.name for p in out.iterdir()) == ["bin", "index.xhtml", "lib", "pages", "style.css"]


def test_rebuild_is_clean(website: str, tmp_path: Path, tree_contents, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    out = tmp_path / "public"
    assert main(["build", website, str(out)]) == 0
    first = tree_contents(out)
    (out / "pages" / "stale.html").write_text("stale", encoding="utf-8")

    assert main(["build", website, str(out)]) == 0
    assert tree_contents(out) == first


def test_subtree_build(website: str, tmp_path: Path, tree_contents, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    out = tmp_path / "pages-only"

    assert main(["build", website, str(out), "--path", "pages"]) == 0
    assert tree_contents(out) == {"a.xhtml": "<h1>Alpha</h1><p>a</p>", "b.xhtml": "<h1>Beta</h1><p>b</p>"}
