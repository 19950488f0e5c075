from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from conftest import Executable
from stratum.cli._dispatcher import build_parser, discover_root_commands, main


def test_commands_are_discovered() -> None:
    assert set(discover_root_commands()) == {"build", "config", "tree"}


def test_version(capsys) -> None:
    with pytest.raises(SystemExit) as info:
        build_parser().parse_args(["--version"])
    assert info.value.code == 0
    assert "stratum 1.0.0" in capsys.readouterr().out


def test_no_command_prints_help(capsys) -> None:
    assert main([]) == 0
    assert "build" in capsys.readouterr().out


def test_build(make_tree, tmp_path: Path, tree_contents, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    high = make_tree("high", {"index.stratum.txt": "{{ tree['name.txt'] }}!"})
    low = make_tree("low", {"name.txt": "stratum", "index.stratum.txt": "shadowed"})
    out = tmp_path / "out"

    code = main(["build", os.pathsep.join([str(high), str(low)]), str(out)])

    assert code == 0
    assert tree_contents(out) == {"index.txt": "stratum!", "name.txt": "stratum"}


def test_build_path_option(make_tree, tmp_path: Path, tree_contents, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    root = make_tree("site", {"a": {"x.txt": "x"}, "b": {"y.txt": "y"}})
    assert main(["build", str(root), str(tmp_path / "out"), "--path", "b"]) == 0
    assert tree_contents(tmp_path / "out") == {"y.txt": "y"}


def test_ext_option(make_tree, tmp_path: Path, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    root = make_tree("site", {"feed.rss": "<item>"})
    assert main(["build", str(root), str(tmp_path / "out")]) == 0
    assert main(["build", str(root), str(tmp_path / "out2"), "--ext", ".rss"]) == 1
    assert "error parsing 'feed.rss'" in capsys.readouterr().err


def test_non_utf8_source_is_reported(make_tree, tmp_path: Path, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    root = make_tree("site", {"bad.xml": b"<p>\xff\xfe</p>"})

    assert main(["build", str(root), str(tmp_path / "out")]) == 1
    assert capsys.readouterr().err.startswith("stratum: error parsing 'bad.xml'")


def test_empty_input_path(tmp_path: Path, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    assert main(["build", "", str(tmp_path / "out")]) == 1
    assert capsys.readouterr().err.strip() == "stratum: input path must not be empty"


def test_error_exit_status_and_message(make_tree, tmp_path: Path, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    root = make_tree("site", {"a.stratum.txt": "{{ undefined_thing }}"})

    assert main(["build", str(root), str(tmp_path / "out")]) == 1
    err = capsys.readouterr().err
    assert "stratum: error expanding 'a.stratum.txt'" in err


def test_debug_reraises(make_tree, tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    root = make_tree("site", {"a.stratum.txt": "{{ undefined_thing }}"})
    from stratum.core.exceptions import EvaluationError

    with pytest.raises(EvaluationError):
        main(["build", str(root), str(tmp_path / "out"), "--debug"])


def test_keep_going_json(make_tree, tmp_path: Path, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    root = make_tree("site", {"a.stratum.txt": "{{ nope }}", "b.stratum.txt": "fine"})

    code = main(["build", str(root), str(tmp_path / "out"), "--keep-going", "--json"])

    captured = capsys.readouterr()
    assert code == 1
    report = json.loads(captured.out)
    states = {n["path"]: n["state"] for n in report["nodes"]}
    assert states == {"a.stratum.txt": "failed", "b.stratum.txt": "written"}
    assert (tmp_path / "out" / "b.txt").read_text() == "fine"


def test_max_rounds_option(make_tree, tmp_path: Path, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    # Each round prepends another x to the template itself.
    root = make_tree("site", {"grow.stratum.txt": "x{{ node.text }}"})

    assert main(["build", str(root), str(tmp_path / "out"), "--max-rounds", "3"]) == 1
    assert "did not converge after 3 rounds" in capsys.readouterr().err


def test_tree_command(make_tree, tmp_path: Path, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    root = make_tree("site", {"pages": {"index.stratum2.xhtml": "<p/>"}, "head.in.html": "h"})

    assert main(["tree", str(root)]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "/ (directory)"
    assert "  pages (directory)" in lines
    assert "    index.stratum2.xhtml (file) [template:2, xml]" in lines
    assert "  head.in.html (file) [no-copy]" in lines


def test_tree_command_json(make_tree, tmp_path: Path, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    root = make_tree("site", {"a.txt": "a"})

    assert main(["tree", str(root), "--json"]) == 0
    nodes = json.loads(capsys.readouterr().out)["nodes"]
    assert [n["path"] for n in nodes] == ["", "a.txt"]


@pytest.mark.skipif(os.name != "posix", reason="needs POSIX executables")
def test_tree_shows_executables(make_tree, tmp_path: Path, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    root = make_tree("site", {"now": Executable("#!/bin/sh\ndate\n")})
    assert main(["tree", str(root)]) == 0
    assert "  now (executable)" in capsys.readouterr().out


def test_config_command(tmp_path: Path, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "stratum.yaml").write_text("engine:\n  max_rounds: 3\n", encoding="utf-8")

    assert main(["config", "engine.max_rounds"]) == 0
    assert capsys.readouterr().out.strip() == "3"

    assert main(["config", "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["engine"]["template_marker"] == "stratum"

    assert main(["config", "engine.nope"]) == 1
    assert "no configuration key 'engine.nope'" in capsys.readouterr().err


def test_invalid_config_is_reported(tmp_path: Path, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("STRATUM_ENGINE__MAX_ROUNDS", "0")

    assert main(["config"]) == 1
    assert "stratum: invalid configuration" in capsys.readouterr().err
