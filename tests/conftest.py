import os
import stat
import sys
from pathlib import Path
from typing import Any, Dict, Union

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'stratum'
for p in (SRC_ROOT, TESTS_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))

from stratum.core.logging import reset_logging_for_tests  # noqa: E402


class Executable:
    """A file written with the executable bit set."""

    def __init__(self, script: str) -> None:
        self.script = script


TreeLayout = Dict[str, Union[str, bytes, "Executable", Dict[str, Any], None]]


def write_tree(base: Path, layout: TreeLayout) -> Path:
    """Materialize ``layout`` under ``base``.

    Values: str/bytes -> file content, dict -> subdirectory, None -> empty
    directory, Executable -> executable script.
    """
    base.mkdir(parents=True, exist_ok=True)
    for name, value in layout.items():
        target = base / name
        if isinstance(value, dict):
            write_tree(target, value)
        elif value is None:
            target.mkdir(parents=True, exist_ok=True)
        elif isinstance(value, Executable):
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(value.script, encoding="utf-8")
            target.chmod(target.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        elif isinstance(value, bytes):
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(value)
        else:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(value, encoding="utf-8")
    return base


@pytest.fixture
def make_tree(tmp_path: Path):
    """Build a directory tree under tmp_path: make_tree("name", {...})."""

    def _make(name: str, layout: TreeLayout) -> Path:
        return write_tree(tmp_path / name, layout)

    return _make


def read_tree(base: Path) -> Dict[str, str]:
    """Map every file below ``base`` (relative POSIX path) to its text."""
    out: Dict[str, str] = {}
    for path in sorted(base.rglob("*")):
        if path.is_file():
            out[path.relative_to(base).as_posix()] = path.read_text(encoding="utf-8")
    return out


@pytest.fixture
def tree_contents():
    return read_tree


@pytest.fixture(autouse=True)
def _isolate_stratum(monkeypatch, tmp_path):
    """No STRATUM_* variables or handlers leak between tests."""
    for key in list(os.environ):
        if key.startswith("STRATUM_"):
            monkeypatch.delenv(key, raising=False)
    yield
    reset_logging_for_tests()
