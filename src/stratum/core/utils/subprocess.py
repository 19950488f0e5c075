"""Subprocess helpers.

Commands are always given as argument lists and never go through a shell.
"""
from __future__ import annotations

import logging
import shlex
import subprocess
from pathlib import Path
from time import perf_counter
from typing import Any, Optional, Sequence, Union

logger = logging.getLogger(__name__)


def _flatten_cmd(cmd: Any) -> Sequence[str]:
    if isinstance(cmd, (list, tuple)):
        return [str(p) for p in cmd]
    return shlex.split(str(cmd))


def run_captured(
    cmd: Union[Sequence[Any], str],
    *,
    stdin: Optional[str] = None,
    cwd: Optional[Path] = None,
) -> subprocess.CompletedProcess:
    """Run ``cmd`` to completion and capture its output as text.

    Args:
        cmd: Program followed by its arguments.
        stdin: Text fed to the process on standard input. When None the
            process inherits no input.
        cwd: Working directory for the process.

    Returns:
        The CompletedProcess; the exit status is not checked.

    Raises:
        OSError: If the program cannot be started.
    """
    argv = _flatten_cmd(cmd)
    start = perf_counter()
    result = subprocess.run(
        argv,
        input=stdin,
        stdin=subprocess.DEVNULL if stdin is None else None,
        capture_output=True,
        text=True,
        encoding="utf-8",
        cwd=str(cwd) if cwd is not None else None,
    )
    logger.debug(
        "ran %s in %.1fms (exit %d)",
        argv[0] if argv else "",
        (perf_counter() - start) * 1000.0,
        result.returncode,
    )
    return result


def strip_final_newline(text: str) -> str:
    """Drop one trailing newline (``\\n`` or ``\\r\\n``) if present."""
    if text.endswith("\r\n"):
        return text[:-2]
    if text.endswith("\n"):
        return text[:-1]
    return text


__all__ = ["run_captured", "strip_final_newline"]
