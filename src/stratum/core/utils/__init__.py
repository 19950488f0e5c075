"""Shared utilities."""

from .io import dump_yaml, read_yaml
from .merge import deep_merge
from .subprocess import run_captured, strip_final_newline

__all__ = ["dump_yaml", "read_yaml", "deep_merge", "run_captured", "strip_final_newline"]
