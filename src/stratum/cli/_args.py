"""Common CLI argument registration helpers."""
from __future__ import annotations

import argparse
import os


def add_json_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )


def add_config_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        metavar="FILE",
        help="Configuration file (default: ./stratum.yaml when present)",
    )


def add_debug_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log every decision and show tracebacks on error",
    )


def add_input_args(parser: argparse.ArgumentParser) -> None:
    """Positional INPUT-PATH plus the options that shape the Document."""
    parser.add_argument(
        "input_path",
        metavar="INPUT-PATH",
        help=(
            f"'{os.pathsep}'-separated list of directories to merge, "
            "highest priority first"
        ),
    )
    parser.add_argument(
        "--path",
        default="",
        help="Relative path of the subtree to process (default: whole tree)",
    )
    parser.add_argument(
        "--ext",
        action="append",
        default=[],
        metavar=".EXT",
        help="Additional extension to parse as XML (repeatable)",
    )


__all__ = ["add_json_flag", "add_config_flag", "add_debug_flag", "add_input_args"]
