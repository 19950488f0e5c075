"""
Stratum tree command.

SUMMARY: Show the merged source tree

Builds the Document for INPUT-PATH without expanding anything and lists
every node with its kind and filename markers.
"""

from __future__ import annotations

import argparse

from stratum.cli._args import add_config_flag, add_debug_flag, add_input_args, add_json_flag
from stratum.cli._output import OutputFormatter
from stratum.cli._utils import engine_config, load_config, run_command
from stratum.core.engine import Engine, parse_input_path
from stratum.core.tree.model import normalize_tree_path

SUMMARY = "Show the merged source tree"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    add_input_args(parser)
    add_config_flag(parser)
    add_json_flag(parser)
    add_debug_flag(parser)


def _format_row(row) -> str:
    depth = row["path"].count("/") + 1 if row["path"] else 0
    name = row["path"].rsplit("/", 1)[-1] if row["path"] else "/"
    flags = []
    if row["template"]:
        flags.append(f"template:{row['bucket']}")
    if row["no_copy"]:
        flags.append("no-copy")
    if row["structured"]:
        flags.append("xml")
    suffix = f" [{', '.join(flags)}]" if flags else ""
    return f"{'  ' * depth}{name} ({row['kind']}){suffix}"


def main(args: argparse.Namespace) -> int:
    """Print the Document outline."""

    def body(formatter: OutputFormatter) -> int:
        config = load_config(args)
        engine = Engine(parse_input_path(args.input_path), engine_config(args, config))
        rows = engine.outline(normalize_tree_path(args.path))
        if formatter.json_mode:
            formatter.json_output({"nodes": rows})
        else:
            for row in rows:
                formatter.text(_format_row(row))
        return 0

    return run_command(args, body)
