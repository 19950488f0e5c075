"""
Stratum config command.

SUMMARY: Show current configuration

Displays the configuration merged from bundled defaults, the project's
stratum.yaml (or --config FILE) and STRATUM_* environment variables.
"""

from __future__ import annotations

import argparse

from stratum.cli._args import add_config_flag, add_debug_flag, add_json_flag
from stratum.cli._output import OutputFormatter
from stratum.cli._utils import load_config, run_command
from stratum.core.utils.io import dump_yaml

SUMMARY = "Show current configuration"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument(
        "key",
        nargs="?",
        help="Dot-separated key to show (e.g., 'engine.max_rounds')",
    )
    add_config_flag(parser)
    add_json_flag(parser)
    add_debug_flag(parser)


def _select(config, key):
    value = config
    for part in [p for p in str(key).split(".") if p]:
        if not isinstance(value, dict) or part not in value:
            raise KeyError(key)
        value = value[part]
    return value


def main(args: argparse.Namespace) -> int:
    """Show configuration."""

    def body(formatter: OutputFormatter) -> int:
        config = load_config(args)
        if args.key:
            try:
                value = _select(config, args.key)
            except KeyError:
                formatter.error(KeyError(args.key), f"no configuration key '{args.key}'")
                return 1
        else:
            value = config
        if formatter.json_mode:
            formatter.json_output(value)
        elif isinstance(value, (dict, list)):
            formatter.text(dump_yaml(value).rstrip("\n"))
        else:
            formatter.text(str(value))
        return 0

    return run_command(args, body)
