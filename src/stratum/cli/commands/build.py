"""
Stratum build command.

SUMMARY: Expand the templates of a source tree into an output directory

Merges the directories of INPUT-PATH, expands every template below --path,
and writes the result to OUTPUT-DIRECTORY, which is emptied first.
"""

from __future__ import annotations

import argparse
import logging
from typing import Any, Dict

from stratum.cli._args import add_config_flag, add_debug_flag, add_input_args, add_json_flag
from stratum.cli._output import OutputFormatter
from stratum.cli._utils import engine_config, load_config, run_command
from stratum.core.engine import Engine, parse_input_path
from stratum.core.exceptions import ExpansionFailedError

SUMMARY = "Expand the templates of a source tree into an output directory"

logger = logging.getLogger(__name__)


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    add_input_args(parser)
    parser.add_argument(
        "output_dir",
        metavar="OUTPUT-DIRECTORY",
        help="Directory to write the expanded tree to",
    )
    parser.add_argument(
        "--keep-going",
        action="store_true",
        help="Expand every template even after an error, then report all errors",
    )
    parser.add_argument(
        "--max-rounds",
        type=int,
        metavar="N",
        help="Evaluation rounds before a template counts as non-terminating",
    )
    add_config_flag(parser)
    add_json_flag(parser)
    add_debug_flag(parser)


def _overrides(args: argparse.Namespace) -> Dict[str, Any]:
    engine: Dict[str, Any] = {}
    if args.keep_going:
        engine["tolerant"] = True
    if args.max_rounds is not None:
        engine["max_rounds"] = args.max_rounds
    return {"engine": engine} if engine else {}


def main(args: argparse.Namespace) -> int:
    """Build the Document and expand it."""

    def body(formatter: OutputFormatter) -> int:
        config = load_config(args, _overrides(args))
        roots = parse_input_path(args.input_path)
        engine = Engine(roots, engine_config(args, config))
        try:
            report = engine.expand(args.output_dir, args.path)
        except ExpansionFailedError as exc:
            if formatter.json_mode and exc.report is not None:
                formatter.error(exc)
                formatter.json_output(exc.report.to_dict())
                return 1
            raise
        logger.info("%s", report.summary())
        formatter.success(report.to_dict(), "")
        return 0

    return run_command(args, body)
