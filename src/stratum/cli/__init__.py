"""
Stratum CLI package.

Commands live in cli/commands/ and are discovered automatically.

Framework utilities for building CLI commands:
- _output: Output formatting (JSON/text modes)
- _args: Common argument registration helpers
- _utils: Shared CLI utilities
"""
from ._output import OutputFormatter, format_json
from ._args import add_config_flag, add_debug_flag, add_input_args, add_json_flag
from ._utils import engine_config, load_config, run_command

__all__ = [
    "OutputFormatter",
    "format_json",
    "add_config_flag",
    "add_debug_flag",
    "add_input_args",
    "add_json_flag",
    "engine_config",
    "load_config",
    "run_command",
]
