"""Shared CLI utility functions."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from stratum.core.config import ConfigManager, EngineConfig, LoggingConfig
from stratum.core.exceptions import StratumError
from stratum.core.logging import configure_logging
from ._output import OutputFormatter


def load_config(args: argparse.Namespace, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Merged configuration for this invocation; logging is set up from it."""
    config_file = getattr(args, "config", None)
    manager = ConfigManager(config_file=Path(config_file) if config_file else None)
    config = manager.load(overrides)
    log_cfg = LoggingConfig.from_dict(config.get("logging"))
    level = "DEBUG" if getattr(args, "debug", False) else log_cfg.level
    configure_logging(level, log_cfg.file)
    return config


def engine_config(args: argparse.Namespace, config: Dict[str, Any]) -> EngineConfig:
    """EngineConfig from ``config`` with the command line's ``--ext`` applied."""
    cfg = EngineConfig.from_dict(config.get("engine"))
    extra = getattr(args, "ext", None) or []
    return cfg.with_extra_structured(extra) if extra else cfg


def run_command(
    args: argparse.Namespace,
    body: Callable[[OutputFormatter], int],
) -> int:
    """Run ``body``, reporting Stratum errors and returning exit status 1.

    With ``--debug`` the exception propagates so its traceback is shown.
    """
    formatter = OutputFormatter(json_mode=bool(getattr(args, "json", False)))
    try:
        return body(formatter)
    except (StratumError, OSError) as exc:
        if getattr(args, "debug", False):
            raise
        formatter.error(exc)
        return 1


__all__ = ["load_config", "engine_config", "run_command"]
