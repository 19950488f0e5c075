"""CLI output formatting, in JSON or text mode."""
from __future__ import annotations

import json
import sys
from typing import Any, Dict, Optional

from stratum.core.exceptions import StratumError

PROG = "stratum"


class OutputFormatter:
    """Output formatter shared by all commands."""

    def __init__(self, json_mode: bool = False, indent: int = 2):
        self.json_mode = json_mode
        self.indent = indent

    def success(self, data: Dict[str, Any], message: str, *, status: str = "success") -> None:
        if self.json_mode:
            output = {"status": status, **data}
            print(json.dumps(output, indent=self.indent, default=str))
        elif message:
            print(message)

    def error(self, error: Exception, message: Optional[str] = None) -> None:
        """Report ``error`` on stderr as ``stratum: <message>`` or a JSON payload."""
        msg = message or str(error)
        if self.json_mode:
            if isinstance(error, StratumError):
                payload = error.to_json_error()
                payload["message"] = msg
            else:
                payload = {"message": msg, "code": error.__class__.__name__, "context": {}}
            print(json.dumps({"status": "error", "error": payload}, indent=self.indent, default=str), file=sys.stderr)
        else:
            print(f"{PROG}: {msg}", file=sys.stderr)

    def json_output(self, data: Any) -> None:
        print(json.dumps(data, indent=self.indent, default=str))

    def text(self, message: str) -> None:
        print(message)


def format_json(data: Any, indent: int = 2) -> str:
    return json.dumps(data, indent=indent, default=str)


__all__ = ["OutputFormatter", "format_json", "PROG"]
