from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from stratum.core.expansion.report import ExpansionReport


class StratumError(Exception):
    """Base exception for Stratum."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


class ConfigError(StratumError, ValueError):
    """Raised when configuration cannot be loaded or fails validation."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        StratumError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class NotFoundError(StratumError, FileNotFoundError):
    """Raised when a tree path is absent from every root."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        StratumError.__init__(self, message, context=context)
        FileNotFoundError.__init__(self, message)


class InvalidObjectError(StratumError):
    """Raised when a path resolves to something that is not a file or directory."""

    def __init__(self, path: str) -> None:
        super().__init__(f"'{path}' is not a file or directory", context={"path": path})
        self.path = path


class ParseError(StratumError):
    """Raised when a structured file cannot be parsed."""

    def __init__(self, path: str, cause: BaseException | str) -> None:
        super().__init__(f"error parsing '{path}': {cause}", context={"path": path})
        self.path = path
        self.cause = cause


class ModuleError(StratumError):
    """Raised when a query module is missing or has a malformed declaration."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"error loading module '{path}': {reason}", context={"path": path})
        self.path = path
        self.reason = reason


class EvaluationError(StratumError):
    """Raised when evaluating a query or running an external function fails."""

    def __init__(self, path: str, cause: BaseException | str) -> None:
        super().__init__(f"error expanding '{path}': {cause}", context={"path": path})
        self.path = path
        self.cause = cause


class FunctionError(StratumError):
    """Raised when an external function is unknown, cannot start, or exits non-zero."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"function '{name}' failed: {reason}", context={"function": name})
        self.name = name
        self.reason = reason


class NonTerminationError(StratumError):
    """Raised when a template keeps changing after the round cap."""

    def __init__(self, path: str, cap: int) -> None:
        super().__init__(
            f"expansion of '{path}' did not converge after {cap} rounds",
            context={"path": path, "cap": cap},
        )
        self.path = path
        self.cap = cap


class ExpansionFailedError(StratumError):
    """Aggregate failure raised at the end of a tolerant expansion."""

    def __init__(
        self,
        errors: List[str],
        *,
        report: Optional["ExpansionReport"] = None,
    ) -> None:
        super().__init__(
            "there were errors during expansion",
            context={"errors": list(errors)},
        )
        self.errors = list(errors)
        self.report = report


__all__ = [
    "StratumError",
    "ConfigError",
    "NotFoundError",
    "InvalidObjectError",
    "ParseError",
    "ModuleError",
    "EvaluationError",
    "FunctionError",
    "NonTerminationError",
    "ExpansionFailedError",
]
