"""Expansion reporting.

Each queued node moves through:

    PENDING -> EVALUATING -> CONVERGED | FAILED | NON_TERMINATED
    CONVERGED -> WRITTEN | SKIPPED

Plain files are recorded directly as COPIED, or SKIPPED when marked no-copy.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional


class NodeState(str, Enum):
    PENDING = "pending"
    EVALUATING = "evaluating"
    CONVERGED = "converged"
    FAILED = "failed"
    NON_TERMINATED = "non_terminated"
    WRITTEN = "written"
    SKIPPED = "skipped"
    COPIED = "copied"


_TRANSITIONS = {
    NodeState.PENDING: {NodeState.EVALUATING, NodeState.COPIED, NodeState.SKIPPED, NodeState.FAILED},
    NodeState.EVALUATING: {NodeState.CONVERGED, NodeState.FAILED, NodeState.NON_TERMINATED},
    NodeState.CONVERGED: {NodeState.WRITTEN, NodeState.SKIPPED, NodeState.FAILED},
}


@dataclass
class NodeRecord:
    """What happened to one queued node."""

    path: str
    bucket: int = 0
    state: NodeState = NodeState.PENDING
    rounds: int = 0
    output: Optional[Path] = None
    error: Optional[str] = None

    def advance(self, state: NodeState) -> None:
        allowed = _TRANSITIONS.get(self.state, set())
        if state not in allowed:
            raise ValueError(f"'{self.path}': cannot go from {self.state.value} to {state.value}")
        self.state = state

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "bucket": self.bucket,
            "state": self.state.value,
            "rounds": self.rounds,
            "output": str(self.output) if self.output else None,
            "error": self.error,
        }


@dataclass
class ExpansionReport:
    """Report of one expansion run, in processing order."""

    build_path: str
    output_dir: Path
    timestamp: datetime = field(default_factory=datetime.now)
    records: Dict[str, NodeRecord] = field(default_factory=dict)
    directories: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def add(self, path: str, bucket: int = 0) -> NodeRecord:
        record = NodeRecord(path=path, bucket=bucket)
        self.records[path] = record
        return record

    def __getitem__(self, path: str) -> NodeRecord:
        return self.records[path]

    def state(self, path: str) -> NodeState:
        return self.records[path].state

    @property
    def order(self) -> List[str]:
        """Tree paths in the order they were processed."""
        return list(self.records)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def count(self, state: NodeState) -> int:
        return sum(1 for r in self.records.values() if r.state is state)

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "build_path": self.build_path,
            "output_dir": str(self.output_dir),
            "timestamp": self.timestamp.isoformat(),
            "directories": list(self.directories),
            "nodes": [r.to_dict() for r in self.records.values()],
            "errors": list(self.errors),
        }

    def summary(self) -> str:
        """Human-readable summary."""
        lines = [
            f"Expanded '{self.build_path or '/'}' into {self.output_dir}",
            f"  Directories: {len(self.directories)}",
            f"  Written: {self.count(NodeState.WRITTEN)}",
            f"  Copied: {self.count(NodeState.COPIED)}",
            f"  Skipped: {self.count(NodeState.SKIPPED)}",
        ]
        if self.errors:
            lines.append(f"  Errors: {len(self.errors)}")
            for e in self.errors[:3]:
                lines.append(f"    - {e}")
        return "\n".join(lines)


__all__ = ["NodeState", "NodeRecord", "ExpansionReport"]
