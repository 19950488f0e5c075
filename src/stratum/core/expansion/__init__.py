"""Template expansion: scheduling, output mapping and reporting."""

from .output import OutputWriter, map_output_path, relative_tree_path
from .report import ExpansionReport, NodeRecord, NodeState
from .scheduler import DEFAULT_MAX_ROUNDS, ExpansionScheduler

__all__ = [
    "OutputWriter",
    "map_output_path",
    "relative_tree_path",
    "ExpansionReport",
    "NodeRecord",
    "NodeState",
    "DEFAULT_MAX_ROUNDS",
    "ExpansionScheduler",
]
