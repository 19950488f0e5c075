"""Query evaluator interface.

The scheduler only ever talks to a QueryEvaluator: it hands over the current
serialized form of a template node and stores whatever text comes back. The
builder hands query modules to the same object while the Document is built.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping

from stratum.core.tree.model import Node


class QueryEvaluator(ABC):
    """Evaluate template text against the Document."""

    @abstractmethod
    def evaluate(self, query: str, node: Node, variables: Mapping[str, Any]) -> str:
        """Evaluate ``query`` with ``node`` as the context item.

        ``variables`` always contains ``path``, the tree path of the directory
        holding ``node``.

        Raises:
            EvaluationError: If evaluation fails.
        """

    @abstractmethod
    def register_module(self, source: str, origin: str) -> str:
        """Load a query module and return the namespace it declares.

        Raises:
            ModuleError: If the module is malformed or its namespace is taken.
        """

    def serialize(self, node: Node) -> str:
        """Current text of ``node`` as fed back into evaluation."""
        return node.serialized()


__all__ = ["QueryEvaluator"]
