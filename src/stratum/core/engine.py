"""Stratum engine.

Builds the Document for an ordered list of roots, then expands it:

    engine = Engine(parse_input_path("site:theme"))
    engine.expand("public", build_path="pages")

Building happens in the constructor. Executables and query modules found in
the roots are registered while the Document is built, so by the time
``expand`` runs every function and module is available to every template.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from stratum.core.config.domains import EngineConfig
from stratum.core.exceptions import StratumError
from stratum.core.expansion import ExpansionReport, ExpansionScheduler, OutputWriter
from stratum.core.functions import FunctionRegistry
from stratum.core.overlay import OverlayResolver
from stratum.core.query import JinjaQueryEvaluator, QueryEvaluator
from stratum.core.tree import Document, FilenameMarkers, TreeBuilder

logger = logging.getLogger(__name__)

EvaluatorFactory = Callable[[Document, FunctionRegistry], QueryEvaluator]


def parse_input_path(value: str) -> List[Path]:
    """Split an ``os.pathsep``-separated list of roots, highest priority first.

    Raises:
        StratumError: If no root is given.
    """
    roots = [Path(p) for p in value.split(os.pathsep) if p] if value else []
    if not roots:
        raise StratumError("input path must not be empty")
    return roots


class Engine:
    """One build: a Document, its function registry and its evaluator."""

    def __init__(
        self,
        roots: Sequence[Union[str, Path]],
        config: Optional[EngineConfig] = None,
        *,
        evaluator_factory: Optional[EvaluatorFactory] = None,
    ) -> None:
        if not roots:
            raise StratumError("input path must not be empty")
        self.config = config or EngineConfig()
        self.roots = [Path(r) for r in roots]
        self.markers = FilenameMarkers(self.config.template_marker, self.config.no_copy_marker)
        self.resolver = OverlayResolver(self.roots)
        self.registry = FunctionRegistry(self.config.function_namespace)
        self.document = Document()
        factory = evaluator_factory or JinjaQueryEvaluator
        self.evaluator = factory(self.document, self.registry)

        logger.debug("building document from %s", os.pathsep.join(map(str, self.roots)))
        TreeBuilder(
            self.resolver,
            self.registry,
            self.evaluator,
            markers=self.markers,
            structured_extensions=self.config.structured_extensions,
            module_extensions=self.config.module_extensions,
        ).build(self.document)

    def scheduler(self) -> ExpansionScheduler:
        return ExpansionScheduler(
            self.document,
            self.evaluator,
            writer=OutputWriter(protected=self.roots),
            markers=self.markers,
            max_rounds=self.config.max_rounds,
            tolerant=self.config.tolerant,
        )

    def expand(self, output_dir: Union[str, Path], build_path: str = "") -> ExpansionReport:
        """Expand the subtree at ``build_path`` into ``output_dir``."""
        return self.scheduler().expand(output_dir, build_path)

    def outline(self, path: str = "") -> List[Dict[str, Any]]:
        """Flat description of the Document below ``path``, in build order."""
        rows: List[Dict[str, Any]] = []
        for node in self.document.walk(path):
            rows.append(
                {
                    "path": node.path,
                    "kind": node.kind.value,
                    "template": node.is_template,
                    "bucket": node.bucket,
                    "no_copy": node.no_copy,
                    "structured": node.is_structured,
                    "source": str(node.source) if node.source else None,
                }
            )
        return rows


__all__ = ["Engine", "EvaluatorFactory", "parse_input_path"]
