"""Expansion scheduling.

The subtree at the build path is walked breadth-first before anything is
expanded. Directories have their output directory reset as soon as they are
reached; leaves are queued in the bucket given by their template numeral
(0 when absent). Buckets are then processed in ascending order, so a template
in bucket N sees every template of lower buckets fully expanded, and
templates of the same bucket are processed in walk order.

A template is evaluated repeatedly, each result replacing the node in the
Document, until its text stops changing or the round cap is reached.
"""
from __future__ import annotations

import logging
from collections import deque
from pathlib import Path
from typing import Deque, Dict, List, Optional, Union

from stratum.core.exceptions import (
    EvaluationError,
    ExpansionFailedError,
    NonTerminationError,
    ParseError,
    StratumError,
)
from stratum.core.query.base import QueryEvaluator
from stratum.core.tree.fragments import parse_fragment
from stratum.core.tree.markers import FilenameMarkers
from stratum.core.tree.model import Document, Node, child_path, normalize_tree_path
from .output import OutputWriter, map_output_path
from .report import ExpansionReport, NodeRecord, NodeState

logger = logging.getLogger(__name__)

DEFAULT_MAX_ROUNDS = 8


class ExpansionScheduler:
    """Expand the templates of a Document and write the result."""

    def __init__(
        self,
        document: Document,
        evaluator: QueryEvaluator,
        *,
        writer: Optional[OutputWriter] = None,
        markers: Optional[FilenameMarkers] = None,
        max_rounds: int = DEFAULT_MAX_ROUNDS,
        tolerant: bool = False,
    ) -> None:
        if max_rounds < 1:
            raise ValueError("max_rounds must be at least 1")
        self.document = document
        self.evaluator = evaluator
        self.writer = writer or OutputWriter()
        self.markers = markers or FilenameMarkers()
        self.max_rounds = max_rounds
        self.tolerant = tolerant

    def expand(self, output_dir: Union[str, Path], build_path: str = "") -> ExpansionReport:
        """Expand the subtree at ``build_path`` into ``output_dir``.

        Raises:
            NotFoundError: If ``build_path`` is not in the Document.
            EvaluationError: On the first failing template (default mode).
            NonTerminationError: If a template does not converge (default mode).
            ExpansionFailedError: At the end of a tolerant run with failures.
        """
        build_path = normalize_tree_path(build_path)
        output_dir = Path(output_dir)
        start = self.document.get(build_path)
        report = ExpansionReport(build_path=build_path, output_dir=output_dir)

        queue = self._schedule(start, build_path, output_dir, report)
        logger.debug("queued %d node(s) for expansion", len(queue))

        for node in queue:
            record = report.add(node.path, node.bucket)
            try:
                self._process(node, record, build_path, output_dir)
            except StratumError as exc:
                record.error = str(exc)
                report.add_error(str(exc))
                if not self.tolerant:
                    raise
                logger.error("%s", exc)

        if report.has_errors:
            raise ExpansionFailedError(report.errors, report=report)
        return report

    def _schedule(
        self,
        start: Node,
        build_path: str,
        output_dir: Path,
        report: ExpansionReport,
    ) -> List[Node]:
        buckets: Dict[int, List[Node]] = {}
        pending: Deque[Node] = deque([start])
        while pending:
            node = pending.popleft()
            if node.is_directory:
                target = map_output_path(
                    node.path, build_path, output_dir, strip_template=False
                )
                self.writer.reset_directory(target)
                report.directories.append(node.path)
                pending.extend(
                    self.document.get(child_path(node.path, name)) for name in node.children
                )
            else:
                logger.debug("adding '%s' to bucket %d", node.path, node.bucket)
                buckets.setdefault(node.bucket, []).append(node)
        return [node for bucket in sorted(buckets) for node in buckets[bucket]]

    def _process(self, node: Node, record: NodeRecord, build_path: str, output_dir: Path) -> None:
        # Take the current value: a lower bucket may have replaced it.
        node = self.document.get(node.path)
        output = map_output_path(node.path, build_path, output_dir, markers=self.markers)

        if node.is_template:
            record.advance(NodeState.EVALUATING)
            try:
                node = self._fixpoint(node, record)
            except NonTerminationError:
                record.advance(NodeState.NON_TERMINATED)
                raise
            except StratumError:
                record.advance(NodeState.FAILED)
                raise
            record.advance(NodeState.CONVERGED)
            if node.no_copy:
                record.advance(NodeState.SKIPPED)
                return
            self._write(record, output, node.serialized())
            return

        if node.no_copy or node.source is None:
            record.advance(NodeState.SKIPPED)
            return
        try:
            self.writer.copy_file(node.source, output)
        except OSError as exc:
            record.advance(NodeState.FAILED)
            raise StratumError(
                f"error copying '{node.path}': {exc.strerror or exc}",
                context={"path": node.path},
            ) from exc
        record.output = output
        record.advance(NodeState.COPIED)

    def _write(self, record: NodeRecord, output: Path, text: str) -> None:
        try:
            self.writer.write_text(output, text)
        except OSError as exc:
            record.advance(NodeState.FAILED)
            raise StratumError(
                f"error writing '{output}': {exc.strerror or exc}",
                context={"path": record.path},
            ) from exc
        record.output = output
        record.advance(NodeState.WRITTEN)

    def _fixpoint(self, node: Node, record: NodeRecord) -> Node:
        variables = {"path": node.dirname}
        current = self.evaluator.serialize(node)
        for round_no in range(1, self.max_rounds + 1):
            record.rounds = round_no
            logger.debug("expanding '%s', round %d", node.path, round_no)
            result = self.evaluator.evaluate(current, node, variables)
            if result == current:
                logger.debug("'%s' converged after %d round(s)", node.path, round_no)
                return node
            fragment = None
            if node.is_structured:
                try:
                    fragment = parse_fragment(result, node.path)
                except ParseError as exc:
                    raise EvaluationError(node.path, exc) from exc
            node = node.with_content(result, fragment)
            self.document.replace(node)
            current = result
        raise NonTerminationError(node.path, self.max_rounds)


__all__ = ["DEFAULT_MAX_ROUNDS", "ExpansionScheduler"]
