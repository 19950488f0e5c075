"""Build a Document from an overlay of roots.

The walk is a single depth-first pass. Within each directory, directories
come before files and both are sorted byte-wise by name. This order is also
the order in which executables and query modules are registered, so a module
may rely on anything registered before it.

Classification of a leaf, first match wins:

1. executable        → EXECUTABLE, callable from queries, content not read
2. structured ext    → FILE with parsed XML fragment
3. module ext        → MODULE, loaded into the query evaluator
4. anything else     → FILE; text read only for templates
"""
from __future__ import annotations

import logging
import os
from dataclasses import replace
from pathlib import Path, PurePosixPath
from typing import Iterable, List, Optional, TYPE_CHECKING

from stratum.core.exceptions import NotFoundError, ParseError, StratumError
from stratum.core.overlay import DirectoryListing, EntryKind, OverlayResolver
from .fragments import parse_fragment
from .markers import FilenameMarkers
from .model import Document, Node, NodeKind, child_path

if TYPE_CHECKING:
    from stratum.core.functions.registry import FunctionRegistry
    from stratum.core.query.base import QueryEvaluator

logger = logging.getLogger(__name__)


def _is_executable(path: Path) -> bool:
    return os.access(path, os.X_OK)


def _sort_key(name: str) -> bytes:
    return os.fsencode(name)


def _read_text(path: Path, tree_path: str) -> str:
    """Read ``path`` as UTF-8.

    Raises:
        StratumError: If the file is not valid UTF-8.
    """
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise StratumError(
            f"cannot read '{tree_path}': not valid UTF-8 ({exc.reason} at byte {exc.start})",
            context={"path": tree_path},
        ) from exc


class TreeBuilder:
    """Project an overlay of roots into a Document.

    Side effects: executables are registered with ``registry``; query modules
    are loaded into ``evaluator``.
    """

    def __init__(
        self,
        resolver: OverlayResolver,
        registry: "FunctionRegistry",
        evaluator: "QueryEvaluator",
        *,
        markers: Optional[FilenameMarkers] = None,
        structured_extensions: Iterable[str] = (".xml", ".xhtml"),
        module_extensions: Iterable[str] = (".jinja",),
    ) -> None:
        self.resolver = resolver
        self.registry = registry
        self.evaluator = evaluator
        self.markers = markers or FilenameMarkers()
        self.structured_extensions = frozenset(structured_extensions)
        self.module_extensions = frozenset(module_extensions)

    def build(self, document: Optional[Document] = None, root: str = "") -> Document:
        """Walk ``root`` and add every node to ``document``.

        Raises:
            NotFoundError: If ``root`` is absent from all roots.
            InvalidObjectError: If an entry is neither file nor directory.
            ParseError: If a structured file is not UTF-8 or not well-formed.
            ModuleError: If a query module cannot be loaded.
            StratumError: If a template or module is not valid UTF-8.
        """
        document = document if document is not None else Document()
        self._build_path(document, root)
        logger.debug("built document with %d node(s)", len(document))
        return document

    def _build_path(self, document: Document, tree_path: str) -> None:
        logger.debug("considering '%s'", tree_path)
        found = self.resolver.resolve(tree_path)
        if found is None:
            raise NotFoundError(
                f"no such file or directory '{tree_path or os.pathsep.join(map(str, self.resolver.roots))}'",
                context={"path": tree_path},
            )
        name = PurePosixPath(tree_path).name
        if isinstance(found, DirectoryListing):
            self._build_directory(document, tree_path, name, found)
        else:
            document.add(self._build_leaf(tree_path, name, found.path))

    def _build_directory(
        self,
        document: Document,
        tree_path: str,
        name: str,
        listing: DirectoryListing,
    ) -> None:
        dirs = sorted(
            (e.name for e in listing.entries if e.kind is EntryKind.DIRECTORY),
            key=_sort_key,
        )
        files = sorted(
            (e.name for e in listing.entries if e.kind is EntryKind.FILE),
            key=_sort_key,
        )
        children: List[str] = [n for n in dirs + files if not n.startswith(".")]
        document.add(
            Node(
                path=tree_path,
                name=name,
                kind=NodeKind.DIRECTORY,
                children=tuple(children),
                template=self.markers.template(name),
                no_copy=self.markers.is_no_copy(name),
            )
        )
        for child in children:
            self._build_path(document, child_path(tree_path, child))

    def _build_leaf(self, tree_path: str, name: str, source: Path) -> Node:
        # A single-file root has no tree name of its own; classify by its filename.
        filename = name or source.name
        template = self.markers.template(filename)
        no_copy = self.markers.is_no_copy(filename)
        ext = PurePosixPath(filename).suffix
        base = Node(
            path=tree_path,
            name=name,
            kind=NodeKind.FILE,
            source=source,
            template=template,
            no_copy=no_copy,
        )

        if _is_executable(source):
            local_name = self.markers.function_name(filename)
            logger.debug("registering executable '%s' as %s", tree_path, local_name)
            self.registry.register_executable(local_name, source.resolve(), origin=tree_path)
            return replace(base, kind=NodeKind.EXECUTABLE)

        if ext in self.structured_extensions:
            logger.debug("reading '%s' as XML", tree_path)
            try:
                text = source.read_text(encoding="utf-8")
            except UnicodeDecodeError as exc:
                raise ParseError(tree_path, exc) from exc
            return base.with_content(text, parse_fragment(text, tree_path))

        if ext in self.module_extensions:
            logger.debug("loading '%s' as a query module", tree_path)
            namespace = self.evaluator.register_module(
                _read_text(source, tree_path), origin=tree_path
            )
            logger.debug("module '%s' declares namespace %s", tree_path, namespace)
            return replace(base, kind=NodeKind.MODULE, text="")

        if template is not None:
            return base.with_content(_read_text(source, tree_path))
        return base


__all__ = ["TreeBuilder"]
