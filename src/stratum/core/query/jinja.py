"""Jinja2 query evaluator.

Templates are rendered by Jinja2 with these names in scope:

    tree          the whole Document (DocumentView)
    stratum       external functions, e.g. ``stratum.date([])`` or
                  ``stratum.wc(["-l"], text)``; the name follows the
                  configured function namespace
    <module>      one global per loaded query module
    path          tree path of the directory holding the node
    node          the node being expanded (NodeView)
    real_path     real_path(rel) -> filesystem path of a file
    evaluate      evaluate(query) -> text, rendered in the same context
    map           map(xpath, transform, nodes) -> copies of nodes with every
                  xpath match replaced by transform(match)

A query module is a Jinja2 file whose top level declares its namespace and
defines macros:

    {% set namespace = "site" %}
    {% macro title(page) %}{{ page.select("string(//h1)")[0] }}{% endmacro %}

Its macros are then reachable from every template as ``site.title(...)``.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from jinja2 import Environment, StrictUndefined, TemplateError, TemplateSyntaxError
from lxml import etree

from stratum.core.exceptions import EvaluationError, ModuleError, NotFoundError
from stratum.core.functions.registry import FunctionNamespace, FunctionRegistry
from stratum.core.tree.fragments import inner_xml, map_elements, serialize
from stratum.core.tree.model import Document, Node, NodeKind
from .base import QueryEvaluator
from .views import DocumentView, NodeView

logger = logging.getLogger(__name__)

NAMESPACE_VARIABLE = "namespace"
CONTEXT_VARIABLES = frozenset({"path", "node", "real_path", "evaluate", "map"})


def create_environment() -> Environment:
    env = Environment(
        autoescape=False,
        undefined=StrictUndefined,
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["xml"] = serialize
    env.filters["inner_xml"] = inner_xml
    return env


def _elements(nodes: Any) -> List[Any]:
    """Normalize the node argument of ``map``: a view, an element, or a sequence."""
    if isinstance(nodes, NodeView):
        if nodes.xml is None:
            raise ValueError(f"'{nodes.path}' is not a structured file")
        return [nodes.xml]
    if isinstance(nodes, etree._Element):
        return [nodes]
    return [e for n in nodes for e in _elements(n)]


class JinjaQueryEvaluator(QueryEvaluator):
    """Evaluate templates and load query modules with Jinja2."""

    def __init__(
        self,
        document: Document,
        registry: FunctionRegistry,
        *,
        namespace: Optional[str] = None,
    ) -> None:
        self.document = document
        self.registry = registry
        self.function_namespace = namespace or registry.namespace
        self.env = create_environment()
        self.env.globals["tree"] = DocumentView(document)
        self.env.globals[self.function_namespace] = FunctionNamespace(
            registry, self.function_namespace
        )
        self._modules: Dict[str, str] = {}

    @property
    def modules(self) -> Dict[str, str]:
        """Loaded module namespaces mapped to the tree path that declared them."""
        return dict(self._modules)

    def register_module(self, source: str, origin: str) -> str:
        try:
            module = self.env.from_string(source).module
        except TemplateSyntaxError as exc:
            raise ModuleError(origin, f"line {exc.lineno}: {exc.message}") from exc
        except TemplateError as exc:
            raise ModuleError(origin, str(exc)) from exc

        namespace = getattr(module, NAMESPACE_VARIABLE, None)
        if namespace is None:
            raise ModuleError(
                origin, f"missing declaration {{% set {NAMESPACE_VARIABLE} = \"...\" %}}"
            )
        if not isinstance(namespace, str) or not namespace.isidentifier():
            raise ModuleError(origin, f"malformed namespace {namespace!r}")
        if namespace in self._modules:
            raise ModuleError(
                origin, f"namespace '{namespace}' already declared by '{self._modules[namespace]}'"
            )
        if namespace in CONTEXT_VARIABLES or namespace in self.env.globals:
            raise ModuleError(origin, f"namespace '{namespace}' is reserved")

        self.env.globals[namespace] = module
        self._modules[namespace] = origin
        logger.debug("loaded module '%s' from '%s'", namespace, origin)
        return namespace

    def evaluate(self, query: str, node: Node, variables: Mapping[str, Any]) -> str:
        context = self._context(node, variables)
        try:
            return self._render(query, context)
        except EvaluationError:
            raise
        except Exception as exc:
            raise EvaluationError(node.path, exc) from exc

    def _render(self, query: str, context: Dict[str, Any]) -> str:
        return self.env.from_string(query).render(context)

    def _context(self, node: Node, variables: Mapping[str, Any]) -> Dict[str, Any]:
        view = NodeView(self.document, node.path)
        context: Dict[str, Any] = dict(variables)
        context.setdefault("path", node.dirname)
        context["node"] = view

        def real_path(rel: str) -> str:
            found = view.find(rel)
            if found is None or found.is_directory or found.source is None:
                raise NotFoundError(f"'{rel}' is not a file", context={"path": rel})
            return found.source

        def evaluate(query: str) -> str:
            return self._render(str(query), context)

        def map_(query: str, transform: Callable[[Any], Any], nodes: Any) -> List[Any]:
            return map_elements(query, transform, _elements(nodes), node.path)

        context["real_path"] = real_path
        context["evaluate"] = evaluate
        context["map"] = map_
        return context

    def serialize(self, node: Node) -> str:
        if node.text is None and node.fragment is not None:
            return inner_xml(node.fragment)
        if node.text is None and node.kind is NodeKind.FILE and node.source is not None:
            return node.source.read_text(encoding="utf-8")
        return node.serialized()


__all__ = ["JinjaQueryEvaluator", "create_environment"]
