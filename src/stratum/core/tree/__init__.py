"""Document tree: model, filename markers, XML fragments and the builder."""

from .builder import TreeBuilder
from .fragments import inner_xml, parse_fragment, serialize
from .markers import FilenameMarkers, TemplateMarker
from .model import Document, Node, NodeKind, child_path, normalize_tree_path

__all__ = [
    "TreeBuilder",
    "inner_xml",
    "parse_fragment",
    "serialize",
    "FilenameMarkers",
    "TemplateMarker",
    "Document",
    "Node",
    "NodeKind",
    "child_path",
    "normalize_tree_path",
]
