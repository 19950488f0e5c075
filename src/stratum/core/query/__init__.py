"""Query evaluation over the Document."""

from .base import QueryEvaluator
from .jinja import JinjaQueryEvaluator, create_environment
from .views import DocumentView, NodeView

__all__ = [
    "QueryEvaluator",
    "JinjaQueryEvaluator",
    "create_environment",
    "DocumentView",
    "NodeView",
]
