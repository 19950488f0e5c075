"""Query functions: registry of Python callables and external executables."""

from .registry import DEFAULT_NAMESPACE, ExternalFunction, FunctionNamespace, FunctionRegistry

__all__ = ["DEFAULT_NAMESPACE", "ExternalFunction", "FunctionNamespace", "FunctionRegistry"]
