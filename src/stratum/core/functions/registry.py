"""Functions callable from queries.

Functions are keyed by ``(namespace, local_name, arity)``. Every executable
found while building the Document is registered under the engine's function
namespace with two signatures:

    name(args)          arity 1
    name(args, input)   arity 2, ``input`` is fed on standard input

A name that is already bound keeps its first binding; a later registration is
logged and ignored. Since registration follows build order, a higher-priority
root cannot be shadowed by a lower one and a directory's executables are bound
before those of its following siblings.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from stratum.core.exceptions import FunctionError
from stratum.core.utils.subprocess import run_captured, strip_final_newline

logger = logging.getLogger(__name__)

FunctionType = Callable[..., str]
FunctionKey = Tuple[str, str, int]

DEFAULT_NAMESPACE = "stratum"


def _as_argv(args: Any) -> List[str]:
    if args is None:
        return []
    if isinstance(args, (str, bytes)):
        return [args.decode("utf-8") if isinstance(args, bytes) else args]
    if isinstance(args, Iterable):
        return [str(a) for a in args]
    return [str(args)]


class ExternalFunction:
    """An executable file invoked as a query function."""

    def __init__(self, name: str, path: Path, origin: Optional[str] = None) -> None:
        self.name = name
        self.path = Path(path)
        self.origin = origin

    def __repr__(self) -> str:
        return f"ExternalFunction({self.name!r}, {str(self.path)!r})"

    def __call__(self, args: Any = None, stdin: Optional[str] = None) -> str:
        argv = [str(self.path), *_as_argv(args)]
        try:
            result = run_captured(argv, stdin=None if stdin is None else str(stdin))
        except OSError as exc:
            raise FunctionError(self.name, f"cannot run '{self.path}': {exc.strerror or exc}") from exc
        if result.returncode != 0:
            detail = (result.stderr or "").strip()
            reason = f"'{self.path}' exited with status {result.returncode}"
            raise FunctionError(self.name, f"{reason}: {detail}" if detail else reason)
        return strip_final_newline(result.stdout)


class FunctionRegistry:
    """Per-engine table of query functions."""

    def __init__(self, namespace: str = DEFAULT_NAMESPACE) -> None:
        self.namespace = namespace
        self._functions: Dict[FunctionKey, FunctionType] = {}
        self._origins: Dict[FunctionKey, Optional[str]] = {}

    def __contains__(self, key: object) -> bool:
        return key in self._functions

    def __len__(self) -> int:
        return len(self._functions)

    def register(
        self,
        namespace: str,
        local_name: str,
        arity: int,
        func: FunctionType,
        *,
        origin: Optional[str] = None,
    ) -> bool:
        """Bind ``func`` unless the signature is already taken.

        Returns:
            True if the function was bound, False if it was shadowed.
        """
        key = (namespace, local_name, arity)
        if key in self._functions:
            logger.warning(
                "function %s:%s/%d from '%s' is shadowed by '%s'",
                namespace,
                local_name,
                arity,
                origin or "<python>",
                self._origins.get(key) or "<python>",
            )
            return False
        self._functions[key] = func
        self._origins[key] = origin
        logger.debug("registered function %s:%s/%d", namespace, local_name, arity)
        return True

    def register_executable(
        self,
        local_name: str,
        path: Path,
        *,
        origin: Optional[str] = None,
    ) -> bool:
        """Bind an executable under both of its signatures."""
        func = ExternalFunction(local_name, path, origin=origin)
        one = self.register(self.namespace, local_name, 1, lambda args: func(args), origin=origin)
        two = self.register(
            self.namespace, local_name, 2, lambda args, stdin: func(args, stdin), origin=origin
        )
        return one and two

    def lookup(self, namespace: str, local_name: str, arity: int) -> Optional[FunctionType]:
        return self._functions.get((namespace, local_name, arity))

    def origin(self, namespace: str, local_name: str, arity: int) -> Optional[str]:
        """Tree path of the file that supplied a function, if any."""
        return self._origins.get((namespace, local_name, arity))

    def call(self, local_name: str, args: Any = None, stdin: Optional[str] = None) -> str:
        """Call a function of the default namespace.

        Raises:
            FunctionError: If no function matches, or the function fails.
        """
        arity = 1 if stdin is None else 2
        func = self.lookup(self.namespace, local_name, arity)
        if func is None:
            raise FunctionError(local_name, f"no function {self.namespace}:{local_name}/{arity}")
        return func(args) if stdin is None else func(args, stdin)

    def names(self, namespace: Optional[str] = None) -> List[str]:
        ns = namespace or self.namespace
        return sorted({name for (n, name, _arity) in self._functions if n == ns})


class FunctionNamespace:
    """Attribute access to one namespace of a registry.

    ``ns.date([])`` calls ``date/1``; ``ns.wc(["-l"], text)`` calls ``wc/2``.
    """

    def __init__(self, registry: FunctionRegistry, namespace: Optional[str] = None) -> None:
        self._registry = registry
        self._namespace = namespace or registry.namespace

    def __getattr__(self, name: str) -> Callable[..., str]:
        if name.startswith("_"):
            raise AttributeError(name)
        registry = self._registry
        namespace = self._namespace

        def invoke(*args: Any) -> str:
            func = registry.lookup(namespace, name, len(args))
            if func is None:
                raise FunctionError(name, f"no function {namespace}:{name}/{len(args)}")
            return func(*args)

        invoke.__name__ = name
        return invoke

    def __contains__(self, name: str) -> bool:
        return name in self._registry.names(self._namespace)

    def __repr__(self) -> str:
        return f"<function namespace {self._namespace}>"


__all__ = [
    "DEFAULT_NAMESPACE",
    "ExternalFunction",
    "FunctionRegistry",
    "FunctionNamespace",
]
