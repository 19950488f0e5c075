"""Typed views of configuration sections."""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple


@dataclass(frozen=True)
class EngineConfig:
    """Settings consumed by the Engine (the ``engine`` section)."""

    template_marker: str = "stratum"
    no_copy_marker: str = "in"
    structured_extensions: Tuple[str, ...] = (".xml", ".xhtml")
    module_extensions: Tuple[str, ...] = (".jinja",)
    max_rounds: int = 8
    tolerant: bool = False
    function_namespace: str = "stratum"

    @classmethod
    def from_dict(cls, section: Optional[Mapping[str, Any]]) -> "EngineConfig":
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in (section or {}).items() if k in known}
        for key in ("structured_extensions", "module_extensions"):
            if key in values:
                values[key] = tuple(values[key])
        return cls(**values)

    def with_extra_structured(self, extensions) -> "EngineConfig":
        """Copy with ``extensions`` appended to the structured extensions."""
        merged = list(self.structured_extensions)
        for ext in extensions:
            ext = ext if ext.startswith(".") else f".{ext}"
            if ext not in merged:
                merged.append(ext)
        return EngineConfig(**{**self.__dict__, "structured_extensions": tuple(merged)})


@dataclass(frozen=True)
class LoggingConfig:
    """The ``logging`` section."""

    level: str = "WARNING"
    file: Optional[Path] = field(default=None)

    @classmethod
    def from_dict(cls, section: Optional[Mapping[str, Any]]) -> "LoggingConfig":
        section = section or {}
        path = section.get("file")
        return cls(
            level=str(section.get("level") or "WARNING").upper(),
            file=Path(path) if path else None,
        )


__all__ = ["EngineConfig", "LoggingConfig"]
