"""
Stratum configuration management.
"""
from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

import jsonschema

from stratum.core.exceptions import ConfigError
from stratum.core.utils.io import read_yaml
from stratum.core.utils.merge import deep_merge
from stratum.data import get_data_path, read_yaml as read_data_yaml

logger = logging.getLogger(__name__)

PROJECT_CONFIG_FILENAME = "stratum.yaml"
ENV_PREFIX = "STRATUM_"


class ConfigManager:
    """Load, merge, and validate Stratum configuration.

    Configuration sources (highest to lowest priority):
    1. Overrides passed to ``load`` (the CLI's options)
    2. Environment variables: STRATUM_<SECTION>__<KEY>
    3. Project config: ``--config FILE`` or ``stratum.yaml`` in ``project_root``
    4. Bundled defaults: stratum.data/config/defaults.yaml
    """

    def __init__(
        self,
        project_root: Optional[Path] = None,
        config_file: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.project_root = Path(project_root) if project_root else Path.cwd()
        self.config_file = Path(config_file) if config_file else None
        self.environ = environ if environ is not None else os.environ
        self.defaults_path = get_data_path("config", "defaults.yaml")

    @property
    def project_config_path(self) -> Optional[Path]:
        """Project file in effect, or None when there is none."""
        if self.config_file is not None:
            return self.config_file
        candidate = self.project_root / PROJECT_CONFIG_FILENAME
        return candidate if candidate.is_file() else None

    def load_yaml(self, path: Path) -> Dict[str, Any]:
        # Configuration must never silently ignore invalid YAML.
        try:
            data = read_yaml(path, default={}, raise_on_error=True)
        except FileNotFoundError as exc:
            raise ConfigError(f"config file not found: {path}", context={"path": str(path)}) from exc
        except Exception as exc:
            raise ConfigError(f"cannot read config file {path}: {exc}", context={"path": str(path)}) from exc
        if not isinstance(data, dict):
            raise ConfigError(
                f"config file {path} must hold a mapping, got {type(data).__name__}",
                context={"path": str(path)},
            )
        return data

    def _as_bool(self, v: str) -> Optional[bool]:
        low = v.strip().lower()
        if low in {"true", "false"}:
            return low == "true"
        return None

    def _as_int(self, v: str) -> Optional[int]:
        if re.fullmatch(r"[-+]?\d+", v.strip() or " "):
            return int(v)
        return None

    def _as_json(self, v: str) -> Optional[Any]:
        s = v.strip()
        if (s.startswith("{") and s.endswith("}")) or (s.startswith("[") and s.endswith("]")):
            try:
                return json.loads(s)
            except ValueError:
                return None
        return None

    def _coerce_type(self, value: str) -> Any:
        for caster in (self._as_bool, self._as_int, self._as_json):
            result = caster(value)
            if result is not None:
                return result
        if value.strip().lower() in {"null", "none", "~"}:
            return None
        return value.strip()

    def _iter_env_overrides(self) -> Iterator[Tuple[List[str], Any]]:
        for key in sorted(self.environ):
            if not key.startswith(ENV_PREFIX):
                continue
            raw = key[len(ENV_PREFIX):]
            segments = raw.lower().split("__")
            if not raw or any(seg == "" for seg in segments):
                logger.warning("ignoring malformed environment override %s", key)
                continue
            yield segments, self._coerce_type(self.environ[key])

    def _set_nested(self, root: Dict[str, Any], path: List[str], value: Any) -> None:
        current = root
        for seg in path[:-1]:
            nxt = current.get(seg)
            if not isinstance(nxt, dict):
                nxt = {}
                current[seg] = nxt
            current = nxt
        current[path[-1]] = value

    def apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        result = deep_merge(config, {})
        for path, value in self._iter_env_overrides():
            logger.debug("environment override %s = %r", ".".join(path), value)
            self._set_nested(result, path, value)
        return result

    def validate(self, config: Dict[str, Any]) -> None:
        """Validate ``config`` against the bundled JSON Schema.

        Raises:
            ConfigError: Listing every violation found.
        """
        schema = read_data_yaml("schemas", "config.yaml")
        validator = jsonschema.Draft202012Validator(schema)
        problems = []
        for err in sorted(validator.iter_errors(config), key=lambda e: list(e.path)):
            where = ".".join(str(p) for p in err.path) or "<root>"
            problems.append(f"{where}: {err.message}")
        if problems:
            raise ConfigError(
                "invalid configuration: " + "; ".join(problems),
                context={"errors": problems},
            )

    def load(self, overrides: Optional[Mapping[str, Any]] = None, *, validate: bool = True) -> Dict[str, Any]:
        """Return the merged configuration.

        Raises:
            ConfigError: If a file cannot be read or the result is invalid.
        """
        config = self.load_yaml(self.defaults_path)
        project = self.project_config_path
        if project is not None:
            logger.debug("loading project config %s", project)
            config = deep_merge(config, self.load_yaml(project))
        config = self.apply_env_overrides(config)
        if overrides:
            config = deep_merge(config, dict(overrides))
        if validate:
            self.validate(config)
        return config


__all__ = ["ConfigManager", "PROJECT_CONFIG_FILENAME", "ENV_PREFIX"]
