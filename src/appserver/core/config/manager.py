"""
appserver settings management (layered YAML + environment overrides).
"""
from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from appserver.core.exceptions import ConfigurationError
from appserver.core.utils.io import iter_yaml_files, read_yaml
from appserver.core.utils.merge import deep_merge as _deep_merge
from appserver.data import get_data_path

logger = logging.getLogger(__name__)

ENV_PREFIX = "APPSERVER_"
ROOT_ENV = "APPSERVER_ROOT"
PROJECT_CONFIG_DIRNAME = ".appserver"


class ConfigManager:
    """Load and merge appserver settings.

    Sources (highest to lowest priority):
    1. Environment variables: APPSERVER_<section>__<key>
    2. Project config: <root>/.appserver/config/*.yaml (alphabetical order)
    3. Bundled defaults: appserver.data/config/*.yaml (alphabetical order)

    The root is the explicit ``repo_root``, else ``$APPSERVER_ROOT``, else the
    current working directory.
    """

    def __init__(self, repo_root: Optional[Path] = None) -> None:
        self.repo_root = Path(repo_root or os.environ.get(ROOT_ENV) or Path.cwd())
        self.core_config_dir = get_data_path("config")
        self.project_config_dir = self.repo_root / PROJECT_CONFIG_DIRNAME / "config"

    def deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge dictionaries. Delegates to shared implementation."""
        return _deep_merge(base, override)

    def load_yaml(self, path: Path) -> Dict[str, Any]:
        # Fail closed: settings must never silently ignore invalid YAML.
        try:
            data = read_yaml(path, default={}, raise_on_error=True)
        except Exception as exc:
            raise ConfigurationError(
                f"Cannot load settings from {path}: {exc}", context={"path": str(path)}
            ) from exc
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Settings file {path} must contain a mapping", context={"path": str(path)}
            )
        return data

    def _load_directory(self, directory: Path, cfg: Dict[str, Any]) -> Dict[str, Any]:
        for path in iter_yaml_files(directory):
            cfg = self.deep_merge(cfg, self.load_yaml(path))
        return cfg

    # ---------- Environment overrides ----------

    def _as_bool(self, v: str) -> Optional[bool]:
        low = v.strip().lower()
        if low in {"true", "false"}:
            return low == "true"
        return None

    def _as_int(self, v: str) -> Optional[int]:
        if re.fullmatch(r"[-+]?\d+", v.strip() or " "):
            return int(v)
        return None

    def _as_float(self, v: str) -> Optional[float]:
        s = v.strip()
        if re.fullmatch(r"[-+]?\d*\.\d+", s) or re.fullmatch(r"[-+]?\d+\.\d*", s):
            return float(s)
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
        for caster in (self._as_bool, self._as_int, self._as_float, self._as_json):
            result = caster(value)
            if result is not None:
                return result
        return value.strip()

    def _iter_env_overrides(self) -> Iterator[Tuple[List[str], Any]]:
        for key in sorted(os.environ.keys()):
            if not key.startswith(ENV_PREFIX) or key == ROOT_ENV:
                continue
            raw = key[len(ENV_PREFIX):]
            segments = [seg.lower() for seg in raw.split("__")]
            if not raw or any(seg == "" for seg in segments):
                logger.warning("Ignoring malformed settings override %s", key)
                continue
            yield segments, self._coerce_type(os.environ[key])

    def _set_nested(self, root: Dict[str, Any], path: List[str], value: Any) -> None:
        cur: Union[Dict[str, Any], Any] = root
        for part in path[:-1]:
            nxt = cur.get(part)
            if not isinstance(nxt, dict):
                nxt = {}
                cur[part] = nxt
            cur = nxt
        cur[path[-1]] = value

    def apply_env_overrides(self, cfg: Dict[str, Any]) -> None:
        for path, typed_value in self._iter_env_overrides():
            self._set_nested(cfg, path, typed_value)

    # ---------- Loading ----------

    def load_config(self) -> Dict[str, Any]:
        """Return the merged settings dictionary."""
        cfg: Dict[str, Any] = {}
        cfg = self._load_directory(self.core_config_dir, cfg)
        cfg = self._load_directory(self.project_config_dir, cfg)
        self.apply_env_overrides(cfg)
        return cfg

    def resolve_path(self, value: Union[str, Path]) -> Path:
        """Resolve a settings path relative to the root."""
        path = Path(value).expanduser()
        return path if path.is_absolute() else self.repo_root / path


__all__ = ["ConfigManager", "ENV_PREFIX", "ROOT_ENV", "PROJECT_CONFIG_DIRNAME"]
