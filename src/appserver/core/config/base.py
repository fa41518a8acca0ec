"""Base class for domain-specific settings accessors.

Provides a standardized pattern for all domain settings with:
- Consistent repo_root handling
- Type-safe section access
- Root-relative path resolution
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from functools import cached_property
from pathlib import Path
from typing import Any, Dict, Optional

from .manager import ConfigManager


class BaseDomainConfig(ABC):
    """Abstract base class for domain-specific settings accessors.

    Usage:
        class MyConfig(BaseDomainConfig):
            def _config_section(self) -> str:
                return "mySection"

            @cached_property
            def my_setting(self) -> str:
                return self.section.get("mySetting", "default")

        cfg = MyConfig(repo_root=Path("/srv/appserver"))
        print(cfg.my_setting)
    """

    def __init__(
        self,
        repo_root: Optional[Path] = None,
        *,
        config: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Initialize domain settings.

        Args:
            repo_root: Installation root. Uses auto-detection if None.
            config: Already merged settings; loaded through ConfigManager if None.
        """
        self._manager = ConfigManager(repo_root=repo_root)
        self._config = config if config is not None else self._manager.load_config()

    @property
    def repo_root(self) -> Path:
        return self._manager.repo_root

    @abstractmethod
    def _config_section(self) -> str:
        """Return the top-level settings key for this domain."""
        ...

    @cached_property
    def section(self) -> Dict[str, Any]:
        """Get this domain's settings section, or an empty dict."""
        return self._config.get(self._config_section(), {}) or {}

    def _path(self, key: str) -> Path:
        return self._manager.resolve_path(self.section[key])


__all__ = ["BaseDomainConfig"]
