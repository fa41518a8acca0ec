"""Domain-specific settings for the appserver log file."""
from __future__ import annotations

from functools import cached_property
from pathlib import Path

from ..base import BaseDomainConfig


class LoggingConfig(BaseDomainConfig):
    def _config_section(self) -> str:
        return "logging"

    @cached_property
    def enabled(self) -> bool:
        return bool(self.section.get("enabled", False))

    @cached_property
    def level(self) -> str:
        return str(self.section.get("level", "INFO")).upper()

    @cached_property
    def path(self) -> Path:
        return self._path("path")


__all__ = ["LoggingConfig"]
