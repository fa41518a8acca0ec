"""Domain-specific settings for advisory file locks."""
from __future__ import annotations

from functools import cached_property

from appserver.core.exceptions import ConfigurationError

from ..base import BaseDomainConfig


class FileLockingConfig(BaseDomainConfig):
    def _config_section(self) -> str:
        return "file_locking"

    def _positive(self, key: str, default: float) -> float:
        value = float(self.section.get(key, default))
        if value <= 0:
            raise ConfigurationError(
                f"file_locking.{key} must be positive (got {value})",
                context={"key": key},
            )
        return value

    @cached_property
    def timeout_seconds(self) -> float:
        return self._positive("timeout_seconds", 10.0)

    @cached_property
    def poll_interval_seconds(self) -> float:
        return self._positive("poll_interval_seconds", 0.1)


__all__ = ["FileLockingConfig"]
