"""Domain-specific settings for the configuration file and deploy directory."""
from __future__ import annotations

from functools import cached_property
from pathlib import Path

from ..base import BaseDomainConfig


class DeploymentConfig(BaseDomainConfig):
    def _config_section(self) -> str:
        return "deployment"

    @cached_property
    def deploy_dir(self) -> Path:
        return self._path("deploy_dir")

    @cached_property
    def archive_suffix(self) -> str:
        suffix = str(self.section.get("archive_suffix", ".zip"))
        return suffix if suffix.startswith(".") else f".{suffix}"

    @cached_property
    def configuration_file(self) -> Path:
        return self._path("configuration_file")

    @cached_property
    def validate(self) -> bool:
        return bool(self.section.get("validate", True))


__all__ = ["DeploymentConfig"]
