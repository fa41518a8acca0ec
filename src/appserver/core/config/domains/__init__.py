"""Domain-specific settings accessors."""
from __future__ import annotations

from .deployment import DeploymentConfig
from .file_locking import FileLockingConfig
from .logging import LoggingConfig

__all__ = ["DeploymentConfig", "FileLockingConfig", "LoggingConfig"]
