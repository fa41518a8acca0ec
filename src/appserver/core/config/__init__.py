"""appserver settings system.

This package provides layered settings management with domain-specific accessors.

Usage:
    from appserver.core.config import ConfigManager, DeploymentConfig

    # Direct manager usage
    settings = ConfigManager(repo_root=Path("/srv/appserver")).load_config()

    # Domain-specific accessors (recommended)
    deployment = DeploymentConfig(repo_root=Path("/srv/appserver"))
    deploy_dir = deployment.deploy_dir
"""
from __future__ import annotations

from .manager import ConfigManager
from .base import BaseDomainConfig
from .domains import DeploymentConfig, FileLockingConfig, LoggingConfig

__all__ = [
    "ConfigManager",
    "BaseDomainConfig",
    "DeploymentConfig",
    "FileLockingConfig",
    "LoggingConfig",
]
