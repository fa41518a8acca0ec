"""Wire the store, registry and deployment controller from settings."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from appserver.core.config import (
    ConfigManager,
    DeploymentConfig,
    FileLockingConfig,
    LoggingConfig,
)
from appserver.core.deploy import DeploymentController, FlagFileExtractor
from appserver.core.logging import configure_logging
from appserver.core.node import NodeMapper
from appserver.core.registry import AppRegistry
from appserver.core.store import ConfigurationStore, YamlConfigurationWriter

logger = logging.getLogger(__name__)


@dataclass
class Services:
    store: ConfigurationStore
    registry: AppRegistry
    controller: DeploymentController
    settings: Dict[str, Any]


def open_services(repo_root: Optional[Path] = None) -> Services:
    """Build the collaborators for the installation at ``repo_root``.

    The configuration file is created with an empty tree on first write
    when it does not exist yet.

    Raises:
        ConfigurationError: If a settings file is malformed
        SchemaValidationError: If the configuration file is rejected
        MappingError: If the configuration file cannot populate the tree
    """
    manager = ConfigManager(repo_root=repo_root)
    settings = manager.load_config()

    log_cfg = LoggingConfig(manager.repo_root, config=settings)
    if log_cfg.enabled:
        configure_logging(log_path=log_cfg.path, level=log_cfg.level)

    deployment = DeploymentConfig(manager.repo_root, config=settings)
    locking = FileLockingConfig(manager.repo_root, config=settings)

    mapper = NodeMapper()
    writer = YamlConfigurationWriter(
        deployment.configuration_file,
        mapper=mapper,
        lock_timeout=locking.timeout_seconds,
        poll_interval=locking.poll_interval_seconds,
    )
    store = ConfigurationStore.from_file(
        deployment.configuration_file,
        mapper=mapper,
        validate=deployment.validate,
        writer=writer,
        create=True,
    )
    registry = AppRegistry(store, mapper=mapper)
    extractor = FlagFileExtractor(deployment.deploy_dir, suffix=deployment.archive_suffix)
    controller = DeploymentController(registry, extractor)

    logger.info("Opened appserver services at %s", manager.repo_root)
    return Services(store=store, registry=registry, controller=controller, settings=settings)


__all__ = ["Services", "open_services"]
