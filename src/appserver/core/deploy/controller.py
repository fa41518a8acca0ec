"""Flag-file state machine for application archives.

States per archive ``<deploy_dir>/<name><suffix>``:

    ABSENT          no archive, or no flag present
    PENDING_DEPLOY  archive + ``.dodeploy``, no ``.deployed``
    DEPLOYED        archive + ``.deployed``

``deploy`` and ``undeploy`` only create or remove flags. The transition takes
effect when the external scanner next observes the deploy directory.
"""
from __future__ import annotations

import logging
import threading
from enum import Enum
from pathlib import Path
from typing import Union

from appserver.core.exceptions import ApplicationNotFoundError
from appserver.core.node import AppNode
from appserver.core.registry import AppRegistry

from .extractor import ArchiveFlag, ExtractorInterface, flag_path

logger = logging.getLogger(__name__)


class DeploymentState(str, Enum):
    ABSENT = "absent"
    PENDING_DEPLOY = "pending_deploy"
    DEPLOYED = "deployed"


class DeploymentController:
    """Mark application archives for deployment or removal.

    Args:
        registry: Registry used to resolve application primary keys
        extractor: Collaborator performing archive intake and flagging
    """

    def __init__(self, registry: AppRegistry, extractor: ExtractorInterface) -> None:
        self._registry = registry
        self._extractor = extractor
        self._lock = threading.Lock()

    @property
    def deploy_dir(self) -> Path:
        return self._extractor.deploy_dir

    def archive_path(self, app_name: str) -> Path:
        return self.deploy_dir / f"{app_name}{self._extractor.extension_suffix}"

    def flag_path(self, app_name: str, flag: ArchiveFlag) -> Path:
        return flag_path(self.archive_path(app_name), flag)

    def soak(self, archive_location: Union[str, Path]) -> Path:
        """Take an external archive into the deploy directory.

        Raises:
            ExtractionError: If the extractor rejects the archive
        """
        return self._extractor.soak_archive(Path(archive_location))

    def deploy(self, app_node: AppNode) -> Path:
        """Request deployment of ``app_node`` by creating its ``.dodeploy`` flag.

        The ``.deployed`` flag is neither created nor removed.

        Returns:
            Path of the created flag

        Raises:
            ExtractionError: If the flag cannot be created
        """
        archive = self.archive_path(app_node.name)
        with self._lock:
            if not archive.exists():
                logger.warning("Flagging %s for deployment but the archive is missing", archive)
            sentinel = self._extractor.flag_archive(archive, ArchiveFlag.DODEPLOY)
        logger.info("Requested deployment of %s", app_node.name)
        return sentinel

    def undeploy(self, uuid: str, *, strict: bool = False) -> bool:
        """Request removal of the application ``uuid`` by removing its ``.deployed`` flag.

        An unknown ``uuid`` is a no-op so repeated undeploys are harmless;
        pass ``strict=True`` to get an error instead. The ``.dodeploy`` flag is
        left untouched.

        Returns:
            True when the application was found, False otherwise

        Raises:
            ApplicationNotFoundError: If ``strict`` and ``uuid`` is unknown
            ExtractionError: If the flag cannot be removed
        """
        app_node = self._registry.load(uuid)
        if app_node is None:
            if strict:
                raise ApplicationNotFoundError(f"No application with uuid {uuid}", uuid=uuid)
            logger.info("Undeploy of unknown application %s ignored", uuid)
            return False

        with self._lock:
            self._extractor.unflag_archive(self.archive_path(app_node.name))
        logger.info("Requested undeployment of %s", app_node.name)
        return True

    def state(self, app_name: str) -> DeploymentState:
        """Return the flag-file state of the archive of ``app_name``."""
        if not self.archive_path(app_name).exists():
            return DeploymentState.ABSENT
        if self.flag_path(app_name, ArchiveFlag.DEPLOYED).exists():
            return DeploymentState.DEPLOYED
        if self.flag_path(app_name, ArchiveFlag.DODEPLOY).exists():
            return DeploymentState.PENDING_DEPLOY
        return DeploymentState.ABSENT


__all__ = ["DeploymentController", "DeploymentState"]
