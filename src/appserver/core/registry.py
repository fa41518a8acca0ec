"""Query and mutation facade over the application nodes of the active tree.

Every read scans ``AppserverNode.apps`` of the tree currently installed in
the ``ConfigurationStore``; there is no secondary index.
"""
from __future__ import annotations

import copy
import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Protocol, runtime_checkable

from appserver.core.node import (
    AppNode,
    AppserverNode,
    DatasourceNode,
    NodeMapper,
    element_from_document,
    new_uuid,
)
from appserver.core.store import ConfigurationStore

logger = logging.getLogger(__name__)


@runtime_checkable
class ApplicationDescriptor(Protocol):
    """Live application object a new ``AppNode`` can be built from."""

    name: str
    webapp_path: str
    datasources: Iterable[Any]


class AppRegistry:
    """Find, create and persist application nodes.

    Args:
        store: Store holding the active configuration tree
        mapper: Mapper used for datasources given as plain documents
    """

    NODE_NAME = AppNode.NODE_NAME

    def __init__(self, store: ConfigurationStore, *, mapper: Optional[NodeMapper] = None) -> None:
        self._store = store
        self._mapper = mapper or NodeMapper()

    @property
    def store(self) -> ConfigurationStore:
        return self._store

    # ---------- Query Operations ----------

    def find_all(self) -> Dict[str, AppNode]:
        """Return every application keyed by primary key."""
        return {app_node.primary_key: app_node for app_node in self._store.get_configuration().apps}

    def find_all_by_name(self, name: str) -> Dict[str, AppNode]:
        """Return the applications whose name equals ``name`` (case-sensitive)."""
        return {
            uuid: app_node for uuid, app_node in self.find_all().items() if app_node.name == name
        }

    def load(self, uuid: str) -> Optional[AppNode]:
        """Return the application with primary key ``uuid``, or None."""
        for app_node in self.find_all().values():
            if app_node.primary_key == uuid:
                return app_node
        return None

    def load_by_webapp_path(self, webapp_path: str) -> Optional[AppNode]:
        """Return the first application deployed at ``webapp_path``, or None.

        Paths are expected to be unique; if they are not, iteration order
        decides which application is returned.
        """
        for app_node in self.find_all().values():
            if app_node.webapp_path == webapp_path:
                return app_node
        return None

    # ---------- Mutation Operations ----------

    def persist(self, app_node: AppNode) -> AppserverNode:
        """Attach ``app_node`` to the tree and install the result.

        A node with a new primary key is appended; a node sharing the primary
        key of an existing application replaces it in place.

        Returns:
            The newly installed tree
        """

        def _attach(configuration: AppserverNode) -> None:
            configuration.attach_app(copy.deepcopy(app_node))

        configuration = self._store.update(_attach)
        logger.info("Persisted application %s (%s)", app_node.name, app_node.primary_key)
        return configuration

    def create(self, application: ApplicationDescriptor) -> AppNode:
        """Build a new, unpersisted ``AppNode`` from a live application.

        A fresh primary key is assigned; ``datasources`` may hold
        ``DatasourceNode`` instances or plain documents.
        """
        return AppNode(
            uuid=new_uuid(),
            name=application.name,
            webapp_path=application.webapp_path,
            datasources=[self._datasource(ds) for ds in (application.datasources or [])],
        )

    def _datasource(self, datasource: Any) -> DatasourceNode:
        if isinstance(datasource, DatasourceNode):
            return copy.deepcopy(datasource)
        if isinstance(datasource, Mapping):
            return self._mapper.map(
                element_from_document(datasource, DatasourceNode), DatasourceNode
            )
        raise TypeError(f"Unsupported datasource {type(datasource).__name__}")


__all__ = ["AppRegistry", "ApplicationDescriptor"]
