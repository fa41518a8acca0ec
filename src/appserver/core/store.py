"""Holder of the active configuration tree.

The store owns the root ``AppserverNode``. Replacing the tree swaps one
reference under a lock, so a reader sees either the whole old tree or the
whole new one. Trees handed out to readers are never mutated afterwards:
``update`` works on a deep copy and installs the copy.

A write-back collaborator (``ConfigurationWriter``) is invoked with every
installed tree; ``YamlConfigurationWriter`` persists it as a YAML document.
"""
from __future__ import annotations

import copy
import logging
import threading
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Protocol

from appserver.core.node import (
    AppserverNode,
    NodeMapper,
    document_from_element,
    element_from_document,
)
from appserver.core.schemas import validate_payload
from appserver.core.utils.io import acquire_file_lock, read_yaml, write_yaml

logger = logging.getLogger(__name__)

ROOT_KEY = AppserverNode.NODE_NAME
SCHEMA_NAME = "appserver"


class ConfigurationWriter(Protocol):
    def __call__(self, configuration: AppserverNode) -> None: ...


def configuration_to_document(
    configuration: AppserverNode, mapper: Optional[NodeMapper] = None
) -> Dict[str, Any]:
    """Return the plain document form of ``configuration``."""
    element = (mapper or NodeMapper()).unmap(configuration)
    return {ROOT_KEY: document_from_element(element, AppserverNode)}


def configuration_from_document(
    document: Any,
    mapper: Optional[NodeMapper] = None,
    *,
    validate: bool = True,
) -> AppserverNode:
    """Map a plain document to a configuration tree.

    Raises:
        SchemaValidationError: If ``validate`` and the document is rejected
        MappingError: If the document cannot populate the node tree
    """
    if validate:
        validate_payload(document, SCHEMA_NAME)
    data = document.get(ROOT_KEY) if isinstance(document, dict) else None
    element = element_from_document(data or {}, AppserverNode)
    return (mapper or NodeMapper()).map(element, AppserverNode)


class YamlConfigurationWriter:
    """Write-back collaborator persisting the tree as YAML.

    The write is atomic (temp file + rename) and holds an advisory lock on
    the target so concurrent processes never interleave.
    """

    def __init__(
        self,
        path: Path,
        *,
        mapper: Optional[NodeMapper] = None,
        lock_timeout: Optional[float] = None,
        poll_interval: Optional[float] = None,
    ) -> None:
        self.path = Path(path)
        self._mapper = mapper or NodeMapper()
        self._lock_timeout = lock_timeout
        self._poll_interval = poll_interval

    def __call__(self, configuration: AppserverNode) -> None:
        document = configuration_to_document(configuration, self._mapper)
        write_yaml(
            self.path,
            document,
            lock_cm=acquire_file_lock(
                self.path, timeout=self._lock_timeout, poll_interval=self._poll_interval
            ),
        )
        logger.info("Wrote configuration to %s", self.path)


class ConfigurationStore:
    """Explicitly owned holder of the active configuration tree.

    Args:
        configuration: Initial tree (an empty tree if omitted)
        writer: Optional write-back collaborator called after every install
    """

    def __init__(
        self,
        configuration: Optional[AppserverNode] = None,
        *,
        writer: Optional[ConfigurationWriter] = None,
    ) -> None:
        self._configuration = configuration if configuration is not None else AppserverNode()
        self._writer = writer
        self._lock = threading.RLock()

    @classmethod
    def from_file(
        cls,
        path: Path,
        *,
        mapper: Optional[NodeMapper] = None,
        validate: bool = True,
        writer: Optional[ConfigurationWriter] = None,
        create: bool = False,
    ) -> "ConfigurationStore":
        """Load the tree stored at ``path``.

        Nothing is installed when loading fails; the error propagates.

        Args:
            path: YAML configuration file
            mapper: Mapper to use (a default ``NodeMapper`` if omitted)
            validate: Validate the document against the bundled schema
            writer: Write-back collaborator; defaults to writing ``path``
            create: Start from an empty tree when ``path`` does not exist

        Raises:
            FileNotFoundError: If ``path`` is missing and ``create`` is False
            SchemaValidationError: If the document is rejected by the schema
            MappingError: If the document cannot populate the node tree
        """
        path = Path(path)
        mapper = mapper or NodeMapper()
        if not path.exists() and create:
            configuration = AppserverNode()
            logger.info("No configuration at %s, starting with an empty tree", path)
        else:
            document = read_yaml(path, raise_on_error=True)
            configuration = configuration_from_document(document, mapper, validate=validate)
            logger.info(
                "Loaded configuration from %s (%d apps, %d servers)",
                path,
                len(configuration.apps),
                len(configuration.servers),
            )
        return cls(configuration, writer=writer or YamlConfigurationWriter(path, mapper=mapper))

    def get_configuration(self) -> AppserverNode:
        """Return the active tree. Re-fetch after any mutation."""
        with self._lock:
            return self._configuration

    def set_configuration(self, configuration: AppserverNode) -> None:
        """Validate and write ``configuration``, then atomically install it.

        The active tree is only replaced once the writer returned; a rejected
        tree or a failed write leaves the previous tree installed.

        Raises:
            MappingError: If application primary keys are not unique
        """
        with self._lock:
            configuration.validate_unique_keys()
            if self._writer is not None:
                self._writer(configuration)
            self._configuration = configuration
            logger.info("Installed configuration %s", configuration.uuid)

    def update(self, mutator: Callable[[AppserverNode], None]) -> AppserverNode:
        """Read, copy, mutate and install the tree as one critical section.

        Returns:
            The newly installed tree
        """
        with self._lock:
            candidate = copy.deepcopy(self._configuration)
            mutator(candidate)
            self.set_configuration(candidate)
            return candidate

    def compare_and_set(self, expected: AppserverNode, configuration: AppserverNode) -> bool:
        """Install ``configuration`` only if ``expected`` is still the active tree."""
        with self._lock:
            if self._configuration is not expected:
                logger.info("Configuration changed concurrently, swap rejected")
                return False
            self.set_configuration(configuration)
            return True


__all__ = [
    "ConfigurationStore",
    "ConfigurationWriter",
    "YamlConfigurationWriter",
    "configuration_from_document",
    "configuration_to_document",
]
