"""Declared mapping table between source elements and node fields.

Each node type lists its ``FieldMapping`` entries:

- ``SCALAR`` entries copy one source value (an attribute, or the element
  text when the source is ``#text``) into one typed field.
- ``COLLECTION`` entries locate repeated ``<container>/<item>`` elements and
  map each one to ``child_type``, preserving document order.

The table is plain data; ``NodeMapper`` and the document codec both consult
it, so adding a field to the configuration means adding one entry here.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple, Type

from appserver.core.exceptions import MappingError

from .base import COERCERS, ConfigNode
from .nodes import (
    AppNode,
    AppserverNode,
    AuthenticationNode,
    ConnectionHandlerNode,
    DatasourceNode,
    FileHandlerNode,
    ModuleNode,
    ParamNode,
    RewriteNode,
    ServerNode,
    VirtualHostNode,
)

TEXT_SOURCE = "#text"


class Cardinality(str, Enum):
    SCALAR = "scalar"
    COLLECTION = "collection"


@dataclass(frozen=True)
class FieldMapping:
    """One declared binding of a source locator to a node field.

    Attributes:
        target: Node attribute name
        source: Attribute name, ``#text``, or ``container/item`` for collections
        cardinality: Scalar or ordered collection
        value_type: Scalar type name (see ``COERCERS``)
        child_type: Node type of collection entries
        required: Whether the source value must be present
        choices: Allowed values of a scalar, if restricted
    """

    target: str
    source: str
    cardinality: Cardinality = Cardinality.SCALAR
    value_type: str = "string"
    child_type: Optional[Type[ConfigNode]] = None
    required: bool = False
    choices: Optional[FrozenSet[str]] = None

    def __post_init__(self) -> None:
        if self.cardinality is Cardinality.COLLECTION:
            if self.child_type is None or "/" not in self.source:
                raise ValueError(
                    f"Collection mapping '{self.target}' needs a child type "
                    "and a 'container/item' source"
                )
        elif self.value_type not in COERCERS:
            raise ValueError(f"Unknown value type '{self.value_type}' for '{self.target}'")

    @property
    def is_collection(self) -> bool:
        return self.cardinality is Cardinality.COLLECTION

    @property
    def container(self) -> str:
        return self.source.split("/", 1)[0]

    @property
    def item(self) -> str:
        return self.source.split("/", 1)[1]

    @property
    def document_key(self) -> str:
        """Key used for this field in a plain document (YAML/dict)."""
        if self.is_collection:
            return self.container
        if self.source == TEXT_SOURCE:
            return self.target
        return self.source


def scalar(target: str, source: Optional[str] = None, **kwargs) -> FieldMapping:
    return FieldMapping(target=target, source=source or target, **kwargs)


def collection(target: str, source: str, child_type: Type[ConfigNode]) -> FieldMapping:
    return FieldMapping(
        target=target,
        source=source,
        cardinality=Cardinality.COLLECTION,
        child_type=child_type,
    )


UUID = scalar("uuid")
PARAM_TYPES = frozenset(COERCERS)
PARAMS = collection("params", "params/param", ParamNode)
REWRITES = collection("rewrites", "rewrites/rewrite", RewriteNode)


MAPPINGS: Dict[Type[ConfigNode], Tuple[FieldMapping, ...]] = {
    ParamNode: (
        UUID,
        scalar("name", required=True),
        scalar("type", choices=PARAM_TYPES),
        scalar("value", TEXT_SOURCE),
    ),
    RewriteNode: (
        UUID,
        scalar("condition", required=True),
        scalar("target", required=True),
        scalar("flag"),
    ),
    VirtualHostNode: (
        UUID,
        scalar("name", required=True),
        PARAMS,
        REWRITES,
    ),
    ConnectionHandlerNode: (
        UUID,
        scalar("type", required=True),
    ),
    ModuleNode: (
        UUID,
        scalar("type", required=True),
    ),
    FileHandlerNode: (
        UUID,
        scalar("name", required=True),
        scalar("extension", required=True),
    ),
    AuthenticationNode: (
        UUID,
        scalar("uri", required=True),
        scalar("type", required=True),
        PARAMS,
    ),
    ServerNode: (
        UUID,
        scalar("type"),
        scalar("worker"),
        scalar("socket"),
        scalar("server_context", "serverContext"),
        PARAMS,
        REWRITES,
        collection("virtual_hosts", "virtualHosts/virtualHost", VirtualHostNode),
        collection(
            "connection_handlers",
            "connectionHandlers/connectionHandler",
            ConnectionHandlerNode,
        ),
        collection("modules", "modules/module", ModuleNode),
        collection("file_handlers", "fileHandlers/fileHandler", FileHandlerNode),
        collection(
            "authentications", "authentications/authentication", AuthenticationNode
        ),
    ),
    DatasourceNode: (
        UUID,
        scalar("name", required=True),
        scalar("type"),
        PARAMS,
    ),
    AppNode: (
        UUID,
        scalar("name", required=True),
        scalar("webapp_path", "webappPath"),
        collection("datasources", "datasources/datasource", DatasourceNode),
    ),
    AppserverNode: (
        UUID,
        collection("apps", "apps/application", AppNode),
        collection("servers", "servers/server", ServerNode),
    ),
}


def mapping_for(
    node_type: Type[ConfigNode],
    table: Optional[Dict[Type[ConfigNode], Tuple[FieldMapping, ...]]] = None,
) -> Tuple[FieldMapping, ...]:
    """Return the declared mapping of ``node_type``.

    Raises:
        MappingError: If the node type has no declared mapping
    """
    entries = (MAPPINGS if table is None else table).get(node_type)
    if entries is None:
        raise MappingError(
            f"No mapping declared for {node_type.__name__}",
            node_type=getattr(node_type, "NODE_NAME", node_type.__name__),
        )
    return entries


__all__ = [
    "Cardinality",
    "FieldMapping",
    "MAPPINGS",
    "PARAM_TYPES",
    "TEXT_SOURCE",
    "collection",
    "mapping_for",
    "scalar",
]
