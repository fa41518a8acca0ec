"""Configuration node tree.

- **Nodes**: ``ConfigNode`` and its variants (server, virtual host, rewrite,
  application, ...)
- **Mapping table**: declared ``FieldMapping`` entries per node type
- **Source elements**: the structured input consumed by the mapper
- **NodeMapper**: builds node graphs from source elements and back

Example usage:
    from appserver.core.node import AppserverNode, NodeMapper, element_from_document

    mapper = NodeMapper()
    root = mapper.map(element_from_document(data, AppserverNode), AppserverNode)
"""
from __future__ import annotations

from .base import ConfigNode, coerce_value, new_uuid
from .nodes import (
    AppNode,
    AppserverNode,
    AuthenticationNode,
    ConnectionHandlerNode,
    DatasourceNode,
    FileHandlerNode,
    ModuleNode,
    ParamNode,
    ParamsNode,
    RewriteNode,
    RewritesNode,
    ServerNode,
    VirtualHostNode,
)
from .mapping import MAPPINGS, Cardinality, FieldMapping, mapping_for
from .source import (
    SourceElement,
    document_from_element,
    element_from_document,
    element_from_etree,
)
from .mapper import NodeMapper

__all__ = [
    # Base
    "ConfigNode",
    "coerce_value",
    "new_uuid",
    # Variants
    "AppNode",
    "AppserverNode",
    "AuthenticationNode",
    "ConnectionHandlerNode",
    "DatasourceNode",
    "FileHandlerNode",
    "ModuleNode",
    "ParamNode",
    "ParamsNode",
    "RewriteNode",
    "RewritesNode",
    "ServerNode",
    "VirtualHostNode",
    # Mapping
    "MAPPINGS",
    "Cardinality",
    "FieldMapping",
    "mapping_for",
    # Source
    "SourceElement",
    "document_from_element",
    "element_from_document",
    "element_from_etree",
    # Mapper
    "NodeMapper",
]
