"""Configuration node variants.

Every variant is a dataclass derived from ``ConfigNode``. Child collections
are plain lists whose order is the declaration order of the configuration
source; handler and rewrite precedence depend on it.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, FrozenSet, List, Optional

from appserver.core.exceptions import MappingError

from .base import ConfigNode, coerce_value


@dataclass
class ParamNode(ConfigNode):
    """A named, typed parameter; ``value`` holds the raw source text."""

    NODE_NAME: ClassVar[str] = "param"

    name: str = ""
    type: str = "string"
    value: str = ""

    def cast_value(self) -> Any:
        """Return ``value`` converted according to ``type``."""
        return coerce_value(
            self.value, self.type, node_type=self.NODE_NAME, field_name=self.name
        )


@dataclass
class ParamsNode(ConfigNode):
    """Node owning an ordered collection of params."""

    params: List[ParamNode] = field(default_factory=list)

    def get_param(self, name: str) -> Any:
        """Return the cast value of the first param called ``name``, or None."""
        for param in self.params:
            if param.name == name:
                return param.cast_value()
        return None

    def params_as_dict(self) -> Dict[str, Any]:
        """Return the params as name -> cast value; the first occurrence wins."""
        result: Dict[str, Any] = {}
        for param in self.params:
            if param.name not in result:
                result[param.name] = param.cast_value()
        return result


@dataclass
class RewriteNode(ConfigNode):
    """Immutable rewrite rule ``(condition, target, flag)``."""

    NODE_NAME: ClassVar[str] = "rewrite"
    IMMUTABLE_FIELDS: ClassVar[FrozenSet[str]] = frozenset(
        {"uuid", "condition", "target", "flag"}
    )

    condition: str = ""
    target: str = ""
    flag: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"condition": self.condition, "target": self.target, "flag": self.flag}


@dataclass
class RewritesNode(ParamsNode):
    """Node owning an ordered collection of rewrite rules."""

    rewrites: List[RewriteNode] = field(default_factory=list)

    def get_rewrite(self, condition: str) -> Optional[RewriteNode]:
        """Return the first rewrite whose condition equals ``condition``.

        Duplicate conditions are allowed; insertion order decides.
        """
        for rewrite in self.rewrites:
            if rewrite.condition == condition:
                return rewrite
        return None

    def rewrites_as_dict(self) -> Dict[str, Dict[str, str]]:
        """Return the rewrites keyed by condition.

        For duplicate conditions the first rule wins, so the result agrees
        with ``get_rewrite``; later duplicates are dropped rather than
        overriding earlier ones.
        """
        result: Dict[str, Dict[str, str]] = {}
        for rewrite in self.rewrites:
            result.setdefault(rewrite.condition, rewrite.to_dict())
        return result


@dataclass
class VirtualHostNode(RewritesNode):
    NODE_NAME: ClassVar[str] = "virtualHost"

    name: str = ""


@dataclass
class ConnectionHandlerNode(ConfigNode):
    NODE_NAME: ClassVar[str] = "connectionHandler"

    type: str = ""


@dataclass
class ModuleNode(ConfigNode):
    NODE_NAME: ClassVar[str] = "module"

    type: str = ""


@dataclass
class FileHandlerNode(ConfigNode):
    NODE_NAME: ClassVar[str] = "fileHandler"

    name: str = ""
    extension: str = ""


@dataclass
class AuthenticationNode(ParamsNode):
    NODE_NAME: ClassVar[str] = "authentication"

    uri: str = ""
    type: str = ""


@dataclass
class ServerNode(RewritesNode):
    """One network-facing server definition."""

    NODE_NAME: ClassVar[str] = "server"

    type: str = ""
    worker: str = ""
    socket: str = ""
    server_context: str = ""
    virtual_hosts: List[VirtualHostNode] = field(default_factory=list)
    connection_handlers: List[ConnectionHandlerNode] = field(default_factory=list)
    modules: List[ModuleNode] = field(default_factory=list)
    file_handlers: List[FileHandlerNode] = field(default_factory=list)
    authentications: List[AuthenticationNode] = field(default_factory=list)

    def get_virtual_host(self, name: str) -> Optional[VirtualHostNode]:
        for virtual_host in self.virtual_hosts:
            if virtual_host.name == name:
                return virtual_host
        return None


@dataclass
class DatasourceNode(ParamsNode):
    NODE_NAME: ClassVar[str] = "datasource"

    name: str = ""
    type: str = ""


@dataclass
class AppNode(ConfigNode):
    """One deployed application."""

    NODE_NAME: ClassVar[str] = "application"

    name: str = ""
    webapp_path: str = ""
    datasources: List[DatasourceNode] = field(default_factory=list)


@dataclass
class AppserverNode(ConfigNode):
    """Root of the configuration tree.

    Invariant: application primary keys are unique across the tree.
    """

    NODE_NAME: ClassVar[str] = "appserver"

    apps: List[AppNode] = field(default_factory=list)
    servers: List[ServerNode] = field(default_factory=list)

    def get_app(self, uuid: str) -> Optional[AppNode]:
        for app_node in self.apps:
            if app_node.primary_key == uuid:
                return app_node
        return None

    def attach_app(self, app_node: AppNode) -> None:
        """Append ``app_node``, or replace the app with the same primary key."""
        for index, existing in enumerate(self.apps):
            if existing.primary_key == app_node.primary_key:
                self.apps[index] = app_node
                return
        self.apps.append(app_node)

    def validate_unique_keys(self) -> None:
        seen = set()
        for app_node in self.apps:
            if app_node.primary_key in seen:
                raise MappingError(
                    f"Duplicate application primary key {app_node.primary_key}",
                    node_type=AppNode.NODE_NAME,
                    field="uuid",
                )
            seen.add(app_node.primary_key)


__all__ = [
    "ParamNode",
    "ParamsNode",
    "RewriteNode",
    "RewritesNode",
    "VirtualHostNode",
    "ConnectionHandlerNode",
    "ModuleNode",
    "FileHandlerNode",
    "AuthenticationNode",
    "ServerNode",
    "DatasourceNode",
    "AppNode",
    "AppserverNode",
]
