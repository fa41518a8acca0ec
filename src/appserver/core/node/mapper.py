"""Structural deserialization of source elements into configuration nodes."""
from __future__ import annotations

import dataclasses
import logging
from typing import Any, Dict, Optional, Tuple, Type, TypeVar

from appserver.core.exceptions import MappingError

from .base import ConfigNode, coerce_value
from .mapping import MAPPINGS, TEXT_SOURCE, FieldMapping, mapping_for
from .nodes import AppserverNode
from .source import SourceElement

logger = logging.getLogger(__name__)

N = TypeVar("N", bound=ConfigNode)

_NO_DEFAULT = object()


def _field_default(node_type: Type[ConfigNode], name: str) -> Any:
    for f in dataclasses.fields(node_type):
        if f.name == name and f.default is not dataclasses.MISSING:
            return f.default
    return _NO_DEFAULT


class NodeMapper:
    """Build node graphs from ``SourceElement`` trees using the mapping table.

    ``map`` is a pure transform: it only constructs and returns the node
    graph. ``unmap`` produces the element tree that maps back to an equal
    node graph, which is what the configuration write-back serializes.

    Args:
        table: Mapping table to consult (defaults to ``MAPPINGS``)
    """

    def __init__(
        self,
        table: Optional[Dict[Type[ConfigNode], Tuple[FieldMapping, ...]]] = None,
    ) -> None:
        self._table = MAPPINGS if table is None else table

    def map(self, element: SourceElement, node_type: Type[N]) -> N:
        """Map ``element`` to a new ``node_type`` instance.

        Raises:
            MappingError: On a name mismatch, a value that cannot be coerced,
                a missing required value, or duplicate app primary keys
        """
        if element.name != node_type.NODE_NAME:
            raise MappingError(
                f"Cannot map <{element.name}> to {node_type.__name__}",
                node_type=node_type.NODE_NAME,
                source=element.name,
            )
        return self._build(element, node_type)

    def _build(self, element: SourceElement, node_type: Type[N]) -> N:
        values: Dict[str, Any] = {}
        for entry in mapping_for(node_type, self._table):
            if entry.is_collection:
                assert entry.child_type is not None
                values[entry.target] = [
                    self._build(child, entry.child_type)
                    for child in element.find_all(entry.container, entry.item)
                ]
                continue
            raw = element.text if entry.source == TEXT_SOURCE else element.get(entry.source)
            if raw is None:
                if entry.required:
                    raise MappingError(
                        f"<{element.name}> is missing required '{entry.source}'",
                        node_type=node_type.NODE_NAME,
                        field=entry.target,
                        source=entry.source,
                    )
                # Leave the field at its declared default
                continue
            value = coerce_value(
                raw,
                entry.value_type,
                node_type=node_type.NODE_NAME,
                field_name=entry.target,
            )
            if entry.choices is not None and value not in entry.choices:
                raise MappingError(
                    f"<{element.name}> has {entry.source}={value!r}, "
                    f"expected one of {sorted(entry.choices)}",
                    node_type=node_type.NODE_NAME,
                    field=entry.target,
                    source=entry.source,
                )
            values[entry.target] = value

        node = node_type(**values)
        if isinstance(node, AppserverNode):
            node.validate_unique_keys()
        logger.debug("Mapped <%s> to %s %s", element.name, node_type.__name__, node.uuid)
        return node

    def unmap(self, node: ConfigNode) -> SourceElement:
        """Return the element tree that maps back to a node equal to ``node``.

        Scalars still at their declared default are left out.
        """
        node_type = type(node)
        element = SourceElement(name=node_type.NODE_NAME)
        for entry in mapping_for(node_type, self._table):
            value = getattr(node, entry.target)
            if entry.is_collection:
                if value:
                    wrapper = SourceElement(name=entry.container)
                    for child in value:
                        child_element = self.unmap(child)
                        child_element.name = entry.item
                        wrapper.children.append(child_element)
                    element.children.append(wrapper)
                continue
            if value == _field_default(node_type, entry.target) and not entry.required:
                continue
            if entry.source == TEXT_SOURCE:
                element.text = value
            else:
                element.attributes[entry.source] = value
        return element


__all__ = ["NodeMapper"]
