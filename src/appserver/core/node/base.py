"""Base configuration node type and scalar coercion.

This module provides the foundational pieces of the configuration tree:
- ConfigNode: typed, hierarchical value object for one configuration element
- new_uuid: primary key generator
- coerce_value: conversion of raw source values to declared scalar types
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Callable, ClassVar, Dict, FrozenSet, Iterator
from uuid import uuid4

from appserver.core.exceptions import MappingError


def new_uuid() -> str:
    """Return a fresh primary key."""
    return str(uuid4())


_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}


def _to_string(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise ValueError(f"expected a scalar, got {type(value).__name__}")


def _to_integer(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("expected an integer, got a boolean")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return int(value.strip())
    raise ValueError(f"expected an integer, got {type(value).__name__}")


def _to_float(value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError("expected a float, got a boolean")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        return float(value.strip())
    raise ValueError(f"expected a float, got {type(value).__name__}")


def _to_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        low = value.strip().lower()
        if low in _TRUE:
            return True
        if low in _FALSE:
            return False
    raise ValueError(f"expected a boolean, got {value!r}")


COERCERS: Dict[str, Callable[[Any], Any]] = {
    "string": _to_string,
    "integer": _to_integer,
    "float": _to_float,
    "boolean": _to_boolean,
}


def coerce_value(
    value: Any,
    value_type: str,
    *,
    node_type: str | None = None,
    field_name: str | None = None,
) -> Any:
    """Convert ``value`` to ``value_type``.

    Raises:
        MappingError: If the type is unknown or the value cannot be converted
    """
    coercer = COERCERS.get(value_type)
    if coercer is None:
        raise MappingError(
            f"Unknown value type '{value_type}'",
            node_type=node_type,
            field=field_name,
        )
    try:
        return coercer(value)
    except (TypeError, ValueError) as exc:
        raise MappingError(
            f"Cannot coerce {value!r} to {value_type}: {exc}",
            node_type=node_type,
            field=field_name,
        ) from exc


@dataclass
class ConfigNode:
    """Base class of every configuration node.

    Every node carries a primary key generated at creation time. Fields listed
    in ``IMMUTABLE_FIELDS`` can be set once (by ``__init__``) and never again.

    Attributes:
        uuid: Primary key of the node
    """

    NODE_NAME: ClassVar[str] = "node"
    IMMUTABLE_FIELDS: ClassVar[FrozenSet[str]] = frozenset({"uuid"})

    uuid: str = field(default_factory=new_uuid)

    def __setattr__(self, name: str, value: Any) -> None:
        if name in self.IMMUTABLE_FIELDS and name in self.__dict__:
            raise AttributeError(f"{type(self).__name__}.{name} is immutable")
        object.__setattr__(self, name, value)

    @property
    def node_name(self) -> str:
        return self.NODE_NAME

    @property
    def primary_key(self) -> str:
        return self.uuid

    def iter_children(self) -> Iterator["ConfigNode"]:
        """Yield direct child nodes in declaration order."""
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, list):
                for item in value:
                    if isinstance(item, ConfigNode):
                        yield item

    def walk(self) -> Iterator["ConfigNode"]:
        """Yield this node and all descendants, depth first."""
        yield self
        for child in self.iter_children():
            yield from child.walk()


__all__ = [
    "ConfigNode",
    "COERCERS",
    "coerce_value",
    "new_uuid",
]
