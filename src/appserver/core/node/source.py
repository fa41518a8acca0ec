"""Structured source elements and the codecs producing them.

``NodeMapper`` consumes ``SourceElement`` trees: a name, a mapping of
attribute name to raw value, ordered child elements, and optional text.
Parsing the raw configuration format is the job of the codecs below:

- ``element_from_etree``: adapts an already-parsed ``xml.etree`` element.
- ``element_from_document`` / ``document_from_element``: the plain
  document (YAML/dict) form used for the persisted configuration file. The
  document shape is derived from the mapping table so it needs no
  element-name markup.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Type
from xml.etree import ElementTree

from appserver.core.exceptions import MappingError

from .base import ConfigNode
from .mapping import TEXT_SOURCE, mapping_for


@dataclass
class SourceElement:
    name: str
    attributes: Dict[str, Any] = field(default_factory=dict)
    children: List["SourceElement"] = field(default_factory=list)
    text: Optional[Any] = None

    def get(self, attribute: str, default: Any = None) -> Any:
        return self.attributes.get(attribute, default)

    def child(self, name: str) -> Optional["SourceElement"]:
        """Return the first direct child called ``name``."""
        for element in self.children:
            if element.name == name:
                return element
        return None

    def find_all(self, container: str, item: str) -> List["SourceElement"]:
        """Return every ``item`` element below ``container`` children, in order."""
        found: List[SourceElement] = []
        for wrapper in self.children:
            if wrapper.name != container:
                continue
            found.extend(element for element in wrapper.children if element.name == item)
        return found


def element_from_etree(element: ElementTree.Element) -> SourceElement:
    """Adapt a parsed XML element (and its subtree) to a ``SourceElement``.

    Text is kept verbatim, including surrounding whitespace, unless it is
    blank; blank text (indentation between child elements) becomes None.
    """
    text = element.text
    return SourceElement(
        name=element.tag,
        attributes=dict(element.attrib),
        children=[element_from_etree(child) for child in element],
        text=text if text and text.strip() else None,
    )


def element_from_document(
    data: Mapping[str, Any], node_type: Type[ConfigNode]
) -> SourceElement:
    """Build the element tree for ``node_type`` from a plain document.

    Keys without a declared mapping are ignored; structural mismatches (a
    collection that is not a list of mappings) raise ``MappingError``.
    """
    if not isinstance(data, Mapping):
        raise MappingError(
            f"Expected a mapping for {node_type.NODE_NAME}, got {type(data).__name__}",
            node_type=node_type.NODE_NAME,
        )

    element = SourceElement(name=node_type.NODE_NAME)
    for entry in mapping_for(node_type):
        key = entry.document_key
        if key not in data or data[key] is None:
            continue
        value = data[key]
        if entry.is_collection:
            if not isinstance(value, list):
                raise MappingError(
                    f"Expected a list for '{key}'",
                    node_type=node_type.NODE_NAME,
                    field=entry.target,
                    source=entry.source,
                )
            wrapper = SourceElement(name=entry.container)
            assert entry.child_type is not None
            for item in value:
                child = element_from_document(item, entry.child_type)
                child.name = entry.item
                wrapper.children.append(child)
            element.children.append(wrapper)
        elif entry.source == TEXT_SOURCE:
            element.text = value
        else:
            element.attributes[entry.source] = value
    return element


def document_from_element(
    element: SourceElement, node_type: Type[ConfigNode]
) -> Dict[str, Any]:
    """Inverse of ``element_from_document``."""
    document: Dict[str, Any] = {}
    for entry in mapping_for(node_type):
        if entry.is_collection:
            items = element.find_all(entry.container, entry.item)
            if items:
                assert entry.child_type is not None
                document[entry.container] = [
                    document_from_element(item, entry.child_type) for item in items
                ]
        elif entry.source == TEXT_SOURCE:
            if element.text is not None:
                document[entry.target] = element.text
        elif entry.source in element.attributes:
            document[entry.source] = element.attributes[entry.source]
    return document


__all__ = [
    "SourceElement",
    "document_from_element",
    "element_from_document",
    "element_from_etree",
]
