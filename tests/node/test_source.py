from __future__ import annotations

from xml.etree import ElementTree

import pytest

from appserver.core.exceptions import MappingError
from appserver.core.node import (
    AppNode,
    AppserverNode,
    ParamNode,
    SourceElement,
    document_from_element,
    element_from_document,
    element_from_etree,
)
from helpers.builders import sample_document


def test_find_all_walks_container_children_in_order() -> None:
    element = SourceElement(
        name="server",
        children=[
            SourceElement(name="modules", children=[SourceElement(name="module", attributes={"type": "a"})]),
            SourceElement(name="params"),
            SourceElement(name="modules", children=[SourceElement(name="module", attributes={"type": "b"})]),
        ],
    )
    assert [m.get("type") for m in element.find_all("modules", "module")] == ["a", "b"]
    assert element.child("params") is not None
    assert element.child("rewrites") is None


def test_document_to_element() -> None:
    element = element_from_document({"name": "port", "type": "integer", "value": 80}, ParamNode)
    assert element.name == "param"
    assert element.attributes == {"name": "port", "type": "integer"}
    assert element.text == 80


def test_document_ignores_unknown_and_null_keys() -> None:
    element = element_from_document({"name": "shop", "extra": 1, "webappPath": None}, AppNode)
    assert element.attributes == {"name": "shop"}


def test_document_rejects_non_mapping() -> None:
    with pytest.raises(MappingError):
        element_from_document(["shop"], AppNode)  # type: ignore[arg-type]


def test_document_rejects_non_list_collection() -> None:
    with pytest.raises(MappingError) as exc:
        element_from_document({"apps": {"name": "shop"}}, AppserverNode)
    assert exc.value.field == "apps"


def test_document_round_trip() -> None:
    data = sample_document()["appserver"]
    assert document_from_element(element_from_document(data, AppserverNode), AppserverNode) == data


def test_etree_adapter_keeps_text_verbatim() -> None:
    element = element_from_etree(ElementTree.fromstring('<param name="a"> two  words </param>'))
    assert element.name == "param"
    assert element.attributes == {"name": "a"}
    assert element.text == " two  words "

    empty = element_from_etree(ElementTree.fromstring("<modules>\n</modules>"))
    assert empty.text is None
