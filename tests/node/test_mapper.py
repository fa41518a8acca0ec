from __future__ import annotations

from xml.etree import ElementTree

import pytest

from appserver.core.exceptions import MappingError
from appserver.core.node import (
    AppNode,
    AppserverNode,
    FieldMapping,
    NodeMapper,
    ParamNode,
    ServerNode,
    SourceElement,
    element_from_document,
    element_from_etree,
    mapping_for,
)
from appserver.core.node.mapping import PARAM_TYPES, Cardinality, scalar
from helpers.builders import SHOP_UUID, sample_document


def _root(mapper: NodeMapper) -> AppserverNode:
    return mapper.map(element_from_document(sample_document()["appserver"], AppserverNode), AppserverNode)


def test_maps_scalars_with_declared_types(mapper: NodeMapper) -> None:
    element = SourceElement(name="param", attributes={"name": "port", "type": "integer"}, text="8080")
    param = mapper.map(element, ParamNode)

    assert param.name == "port"
    assert param.type == "integer"
    assert param.value == "8080"
    assert param.cast_value() == 8080


def test_missing_optional_scalar_keeps_default(mapper: NodeMapper) -> None:
    param = mapper.map(SourceElement(name="param", attributes={"name": "x"}), ParamNode)
    assert param.type == "string"
    assert param.value == ""


def test_collections_preserve_document_order(mapper: NodeMapper) -> None:
    root = _root(mapper)
    http = root.servers[0]

    assert [m.type for m in http.modules] == ["AuthenticationModule", "RewriteModule", "CoreModule"]
    assert [h.extension for h in http.file_handlers] == [".php", ".phtml"]
    assert [p.value for p in http.params] == ["8080", "true", "9090"]
    assert http.get_param("port") == 8080
    assert http.get_rewrite("^/index$").target == "/index.php"
    assert http.virtual_hosts[0].get_rewrite("^/cart").target == "/basket"
    assert http.authentications[0].get_param("realm") == "Admin"


def test_primary_keys_come_from_source(mapper: NodeMapper) -> None:
    root = _root(mapper)
    assert root.apps[0].primary_key == SHOP_UUID
    assert root.get_app(SHOP_UUID).webapp_path == "/opt/appserver/webapps/shop"


def test_name_mismatch_raises(mapper: NodeMapper) -> None:
    with pytest.raises(MappingError) as exc:
        mapper.map(SourceElement(name="server"), AppNode)
    assert exc.value.context["source"] == "server"


def test_missing_required_value_raises(mapper: NodeMapper) -> None:
    with pytest.raises(MappingError) as exc:
        mapper.map(SourceElement(name="application"), AppNode)
    assert exc.value.field == "name"


def test_uncoercible_value_raises() -> None:
    table = {ParamNode: (scalar("name", required=True), scalar("value", value_type="integer"))}
    mapper = NodeMapper(table)
    element = SourceElement(name="param", attributes={"name": "port", "value": "eighty"})
    with pytest.raises(MappingError):
        mapper.map(element, ParamNode)


def test_duplicate_app_keys_raise(mapper: NodeMapper) -> None:
    data = sample_document()["appserver"]
    data["apps"][1]["uuid"] = SHOP_UUID
    with pytest.raises(MappingError, match="Duplicate"):
        mapper.map(element_from_document(data, AppserverNode), AppserverNode)


def test_unmapped_node_type_raises() -> None:
    with pytest.raises(MappingError):
        mapping_for(ServerNode, table={})


def test_collection_mapping_requires_child_type() -> None:
    with pytest.raises(ValueError):
        FieldMapping(target="apps", source="apps/application", cardinality=Cardinality.COLLECTION)
    with pytest.raises(ValueError):
        FieldMapping(target="port", source="port", value_type="decimal")


def test_unmap_then_map_is_idempotent(mapper: NodeMapper) -> None:
    root = _root(mapper)
    again = mapper.map(mapper.unmap(root), AppserverNode)
    assert again == root
    assert mapper.map(mapper.unmap(again), AppserverNode) == again


def test_unmap_omits_defaults(mapper: NodeMapper) -> None:
    element = mapper.unmap(ParamNode(name="x"))
    assert set(element.attributes) == {"uuid", "name"}
    assert element.text is None


def test_maps_parsed_xml(mapper: NodeMapper) -> None:
    xml = """
    <appserver>
      <apps>
        <application name="shop" webappPath="/opt/webapps/shop">
          <datasources>
            <datasource name="shopDb" type="mysql">
              <params><param name="port" type="integer">3306</param></params>
            </datasource>
          </datasources>
        </application>
      </apps>
      <servers>
        <server type="http">
          <rewrites><rewrite condition="^/a" target="/b" flag="L"/></rewrites>
        </server>
      </servers>
    </appserver>
    """
    root = mapper.map(element_from_etree(ElementTree.fromstring(xml)), AppserverNode)

    shop = root.apps[0]
    assert shop.name == "shop"
    assert shop.datasources[0].get_param("port") == 3306
    assert root.servers[0].rewrites[0].flag == "L"


def test_unknown_param_type_is_rejected(mapper: NodeMapper) -> None:
    element = element_from_etree(ElementTree.fromstring('<param name="workers" type="int">4</param>'))
    with pytest.raises(MappingError) as exc:
        mapper.map(element, ParamNode)
    assert exc.value.field == "type"
    assert "integer" in str(exc.value)


def test_param_type_choices_match_coercers() -> None:
    entry = scalar("type", choices=PARAM_TYPES)
    assert entry.choices == frozenset({"string", "integer", "float", "boolean"})
