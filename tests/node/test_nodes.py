from __future__ import annotations

import copy

import pytest

from appserver.core.exceptions import MappingError
from appserver.core.node import (
    AppNode,
    AppserverNode,
    ParamNode,
    ParamsNode,
    RewriteNode,
    RewritesNode,
    ServerNode,
    VirtualHostNode,
    coerce_value,
    new_uuid,
)


def test_new_nodes_get_distinct_primary_keys() -> None:
    a, b = AppNode(name="a"), AppNode(name="a")
    assert a.primary_key and b.primary_key
    assert a.primary_key != b.primary_key
    assert a.primary_key == a.uuid


def test_primary_key_is_immutable() -> None:
    node = AppNode(name="shop")
    with pytest.raises(AttributeError):
        node.uuid = new_uuid()


def test_rewrite_fields_are_immutable() -> None:
    rewrite = RewriteNode(condition="^/a", target="/b", flag="L")
    with pytest.raises(AttributeError):
        rewrite.target = "/c"
    assert rewrite.to_dict() == {"condition": "^/a", "target": "/b", "flag": "L"}


def test_deepcopy_keeps_immutable_fields() -> None:
    rewrite = RewriteNode(condition="^/a", target="/b")
    clone = copy.deepcopy(rewrite)
    assert clone == rewrite
    assert clone is not rewrite


@pytest.mark.parametrize(
    "value,value_type,expected",
    [
        ("8080", "integer", 8080),
        (" 42 ", "integer", 42),
        ("1.5", "float", 1.5),
        (3, "float", 3.0),
        ("TRUE", "boolean", True),
        ("off", "boolean", False),
        (True, "string", "true"),
        (8443, "string", "8443"),
    ],
)
def test_coerce_value(value, value_type, expected) -> None:
    assert coerce_value(value, value_type) == expected


@pytest.mark.parametrize(
    "value,value_type",
    [("abc", "integer"), (True, "integer"), ("maybe", "boolean"), ({}, "string"), ("1", "decimal")],
)
def test_coerce_value_rejects(value, value_type) -> None:
    with pytest.raises(MappingError) as exc:
        coerce_value(value, value_type, node_type="param", field_name="port")
    assert exc.value.context["node_type"] == "param"
    assert isinstance(exc.value, ValueError)


def test_params_are_cast_and_first_occurrence_wins() -> None:
    node = ParamsNode(
        params=[
            ParamNode(name="port", type="integer", value="8080"),
            ParamNode(name="debug", type="boolean", value="false"),
            ParamNode(name="port", type="integer", value="9090"),
        ]
    )
    assert node.get_param("port") == 8080
    assert node.get_param("missing") is None
    assert node.params_as_dict() == {"port": 8080, "debug": False}


def test_get_rewrite_returns_first_match() -> None:
    first = RewriteNode(condition="^/index$", target="/index.php")
    second = RewriteNode(condition="^/index$", target="/other.php")
    node = RewritesNode(rewrites=[first, second])

    assert node.get_rewrite("^/index$") is first
    assert node.get_rewrite("^/nope$") is None
    assert node.rewrites_as_dict()["^/index$"]["target"] == "/index.php"


def test_server_lookup_and_walk() -> None:
    vhost = VirtualHostNode(name="shop.local")
    server = ServerNode(type="http", virtual_hosts=[vhost])
    root = AppserverNode(apps=[AppNode(name="shop")], servers=[server])

    assert server.get_virtual_host("shop.local") is vhost
    assert server.get_virtual_host("other") is None
    names = [node.node_name for node in root.walk()]
    assert names == ["appserver", "application", "server", "virtualHost"]


def test_attach_app_appends_or_replaces_by_primary_key() -> None:
    root = AppserverNode()
    shop = AppNode(name="shop")
    root.attach_app(shop)
    root.attach_app(AppNode(name="blog"))
    renamed = AppNode(uuid=shop.uuid, name="shop2")
    root.attach_app(renamed)

    assert [a.name for a in root.apps] == ["shop2", "blog"]
    assert root.get_app(shop.uuid) is renamed


def test_validate_unique_keys_rejects_duplicates() -> None:
    uuid = new_uuid()
    root = AppserverNode(apps=[AppNode(uuid=uuid, name="a"), AppNode(uuid=uuid, name="b")])
    with pytest.raises(MappingError, match="Duplicate"):
        root.validate_unique_keys()
