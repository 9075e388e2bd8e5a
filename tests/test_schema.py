"""
Type schema resolution and the schema registry.
"""

import decimal
import logging
from typing import Any, List, Optional, Sequence, Tuple

import pytest

from routedoc.faults import SchemaNameConflictFault
from routedoc.metadata import UnresolvedType
from routedoc.openapi.schema import (
    REF_PREFIX,
    SchemaRegistry,
    TypeSchemaResolver,
    array_item_type,
    primitive_schema,
    ref,
)

from docs_fixtures import other_dto
from docs_fixtures.dto import (
    AddressDto,
    Author,
    Envelope,
    Ghost,
    OrderDto,
    PlainDto,
    TreeNode,
    UserDto,
)


class TestPrimitiveSchema:

    @pytest.mark.parametrize("tp, expected", [
        (int, "integer"),
        (float, "number"),
        (decimal.Decimal, "number"),
        (bool, "boolean"),
        (str, "string"),
        (bytes, "string"),
        (dict, "string"),
        (None, "string"),
        (Optional[int], "integer"),
        (PlainDto, "string"),
        (UnresolvedType("Missing"), "string"),
    ])
    def test_python_types(self, tp, expected):
        assert primitive_schema(tp) == {"type": expected}

    @pytest.mark.parametrize("name, expected", [
        ("int", "integer"),
        ("Integer", "integer"),
        ("double", "number"),
        ("Boolean", "boolean"),
        ("datetime", "string"),
    ])
    def test_type_names(self, name, expected):
        assert primitive_schema(name) == {"type": expected}

    def test_ref(self):
        assert ref("UserDto") == {"$ref": REF_PREFIX + "UserDto"}
        assert REF_PREFIX == "#/components/schemas/"


class TestArrayItemType:

    def test_not_array(self):
        assert array_item_type(int) is None
        assert array_item_type(str) is None
        assert array_item_type(dict) is None

    def test_bare_containers(self):
        assert array_item_type(list) is Any
        assert array_item_type(List) is Any

    def test_parameterized(self):
        assert array_item_type(List[int]) is int
        assert array_item_type(list[UserDto]) is UserDto
        assert array_item_type(Sequence[str]) is str
        assert array_item_type(Tuple[int, ...]) is int


class TestSchemaRegistry:

    def test_visit_once(self, registry):
        assert registry.visit("UserDto", "a.UserDto") is True
        assert registry.visit("UserDto", "a.UserDto") is False
        assert registry.owner("UserDto") == "a.UserDto"

    def test_visited_but_not_registered(self, registry):
        registry.visit("UserDto", "a.UserDto")
        assert "UserDto" not in registry
        assert not registry
        assert len(registry) == 0

    def test_register(self, registry):
        registry.register("A", {"type": "object", "properties": {}})
        assert "A" in registry
        assert registry.get("A") == {"type": "object", "properties": {}}
        assert list(registry) == ["A"]
        assert registry.to_dict() == {"A": {"type": "object", "properties": {}}}

    def test_conflict_warns(self, registry, caplog):
        registry.visit("UserDto", "a.UserDto")
        with caplog.at_level(logging.WARNING, logger="routedoc.schema"):
            assert registry.visit("UserDto", "b.UserDto") is False
        assert "a.UserDto" in caplog.text
        assert registry.owner("UserDto") == "a.UserDto"

    def test_conflict_strict(self):
        registry = SchemaRegistry(strict_names=True)
        registry.visit("UserDto", "a.UserDto")

        with pytest.raises(SchemaNameConflictFault) as exc_info:
            registry.visit("UserDto", "b.UserDto")

        assert exc_info.value.code == "SCHEMA_NAME_CONFLICT"
        assert exc_info.value.metadata["conflicting"] == "b.UserDto"


class TestResolveFieldSchema:

    def test_primitive(self, resolver, registry):
        assert resolver.resolve_field_schema(int) == {"type": "integer"}
        assert not registry

    def test_response_model_becomes_ref(self, resolver, registry):
        assert resolver.resolve_field_schema(AddressDto) == ref("AddressDto")
        assert "AddressDto" in registry

    def test_optional_response_model(self, resolver):
        assert resolver.resolve_field_schema(Optional[AddressDto]) == ref("AddressDto")

    def test_arrays(self, resolver):
        assert resolver.resolve_field_schema(List[int]) == {"type": "array", "items": {"type": "integer"}}
        assert resolver.resolve_field_schema(list) == {"type": "array", "items": {"type": "object"}}
        assert resolver.resolve_field_schema(List[AddressDto]) == {
            "type": "array",
            "items": ref("AddressDto"),
        }

    def test_non_model_class_is_string(self, resolver, registry):
        assert resolver.resolve_field_schema(PlainDto) == {"type": "string"}
        assert not registry


class TestCollectNamedSchema:

    def test_nested_models(self, resolver, registry):
        resolver.collect_named_schema(UserDto)

        # completion order: nested schemas finish first
        assert list(registry) == ["AddressDto", "UserDto"]
        assert registry.get("UserDto") == {
            "type": "object",
            "properties": {
                "id": {"type": "integer", "example": 1, "description": "User id"},
                "name": {"type": "string"},
                "rating": {"type": "number"},
                "active": {"type": "boolean"},
                "address": ref("AddressDto"),
            },
        }
        assert registry.get("AddressDto") == {
            "type": "object",
            "properties": {
                "street": {"type": "string", "example": "Main st. 1"},
                "zip_code": {"type": "string"},
            },
        }

    def test_arrays_and_field_metadata(self, resolver, registry):
        resolver.collect_named_schema(OrderDto)

        assert list(registry) == ["AddressDto", "UserDto", "OrderLineDto", "OrderDto"]
        properties = registry.get("OrderDto")["properties"]
        assert properties["customer"] == ref("UserDto")
        assert properties["lines"] == {"type": "array", "items": ref("OrderLineDto")}
        assert properties["note"] == {
            "type": "string",
            "example": "leave at door",
            "description": "Courier note",
        }

    def test_self_reference_terminates(self, resolver, registry):
        resolver.collect_named_schema(TreeNode)

        assert list(registry) == ["TreeNode"]
        assert registry.get("TreeNode")["properties"] == {
            "value": {"type": "integer"},
            "parent": ref("TreeNode"),
            "children": {"type": "array", "items": ref("TreeNode")},
        }

    def test_mutual_reference_terminates(self, resolver, registry):
        resolver.collect_named_schema(Author)

        assert list(registry) == ["Book", "Author"]
        assert registry.get("Book")["properties"]["author"] == ref("Author")
        assert registry.get("Author")["properties"]["books"] == {"type": "array", "items": ref("Book")}

    def test_idempotent(self, resolver, registry):
        resolver.collect_named_schema(UserDto)
        first = registry.to_dict()
        resolver.collect_named_schema(UserDto)
        assert registry.to_dict() == first

    def test_private_classvar_and_plain_nested(self, resolver, registry):
        resolver.collect_named_schema(Envelope)
        assert registry.get("Envelope")["properties"] == {"payload": {"type": "string"}}

    def test_unresolved_annotation(self, resolver, registry):
        resolver.collect_named_schema(Ghost)
        assert registry.get("Ghost")["properties"] == {
            "count": {"type": "integer"},
            "ghost": {"type": "string"},
        }

    def test_non_types_are_skipped(self, resolver, registry):
        resolver.collect_named_schema(UnresolvedType("Missing"))
        resolver.collect_named_schema("docs_fixtures.dto.UserDto")
        assert not registry

    def test_short_name_collision_first_wins(self, resolver, registry):
        resolver.collect_named_schema(UserDto)
        resolver.collect_named_schema(other_dto.UserDto)

        assert "legacy" not in registry.get("UserDto")["properties"]
        assert registry.owner("UserDto") == "docs_fixtures.dto.UserDto"

    def test_short_name_collision_strict(self):
        resolver = TypeSchemaResolver(SchemaRegistry(strict_names=True))
        resolver.collect_named_schema(UserDto)

        with pytest.raises(SchemaNameConflictFault):
            resolver.collect_named_schema(other_dto.UserDto)
