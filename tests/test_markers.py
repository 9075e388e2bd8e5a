"""
Markers and descriptor extraction (markers.py, metadata.py).
"""

from typing import Annotated, Any, ClassVar, List, Optional

import pytest

from routedoc.markers import (
    CONTROLLER_ATTR,
    DELETE,
    GET,
    PATCH,
    POST,
    PUT,
    Controller,
    From,
    Property,
    Response,
    Route,
    Tag,
    has_controller_marker,
    is_response_model,
    response_model,
    route_markers,
)
from routedoc.metadata import (
    EMPTY,
    UnresolvedType,
    describe_controller,
    describe_type,
    is_user_class,
    qualified_name,
    short_name,
    strip_type,
)

from docs_fixtures.dto import (
    CreateUserRequest,
    Envelope,
    Ghost,
    OrderDto,
    TreeNode,
    UserDto,
)
from docs_fixtures.shop.plain import InheritedController, NotAController
from docs_fixtures.shop.users import UsersController


# ============================================================================
# Decorators
# ============================================================================

class TestRouteMarkers:

    @pytest.mark.parametrize("marker_cls, method", [
        (GET, "GET"), (POST, "POST"), (PUT, "PUT"), (PATCH, "PATCH"), (DELETE, "DELETE"),
    ])
    def test_shorthand_sets_method(self, marker_cls, method):
        @marker_cls("/items")
        def handler(self):
            pass

        marker = route_markers(handler)[0]
        assert marker.method == method
        assert marker.path == "/items"

    def test_generic_route_upper_cases_method(self):
        @Route("/x", method="patch", summary="Patch it")
        def handler(self):
            pass

        marker = route_markers(handler)[0]
        assert marker.method == "PATCH"
        assert marker.summary == "Patch it"
        assert marker.description is None

    def test_stacked_routes_keep_source_order(self):
        @GET("/first")
        @POST("/second")
        def handler(self):
            pass

        assert [m.path for m in route_markers(handler)] == ["/first", "/second"]

    def test_top_most_response_marker_wins(self):
        @Response(UserDto, is_array=True)
        @Response(OrderDto)
        def handler(self):
            pass

        assert handler.__response_marker__.model is UserDto
        assert handler.__response_marker__.is_array is True

    def test_undecorated_function_has_no_routes(self):
        def handler(self):
            pass

        assert route_markers(handler) == []


class TestClassMarkers:

    def test_controller_marker(self):
        @Controller(prefix="/api")
        class Api:
            pass

        assert has_controller_marker(Api)
        assert getattr(Api, CONTROLLER_ATTR).prefix == "/api"

    def test_controller_marker_not_inherited(self):
        assert has_controller_marker(UsersController)
        assert not has_controller_marker(InheritedController)
        assert not has_controller_marker(NotAController)

    def test_tags_keep_source_order(self):
        @Tag("First", "one")
        @Tag("Second")
        class Tagged:
            pass

        assert [t.name for t in Tagged.__tag_markers__] == ["First", "Second"]

    def test_response_model(self):
        @response_model
        class Dto:
            pass

        assert is_response_model(Dto)
        assert is_response_model(UserDto)
        assert not is_response_model(CreateUserRequest)
        assert not is_response_model(int)
        assert not is_response_model("UserDto")

    def test_from_and_property_are_values(self):
        assert From("json") == From("json")
        assert Property(example=1).description is None


# ============================================================================
# Names and type helpers
# ============================================================================

class TestNames:

    def test_qualified_name(self):
        assert qualified_name(UserDto) == "docs_fixtures.dto.UserDto"
        assert qualified_name(int) == "int"

    @pytest.mark.parametrize("name, expected", [
        ("docs_fixtures.dto.UserDto", "UserDto"),
        ("docs_fixtures.dto:UserDto", "UserDto"),
        ("UserDto", "UserDto"),
    ])
    def test_short_name(self, name, expected):
        assert short_name(name) == expected

    def test_strip_type(self):
        tp, extras = strip_type(Annotated[Optional[int], Property(example=3)])
        assert tp is int
        assert extras == (Property(example=3),)

    def test_strip_type_union_pipe(self):
        assert strip_type(int | None) == (int, ())

    def test_strip_type_leaves_real_unions(self):
        assert strip_type(int | str) == (int | str, ())

    @pytest.mark.parametrize("tp, expected", [
        (UserDto, True),
        (NotAController, True),
        (int, False),
        (list, False),
        (Any, False),
        (List[int], False),
        (None, False),
        (UnresolvedType("UserDto"), False),
    ])
    def test_is_user_class(self, tp, expected):
        assert is_user_class(tp) is expected


# ============================================================================
# Type descriptors
# ============================================================================

class TestDescribeType:

    def test_fields_in_declaration_order(self):
        descriptor = describe_type(UserDto)
        assert descriptor.short_name == "UserDto"
        assert [f.name for f in descriptor.fields] == ["id", "name", "rating", "active", "address"]

    def test_property_metadata(self):
        fields = {f.name: f for f in describe_type(UserDto).fields}
        assert fields["id"].type is int
        assert fields["id"].example == 1
        assert fields["id"].description == "User id"
        assert fields["name"].example is None

    def test_dataclass_field_metadata(self):
        note = {f.name: f for f in describe_type(OrderDto).fields}["note"]
        assert note.example == "leave at door"
        assert note.description == "Courier note"

    def test_optional_unwrapped(self):
        address = {f.name: f for f in describe_type(UserDto).fields}["address"]
        assert address.type.__name__ == "AddressDto"

    def test_forward_references_resolved(self):
        fields = {f.name: f for f in describe_type(TreeNode).fields}
        assert fields["parent"].type is TreeNode
        assert fields["children"].type == List[TreeNode]

    def test_private_and_classvar_skipped(self):
        assert [f.name for f in describe_type(Envelope).fields] == ["payload"]

    def test_fallback_resolves_remaining_hints(self):
        class Partial:
            known: "UserDto"
            optional: "Optional[TreeNode]"
            counter: "ClassVar[int]"
            missing: "NotDefinedAnywhere"  # noqa: F821
            broken: "List[int"

        fields = {f.name: f.type for f in describe_type(Partial).fields}

        assert fields == {
            "known": UserDto,
            "optional": TreeNode,
            "missing": UnresolvedType("NotDefinedAnywhere"),
            "broken": UnresolvedType("List[int"),
        }

    def test_unresolvable_annotation_degrades(self):
        fields = {f.name: f for f in describe_type(Ghost).fields}
        assert fields["count"].type is int
        assert fields["ghost"].type == UnresolvedType("MissingType")


# ============================================================================
# Controller descriptors
# ============================================================================

class TestDescribeController:

    def test_unmarked_class(self):
        assert describe_controller(NotAController) is None
        assert describe_controller(InheritedController) is None

    def test_controller_descriptor(self):
        descriptor = describe_controller(UsersController)

        assert descriptor.class_name == "UsersController"
        assert descriptor.qualified_name == "docs_fixtures.shop.users.UsersController"
        assert descriptor.prefix == "/users/"
        assert descriptor.tag.name == "Users"
        assert descriptor.tag.description == "User management"
        assert [op.handler_name for op in descriptor.operations] == ["index", "show", "create", "destroy"]

    def test_operation_descriptor(self):
        ops = {op.handler_name: op for op in describe_controller(UsersController).operations}

        index = ops["index"]
        assert index.http_method == "GET"
        assert index.summary == "List users"
        assert index.response.model is UserDto
        assert index.response.is_array is True
        assert index.handler is UsersController.__dict__["index"]

        create = ops["create"]
        assert [(p.name, p.source) for p in create.parameters] == [("body", "json"), ("request", None)]
        assert create.parameters[0].type is CreateUserRequest
        assert create.return_type is UserDto

        assert ops["destroy"].return_type is type(None)

    def test_missing_return_annotation(self):
        @Controller()
        class Bare:
            @GET("/x")
            def x(self):
                pass

        op = describe_controller(Bare).operations[0]
        assert op.return_type is EMPTY
        assert op.response is None
        assert op.parameters == ()

    def test_static_and_inherited_methods(self):
        class Base:
            @GET("/base")
            def base(self):
                pass

        @Controller("/child")
        class Child(Base):
            @staticmethod
            @POST("/static")
            def make():
                pass

        names = [op.handler_name for op in describe_controller(Child).operations]
        assert names == ["make", "base"]
