"""
Type → JSON Schema resolution.

Converts declared field types into schema fragments and expands structured
response types into named component schemas. One ``SchemaRegistry`` is
shared by reference through a whole generation pass; visiting a name twice
is a no-op, which is what stops recursion on self-referential types.
"""

from __future__ import annotations

import collections.abc
import decimal
import logging
from typing import Any, Dict, Iterator, Optional, Set, get_args, get_origin

from ..faults import SchemaNameConflictFault
from ..markers import is_response_model
from ..metadata import (
    FieldDescriptor,
    UnresolvedType,
    describe_type,
    qualified_name,
    short_name,
    strip_type,
)

logger = logging.getLogger("routedoc.schema")

REF_PREFIX = "#/components/schemas/"


# ─── Type → JSON Schema mapping ──────────────────────────────────────────────

_PYTHON_TYPE_MAP: Dict[Any, str] = {
    int: "integer",
    float: "number",
    decimal.Decimal: "number",
    bool: "boolean",
}

_TYPE_NAME_MAP: Dict[str, str] = {
    "int": "integer",
    "integer": "integer",
    "float": "number",
    "double": "number",
    "bool": "boolean",
    "boolean": "boolean",
}

_ARRAY_ORIGINS = (
    list, set, frozenset, tuple,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Set,
    collections.abc.Iterable,
)


def ref(name: str) -> Dict[str, str]:
    """``$ref`` fragment pointing at a component schema."""
    return {"$ref": REF_PREFIX + name}


def primitive_schema(tp: Any) -> Dict[str, Any]:
    """
    Map a declared type onto a primitive schema.

    Integers, floats and booleans map to their JSON types; everything else,
    including a missing or unresolvable type, is a string.
    """
    tp, _ = strip_type(tp)
    if isinstance(tp, str):
        return {"type": _TYPE_NAME_MAP.get(tp.lower(), "string")}
    try:
        return {"type": _PYTHON_TYPE_MAP.get(tp, "string")}
    except TypeError:
        # unhashable annotation objects
        return {"type": "string"}


def array_item_type(tp: Any) -> Optional[Any]:
    """
    Element type of an array-like annotation.

    Returns ``None`` when ``tp`` is not array-like, ``Any`` for a bare
    ``list``/``tuple`` without element type.
    """
    if tp in (list, tuple, set, frozenset):
        return Any
    origin = get_origin(tp)
    if origin not in _ARRAY_ORIGINS:
        return None
    args = [a for a in get_args(tp) if a is not Ellipsis]
    return args[0] if args else Any


def apply_field_metadata(schema: Dict[str, Any], field: FieldDescriptor) -> Dict[str, Any]:
    """Attach ``example``/``description`` when the field declares them."""
    if field.example is not None:
        schema["example"] = field.example
    if field.description is not None:
        schema["description"] = field.description
    return schema


class SchemaRegistry:
    """
    Named component schemas collected during one generation pass.

    Keys are short type names. ``visit`` marks a name before its fields are
    resolved, so re-entrant requests for the same name return immediately;
    ``register`` stores the finished schema. Schemas keep completion order.
    """

    def __init__(self, strict_names: bool = False):
        self.strict_names = strict_names
        self._schemas: Dict[str, Dict[str, Any]] = {}
        self._visited: Set[str] = set()
        self._owners: Dict[str, str] = {}

    def visit(self, name: str, owner: str) -> bool:
        """
        Mark ``name`` as being collected for ``owner``.

        Returns:
            True if the name was not seen before and must be collected now.

        Raises:
            SchemaNameConflictFault: a different type already owns the name
                and ``strict_names`` is enabled.
        """
        if name not in self._visited:
            self._visited.add(name)
            self._owners[name] = owner
            return True

        registered = self._owners[name]
        if registered != owner:
            if self.strict_names:
                raise SchemaNameConflictFault(name, registered, owner)
            logger.warning(
                "Schema name %r already used by %s; %s is documented with that schema",
                name, registered, owner,
            )
        return False

    def register(self, name: str, schema: Dict[str, Any]) -> None:
        self._schemas[name] = schema

    def owner(self, name: str) -> Optional[str]:
        return self._owners.get(name)

    def get(self, name: str) -> Optional[Dict[str, Any]]:
        return self._schemas.get(name)

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return dict(self._schemas)

    def __contains__(self, name: object) -> bool:
        return name in self._schemas

    def __len__(self) -> int:
        return len(self._schemas)

    def __iter__(self) -> Iterator[str]:
        return iter(self._schemas)

    def __bool__(self) -> bool:
        return bool(self._schemas)


class TypeSchemaResolver:
    """
    Resolves field types into schema fragments against a ``SchemaRegistry``.

    Usage::

        registry = SchemaRegistry()
        resolver = TypeSchemaResolver(registry)
        resolver.collect_named_schema(UserDto)
        registry.to_dict()  # {"UserDto": {...}, "AddressDto": {...}}
    """

    def __init__(self, registry: SchemaRegistry):
        self.registry = registry

    def resolve_field_schema(self, field_type: Any) -> Dict[str, Any]:
        """Schema fragment for one field, expanding response models into ``$ref``."""
        tp, _ = strip_type(field_type)

        if is_response_model(tp):
            return self.reference(tp)

        item_type = array_item_type(tp)
        if item_type is not None:
            if item_type is Any:
                return {"type": "array", "items": {"type": "object"}}
            return {"type": "array", "items": self.resolve_field_schema(item_type)}

        return primitive_schema(tp)

    def reference(self, tp: Any) -> Dict[str, str]:
        """Collect ``tp`` and return a ``$ref`` to its short name."""
        self.collect_named_schema(tp)
        return ref(short_name(qualified_name(tp)))

    def collect_named_schema(self, type_ref: Any) -> None:
        """
        Register the object schema of ``type_ref`` under its short name.

        Idempotent: a name that was already visited is skipped, which also
        terminates self- and mutually-referential types.
        """
        if isinstance(type_ref, UnresolvedType) or not isinstance(type_ref, type):
            logger.debug("Skipping schema collection for unresolved type %r", type_ref)
            return

        owner = qualified_name(type_ref)
        name = short_name(owner)
        if not self.registry.visit(name, owner):
            return

        descriptor = describe_type(type_ref)
        properties: Dict[str, Any] = {}
        for field in descriptor.fields:
            schema = self.resolve_field_schema(field.type)
            if "$ref" not in schema:
                apply_field_metadata(schema, field)
            properties[field.name] = schema

        self.registry.register(name, {"type": "object", "properties": properties})
        logger.debug("Registered schema %s (%d properties)", name, len(properties))
