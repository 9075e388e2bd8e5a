"""
Route collection.

Reads one controller's descriptor and produces a flat list of operations
with fully resolved paths, tags and response schemas.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..discovery import load_type
from ..metadata import (
    EMPTY,
    ControllerDescriptor,
    OperationDescriptor,
    ResponseDescriptor,
    TagDescriptor,
    describe_controller,
    is_user_class,
    strip_type,
)
from .schema import TypeSchemaResolver, array_item_type

logger = logging.getLogger("routedoc.collector")


@dataclass(frozen=True)
class TagInfo:
    name: str
    description: str

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "description": self.description}


DEFAULT_TAG = TagInfo(name="Default", description="Basic operations")


@dataclass(frozen=True)
class Operation:
    """
    One documented (path, method) combination.

    Attributes:
        path: Full path, always with exactly one leading "/"
        http_method: Lower-case HTTP method
        operation_id: Handler identifier
        summary: Declared summary or the handler identifier
        description: Declared description or ""
        tag: Resolved grouping tag
        handler: The underlying function
        descriptor: Descriptor the operation was collected from
        response_schema: Schema of the 200 response body
    """
    path: str
    http_method: str
    operation_id: str
    summary: str
    description: str
    tag: TagInfo
    handler: Any = field(default=None, compare=False, repr=False)
    descriptor: Optional[OperationDescriptor] = field(default=None, compare=False, repr=False)
    response_schema: Dict[str, Any] = field(default_factory=lambda: {"type": "object"})


def join_path(prefix: str, path: str) -> str:
    """
    Join a controller prefix and an operation path.

    ``join_path("/users/", "profile") == "/users/profile"``
    """
    full_path = f"{(prefix or '').rstrip('/')}/{(path or '').lstrip('/')}"
    return "/" + full_path.lstrip("/")


def resolve_tag(tag: Optional[TagDescriptor]) -> TagInfo:
    if tag is None:
        return DEFAULT_TAG
    description = tag.description
    if description is None:
        description = f"Operations on {tag.name}"
    return TagInfo(name=tag.name, description=description)


class RouteCollector:
    """
    Collects operations from controller classes.

    Response schemas are resolved eagerly, so collecting also fills the
    resolver's schema registry.
    """

    def __init__(self, resolver: TypeSchemaResolver):
        self.resolver = resolver

    def collect_operations(self, handler_class: Any) -> List[Operation]:
        """Operations declared by ``handler_class`` (empty without a controller marker)."""
        descriptor = describe_controller(handler_class)
        if descriptor is None:
            logger.debug("%r has no controller marker, skipping", handler_class)
            return []
        return self.collect_from_descriptor(descriptor)

    def collect_from_descriptor(self, descriptor: ControllerDescriptor) -> List[Operation]:
        tag = resolve_tag(descriptor.tag)
        operations = []

        for op in descriptor.operations:
            operations.append(Operation(
                path=join_path(descriptor.prefix, op.path),
                http_method=op.http_method.lower(),
                operation_id=op.handler_name,
                summary=op.summary if op.summary is not None else op.handler_name,
                description=op.description or "",
                tag=tag,
                handler=op.handler,
                descriptor=op,
                response_schema=self.response_schema(op),
            ))

        logger.debug("Collected %d operation(s) from %s", len(operations), descriptor.qualified_name)
        return operations

    def response_schema(self, op: OperationDescriptor) -> Dict[str, Any]:
        """
        Schema of the success response.

        An explicit ``@Response`` model wins; otherwise the return
        annotation decides. Anything unrecognised is a generic object.
        """
        model = self._response_model(op.response)
        if model is not None:
            schema = self.resolver.reference(model)
            if op.response.is_array:
                return {"type": "array", "items": schema}
            return schema

        return_type, _ = strip_type(op.return_type)
        if return_type is EMPTY or return_type is None or return_type is type(None):
            return {"type": "object"}

        item_type = array_item_type(return_type)
        if item_type is not None:
            item_type, _ = strip_type(item_type)
            if item_type is not Any and is_user_class(item_type):
                return {"type": "array", "items": self.resolver.reference(item_type)}
            return {"type": "array", "items": {"type": "object"}}

        if is_user_class(return_type):
            return self.resolver.reference(return_type)

        return {"type": "object"}

    @staticmethod
    def _response_model(response: Optional[ResponseDescriptor]) -> Optional[type]:
        if response is None or not response.model:
            return None
        model = response.model
        if isinstance(model, str):
            model = load_type(model)
        return model if is_user_class(model) else None
