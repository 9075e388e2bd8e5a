"""
Parameter extraction.

Reads the bind-source markers of a handler's parameters and turns the bound
data-transfer types into query parameters or a JSON request body. Parameter
schemas are always inlined, never referenced.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..markers import JSON, QUERY
from ..metadata import OperationDescriptor, describe_type, is_user_class
from .schema import apply_field_metadata, primitive_schema

logger = logging.getLogger("routedoc.parameters")

JSON_MEDIA_TYPE = "application/json"


@dataclass
class RequestBody:
    content_schema: Dict[str, Any]
    required: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "required": self.required,
            "content": {
                JSON_MEDIA_TYPE: {
                    "schema": self.content_schema,
                },
            },
        }


@dataclass
class ParameterSet:
    """
    Inputs of one operation.

    Attributes:
        query: Query parameter name -> schema, in declaration order
        body: JSON request body, if any parameter is bound to ``json``
    """
    query: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    body: Optional[RequestBody] = None

    def query_parameters(self) -> List[Dict[str, Any]]:
        """Render query entries as OpenAPI parameter objects."""
        return [
            {
                "name": name,
                "in": "query",
                "required": False,
                "schema": schema,
            }
            for name, schema in self.query.items()
        ]


class ParameterExtractor:
    """Classifies bound handler parameters as query parameters or request body."""

    def extract(self, operation: OperationDescriptor) -> ParameterSet:
        params = ParameterSet()

        for param in operation.parameters:
            if param.source is None:
                # framework-injected
                continue

            if not is_user_class(param.type):
                logger.debug(
                    "Skipping %s.%s: bound parameter has no structured type (%r)",
                    operation.handler_name, param.name, param.type,
                )
                continue

            properties = self._inline_properties(param.type)

            if param.source == JSON:
                if params.body is not None:
                    logger.debug("%s: request body from %r replaces an earlier one",
                                  operation.handler_name, param.name)
                params.body = RequestBody(
                    content_schema={"type": "object", "properties": properties},
                    required=True,
                )
            elif param.source == QUERY:
                params.query.update(properties)
            else:
                logger.debug("%s.%s: ignoring unsupported bind source %r",
                             operation.handler_name, param.name, param.source)

        return params

    def _inline_properties(self, dto: type) -> Dict[str, Dict[str, Any]]:
        properties: Dict[str, Dict[str, Any]] = {}
        for dto_field in describe_type(dto).fields:
            properties[dto_field.name] = apply_field_metadata(
                primitive_schema(dto_field.type), dto_field,
            )
        return properties
