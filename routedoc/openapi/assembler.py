"""
Document assembly.

Merges collected operations and the schema registry into one OpenAPI
document, built as plain dicts and lists ready for ``json.dumps``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..config import DocsConfig
from .collector import Operation
from .parameters import JSON_MEDIA_TYPE, ParameterSet
from .schema import SchemaRegistry

logger = logging.getLogger("routedoc.assembler")

Route = Tuple[Operation, ParameterSet]


class DocumentAssembler:
    """
    Builds the final document from ``(Operation, ParameterSet)`` pairs.

    Paths keep discovery order; a ``(path, method)`` pair seen twice keeps
    the later operation. Tags are deduplicated by name, the first
    description wins.
    """

    def __init__(self, config: Optional[DocsConfig] = None):
        self.config = config or DocsConfig()

    def assemble(self, routes: Iterable[Route], registry: SchemaRegistry) -> Dict[str, Any]:
        paths: Dict[str, Dict[str, Any]] = {}
        tags: Dict[str, str] = {}

        for operation, params in routes:
            methods = paths.setdefault(operation.path, {})
            if operation.http_method in methods:
                logger.debug("%s %s redeclared by %s, keeping the later operation",
                             operation.http_method.upper(), operation.path, operation.operation_id)
            methods[operation.http_method] = self._build_operation(operation, params)
            tags.setdefault(operation.tag.name, operation.tag.description)

        spec: Dict[str, Any] = {
            "openapi": self.config.openapi_version,
            "info": self._build_info(),
            "servers": self._build_servers(),
            "tags": [{"name": name, "description": description} for name, description in tags.items()],
            "paths": paths,
        }

        if registry:
            spec["components"] = {"schemas": registry.to_dict()}

        logger.info("Assembled document: %d path(s), %d schema(s)", len(paths), len(registry))
        return spec

    # ── Sections ─────────────────────────────────────────────────────────

    def _build_info(self) -> Dict[str, str]:
        return {
            "title": self.config.title,
            "version": self.config.version,
            "description": self.config.description,
        }

    def _build_servers(self) -> List[Dict[str, str]]:
        return [
            {"url": self.config.base_url, "description": self.config.server_description},
        ]

    def _build_operation(self, operation: Operation, params: ParameterSet) -> Dict[str, Any]:
        """Build one OpenAPI operation object."""
        result: Dict[str, Any] = {
            "summary": operation.summary,
            "operationId": operation.operation_id,
            "tags": [operation.tag.name],
            "responses": {
                "200": {
                    "description": self.config.response_description,
                    "content": {
                        JSON_MEDIA_TYPE: {
                            "schema": operation.response_schema,
                        },
                    },
                },
            },
        }

        if params.body is not None:
            result["requestBody"] = params.body.to_dict()

        if operation.description:
            result["description"] = operation.description

        if params.query:
            result["parameters"] = params.query_parameters()

        return result
