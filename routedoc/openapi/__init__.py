"""
OpenAPI document generation.

Pipeline (leaves first):
- schema: TypeSchemaResolver + SchemaRegistry
- parameters: ParameterExtractor
- collector: RouteCollector
- assembler: DocumentAssembler
- generator: OpenAPIGenerator (orchestration)
"""

from .assembler import DocumentAssembler
from .collector import DEFAULT_TAG, Operation, RouteCollector, TagInfo, join_path
from .generator import OpenAPIGenerator
from .parameters import JSON_MEDIA_TYPE, ParameterExtractor, ParameterSet, RequestBody
from .schema import REF_PREFIX, SchemaRegistry, TypeSchemaResolver, primitive_schema, ref

__all__ = [
    # Schemas
    "SchemaRegistry",
    "TypeSchemaResolver",
    "primitive_schema",
    "ref",
    "REF_PREFIX",

    # Parameters
    "ParameterExtractor",
    "ParameterSet",
    "RequestBody",
    "JSON_MEDIA_TYPE",

    # Routes
    "RouteCollector",
    "Operation",
    "TagInfo",
    "DEFAULT_TAG",
    "join_path",

    # Document
    "DocumentAssembler",
    "OpenAPIGenerator",
]
