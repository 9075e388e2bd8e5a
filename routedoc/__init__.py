"""
Routedoc - OpenAPI 3.1.0 documents from marked controller classes.

Example:
    from typing import Annotated
    from routedoc import Controller, Tag, GET, POST, From, Response, response_model

    @response_model
    @dataclass
    class UserDto:
        id: int
        name: str

    @Controller(prefix="/users")
    @Tag("Users")
    class UsersController:

        @GET("/", summary="List users")
        @Response(UserDto, is_array=True)
        def index(self, filters: Annotated[UserFilter, From("query")]):
            ...

    spec = OpenAPIGenerator(controllers=[UsersController]).generate()
"""

__version__ = "0.1.0"

from .config import DocsConfig
from .faults import (
    CacheReadFault,
    CacheWriteFault,
    ConfigFault,
    ControllerImportFault,
    DiscoveryFault,
    Fault,
    FaultDomain,
    SchemaNameConflictFault,
    Severity,
)
from .markers import (
    DELETE,
    GET,
    HEAD,
    JSON,
    OPTIONS,
    PATCH,
    POST,
    PUT,
    QUERY,
    Controller,
    From,
    Property,
    Response,
    Route,
    Tag,
    response_model,
)
from .discovery import ControllerFinder
from .openapi import OpenAPIGenerator

__all__ = [
    "__version__",

    # Markers
    "Controller", "Tag", "Route",
    "GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS",
    "Response", "From", "Property", "response_model",
    "JSON", "QUERY",

    # Generation
    "OpenAPIGenerator",
    "ControllerFinder",
    "DocsConfig",

    # Faults
    "Fault", "FaultDomain", "Severity",
    "ConfigFault", "DiscoveryFault", "ControllerImportFault",
    "SchemaNameConflictFault", "CacheReadFault", "CacheWriteFault",
]
