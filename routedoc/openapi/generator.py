"""
OpenAPI 3.1.0 generation for routedoc controllers.

Orchestrates one generation pass: discover controller classes, collect
their operations, extract parameters, and assemble the document.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterator, List, Optional, Sequence, Union

from ..config import DocsConfig
from ..discovery import ControllerFinder, load_object
from ..faults import ControllerImportFault
from .assembler import DocumentAssembler, Route
from .collector import RouteCollector
from .parameters import ParameterExtractor
from .schema import SchemaRegistry, TypeSchemaResolver

logger = logging.getLogger("routedoc.openapi")

ControllerRef = Union[type, str]


class OpenAPIGenerator:
    """
    OpenAPI document generator.

    Every ``generate()`` call builds its own registry and route list, so one
    instance can be reused and separate instances can run side by side.

    Usage::

        generator = OpenAPIGenerator(
            DocsConfig(title="Shop API", controller_packages=["shop.controllers"]),
        )
        spec = generator.generate()

    Controllers can also be passed directly (classes or dotted identifiers)::

        OpenAPIGenerator(controllers=[UsersController, "shop.orders.OrdersController"])
    """

    def __init__(
        self,
        config: Optional[DocsConfig] = None,
        *,
        controllers: Optional[Sequence[ControllerRef]] = None,
        finder: Optional[ControllerFinder] = None,
    ):
        self.config = config or DocsConfig()
        self.controllers: List[ControllerRef] = list(controllers or [])
        self.finder = finder or ControllerFinder()

    def generate(self) -> Dict[str, Any]:
        """Generate the full OpenAPI document."""
        registry = SchemaRegistry(strict_names=self.config.strict_schema_names)
        collector = RouteCollector(TypeSchemaResolver(registry))
        extractor = ParameterExtractor()

        routes: List[Route] = []
        for handler_class in self.iter_controllers():
            for operation in collector.collect_operations(handler_class):
                routes.append((operation, extractor.extract(operation.descriptor)))

        logger.info("Collected %d operation(s)", len(routes))
        return DocumentAssembler(self.config).assemble(routes, registry)

    def generate_json(self, indent: Optional[int] = None) -> str:
        """Generate the document and encode it as JSON."""
        return json.dumps(self.generate(), indent=indent, ensure_ascii=False)

    def iter_controllers(self) -> Iterator[type]:
        """
        Controller classes in discovery order.

        Explicit controllers come first, in the given order, followed by the
        sorted scan of each configured package.

        Raises:
            ControllerImportFault: an identifier does not name a class.
            DiscoveryFault: a package cannot be scanned.
        """
        seen = set()
        identifiers = self.finder.find_all(self.config.controller_packages)

        for ref in [*self.controllers, *identifiers]:
            handler_class = self._load(ref)
            if handler_class in seen:
                continue
            seen.add(handler_class)
            yield handler_class

    @staticmethod
    def _load(ref: ControllerRef) -> type:
        if isinstance(ref, type):
            return ref
        obj = load_object(ref)
        if not isinstance(obj, type):
            raise ControllerImportFault(ref, f"{type(obj).__name__} is not a class")
        return obj
