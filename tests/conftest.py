"""
Shared test fixtures for the routedoc test suite.
"""

import pytest

from routedoc.config import DocsConfig
from routedoc.openapi.collector import RouteCollector
from routedoc.openapi.parameters import ParameterExtractor
from routedoc.openapi.schema import SchemaRegistry, TypeSchemaResolver


@pytest.fixture
def registry():
    return SchemaRegistry()


@pytest.fixture
def resolver(registry):
    return TypeSchemaResolver(registry)


@pytest.fixture
def collector(resolver):
    return RouteCollector(resolver)


@pytest.fixture
def extractor():
    return ParameterExtractor()


@pytest.fixture
def config():
    return DocsConfig(base_url="https://api.example.test")
