"""
Documentation service.

Serves the generated document through an optional cache and renders the
Swagger UI page. In debug mode the cache is bypassed so every request sees
the current controllers.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from jinja2 import Environment, select_autoescape

from .cache import DocumentCache, FileDocumentCache, MemoryDocumentCache
from .config import DocsConfig
from .docs_controller import swagger_controller_for
from .openapi.generator import OpenAPIGenerator

logger = logging.getLogger("routedoc.service")

SWAGGER_UI_VERSION = "5.18.2"

_SWAGGER_UI_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <title>{{ title }} - API Documentation</title>
    <link rel="icon" type="image/png"
          href="https://cdn.jsdelivr.net/npm/swagger-ui-dist@{{ version }}/favicon-32x32.png">
    <link rel="stylesheet"
          href="https://cdn.jsdelivr.net/npm/swagger-ui-dist@{{ version }}/swagger-ui.css">
    <style>
        html { box-sizing: border-box; overflow-y: scroll; }
        *, *:before, *:after { box-sizing: inherit; }
        body { margin: 0; background: #fafafa; }
        .topbar { display: none !important; }
    </style>
</head>
<body>
    <div id="swagger-ui"></div>
    <script src="https://cdn.jsdelivr.net/npm/swagger-ui-dist@{{ version }}/swagger-ui-bundle.js">
    </script>
    <script src="https://cdn.jsdelivr.net/npm/swagger-ui-dist@{{ version }}/swagger-ui-standalone-preset.js">
    </script>
    <script>
        window.onload = () => {
            window.ui = SwaggerUIBundle({
                url: {{ spec_url | tojson }},
                dom_id: '#swagger-ui',
                deepLinking: true,
                presets: [
                    SwaggerUIBundle.presets.apis,
                    SwaggerUIStandalonePreset,
                ],
                layout: 'StandaloneLayout',
                defaultModelsExpandDepth: 1,
                docExpansion: 'list',
                filter: true,
            });
        };
    </script>
</body>
</html>"""

_env = Environment(autoescape=select_autoescape(default_for_string=True))


def cache_from_config(config: DocsConfig) -> DocumentCache:
    """File cache when ``cache_path`` is set, in-memory cache otherwise."""
    if config.cache_path:
        return FileDocumentCache(config.cache_path, ttl=config.cache_ttl)
    return MemoryDocumentCache(ttl=config.cache_ttl)


def render_swagger_html(config: DocsConfig) -> str:
    """Render the Swagger UI page for ``config``."""
    template = _env.from_string(_SWAGGER_UI_TEMPLATE)
    return template.render(
        title=config.title,
        version=SWAGGER_UI_VERSION,
        spec_url=config.openapi_json_path,
    )


class DocsService:
    """
    Entry point used by the HTTP layer.

    Usage::

        service = DocsService(DocsConfig.from_env(".env"))
        spec = service.openapi_spec()
    """

    def __init__(
        self,
        config: Optional[DocsConfig] = None,
        *,
        generator: Optional[OpenAPIGenerator] = None,
        cache: Optional[DocumentCache] = None,
        include_docs_controller: bool = True,
    ):
        self.config = config or DocsConfig()
        if generator is None:
            controllers = []
            if include_docs_controller:
                controllers.append(swagger_controller_for(self.config))
            generator = OpenAPIGenerator(self.config, controllers=controllers)
        self.generator = generator
        self.cache = cache if cache is not None else cache_from_config(self.config)

    def openapi_spec(self) -> Dict[str, Any]:
        """Current document, from cache unless running in debug mode."""
        if self.config.debug:
            return self.generator.generate()

        spec = self.cache.get()
        if spec is not None:
            return spec

        spec = self.generator.generate()
        self.cache.store(spec)
        logger.info("Stored freshly generated document in %s", type(self.cache).__name__)
        return spec

    def swagger_html(self) -> str:
        return render_swagger_html(self.config)
