"""Controller documenting the documentation endpoints themselves."""

from typing import TYPE_CHECKING, Any, Dict

from .config import DocsConfig
from .markers import GET, Controller, Tag

if TYPE_CHECKING:
    from .service import DocsService

DOCS_TAG = "Swagger (Documentation)"
DOCS_TAG_DESCRIPTION = "Documentation endpoints"

_SPEC_SUMMARY = "Get documentation"
_SPEC_DESCRIPTION = "Returns the OpenAPI document used by the documentation viewer"
_PAGE_SUMMARY = "Documentation viewer"


@Controller(prefix="")
@Tag(DOCS_TAG, DOCS_TAG_DESCRIPTION)
class SwaggerController:
    """Serves the document and the viewer on the default paths."""

    def __init__(self, service: "DocsService"):
        self.service = service

    @GET("/openapi.json", summary=_SPEC_SUMMARY, description=_SPEC_DESCRIPTION)
    def openapi_spec(self) -> Dict[str, Any]:
        return self.service.openapi_spec()

    @GET("/docs", summary=_PAGE_SUMMARY)
    def docs_page(self) -> str:
        return self.service.swagger_html()


def swagger_controller_for(config: DocsConfig) -> type:
    """
    Docs controller whose documented paths match ``config``.

    The default paths reuse ``SwaggerController``; custom ones get a
    subclass carrying its own markers.
    """
    defaults = DocsConfig()
    if (config.openapi_json_path, config.docs_path) == (defaults.openapi_json_path, defaults.docs_path):
        return SwaggerController

    @Controller(prefix="")
    @Tag(DOCS_TAG, DOCS_TAG_DESCRIPTION)
    class ConfiguredSwaggerController(SwaggerController):

        @GET(config.openapi_json_path, summary=_SPEC_SUMMARY, description=_SPEC_DESCRIPTION)
        def openapi_spec(self) -> Dict[str, Any]:
            return super().openapi_spec()

        @GET(config.docs_path, summary=_PAGE_SUMMARY)
        def docs_page(self) -> str:
            return super().docs_page()

    return ConfiguredSwaggerController
