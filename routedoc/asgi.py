"""
ASGI application serving the documentation endpoints.

Routes ``GET <openapi_json_path>`` and ``GET <docs_path>`` to the
``SwaggerController``; everything else answers 404, other methods 405.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from .docs_controller import swagger_controller_for
from .faults import Fault
from .service import DocsService

logger = logging.getLogger("routedoc.asgi")

Scope = Dict[str, Any]
Receive = Callable[[], Awaitable[Dict[str, Any]]]
Send = Callable[[Dict[str, Any]], Awaitable[None]]


class DocsApp:
    """
    Minimal ASGI application.

    Usage::

        app = create_app(DocsService(config))
        uvicorn.run(app)
    """

    def __init__(self, service: DocsService):
        self.service = service
        self.controller = swagger_controller_for(service.config)(service)
        self.routes: Dict[str, Tuple[str, Callable[[], Any]]] = {
            service.config.openapi_json_path: ("application/json", self.controller.openapi_spec),
            service.config.docs_path: ("text/html; charset=utf-8", self.controller.docs_page),
        }

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await self._lifespan(receive, send)
            return
        if scope["type"] != "http":
            return

        route = self.routes.get(scope["path"])
        if route is None:
            await self._send(send, 404, "application/json", {"error": "Not Found"})
            return
        if scope["method"] not in ("GET", "HEAD"):
            await self._send(send, 405, "application/json", {"error": "Method Not Allowed"},
                             extra_headers=[(b"allow", b"GET, HEAD")])
            return

        content_type, handler = route
        try:
            result = handler()
        except Fault as fault:
            logger.error("Documentation request failed: %s", fault)
            await self._send(send, 500, "application/json", {"error": fault.message, "code": fault.code})
            return

        await self._send(send, 200, content_type, result, head=scope["method"] == "HEAD")

    @staticmethod
    async def _lifespan(receive: Receive, send: Send) -> None:
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    @staticmethod
    async def _send(
        send: Send,
        status: int,
        content_type: str,
        payload: Any,
        *,
        head: bool = False,
        extra_headers: Optional[List[Tuple[bytes, bytes]]] = None,
    ) -> None:
        if isinstance(payload, str):
            body = payload.encode("utf-8")
        else:
            body = json.dumps(payload, ensure_ascii=False).encode("utf-8")

        headers = [
            (b"content-type", content_type.encode("latin-1")),
            (b"content-length", str(len(body)).encode("latin-1")),
        ]
        headers.extend(extra_headers or [])

        await send({"type": "http.response.start", "status": status, "headers": headers})
        await send({"type": "http.response.body", "body": b"" if head else body})


def create_app(service: Optional[DocsService] = None) -> DocsApp:
    return DocsApp(service or DocsService())
