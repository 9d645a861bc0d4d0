"""ASGI host for Courier routers.

``CourierApp`` serves a router over ASGI. For every HTTP request it:

1. Serves the file directly when the path addresses a static file, reading
   it in a threadpool
2. Builds a ``Request`` through ``RequestFactory.from_starlette``
3. Dispatches it to the matched route; sync handlers run in a threadpool
   and coroutine handlers are awaited
4. Converts the handler result into a response
5. Turns raised errors into ``ErrorResponse`` payloads

Run it with any ASGI server::

    uvicorn myproject.app:app

where ``app = CourierApp(router)``.
"""

from __future__ import annotations

import inspect
import time
from typing import Any

from loguru import logger
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request as StarletteRequest
from starlette.responses import Response as StarletteResponse
from starlette.types import Receive, Scope, Send

from courier.api.error_handler import error_response_for
from courier.api.schemas.errors import ErrorResponse
from courier.api.schemas.success import SuccessResponse
from courier.core.config import Settings, get_settings
from courier.core.logging import setup_logging
from courier.http.factory import RequestFactory
from courier.http.response import Response
from courier.http.routing import Router
from courier.http.static_files import serve_static_file_if_present

NO_CONTENT = 204


def to_response(result: Any) -> Response:  # noqa: ANN401 - whatever a handler returns
    """Convert a handler result into a response.

    - ``Response``: returned as is
    - Starlette response: wrapped
    - ``ErrorResponse``/``SuccessResponse``: rendered with their own status
    - ``None``: empty 204 response
    - ``bytes``/``str``: raw body
    - anything else: JSON body

    Raises:
        SerializationError: If the result cannot be encoded as JSON.
    """
    if isinstance(result, Response):
        return result
    if isinstance(result, StarletteResponse):
        return Response(result)
    if isinstance(result, (ErrorResponse, SuccessResponse)):
        return result.to_response()
    if result is None:
        return Response().with_status(NO_CONTENT)
    if isinstance(result, bytes):
        return Response().with_body(result)
    if isinstance(result, str):
        return Response().with_string_body(result).with_header(
            "Content-Type", "text/plain; charset=utf-8"
        )
    return Response().with_json_body(result)


class CourierApp:
    """ASGI application dispatching requests to a router.

    Args:
        router: Router the routes are looked up in.
        settings: Application settings; defaults to the cached settings.
    """

    def __init__(self, router: Router, settings: Settings | None = None) -> None:
        self.router = router
        self.settings = settings or get_settings()
        setup_logging(self.settings)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await self._lifespan(receive, send)
            return
        if scope["type"] != "http":
            raise ValueError(f"Unsupported ASGI scope type: {scope['type']}")

        start_time = time.perf_counter()
        request = StarletteRequest(scope, receive)
        response = await run_in_threadpool(
            serve_static_file_if_present, request.url.path, self.settings
        )
        if response is None:
            response = await self._dispatch(request)

        logger.info(
            "{} {} {}",
            request.method,
            request.url.path,
            response.get_status_code(),
            method=request.method,
            path=request.url.path,
            status_code=response.get_status_code(),
            duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            client_ip=request.client.host if request.client else None,
        )
        await response(scope, receive, send)

    async def _dispatch(self, starlette_request: StarletteRequest) -> Response:
        try:
            request = await RequestFactory.from_starlette(
                starlette_request, self.router, self.settings
            )
            result = await run_in_threadpool(request.handle)
            if inspect.isawaitable(result):
                result = await result
            return to_response(result)
        except Exception as exc:  # noqa: BLE001 - every error is rendered as a payload
            payload, _ = error_response_for(
                exc,
                self.settings,
                {"method": starlette_request.method, "path": starlette_request.url.path},
            )
            return payload.to_response()

    @staticmethod
    async def _lifespan(receive: Receive, send: Send) -> None:
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return
