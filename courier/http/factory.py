"""Request and response factories.

``RequestFactory`` turns raw server messages (or Starlette requests) into
``Request`` decorators, decoding JSON bodies on the way. ``ResponseFactory``
builds ``Response`` decorators from status, headers and body parts.
"""

from __future__ import annotations

import io
from collections.abc import Mapping
from typing import Any

from loguru import logger
from starlette.datastructures import FormData, UploadFile
from starlette.requests import Request as StarletteRequest

from courier.core.config import Settings
from courier.core.constants import CONTENT_TYPE_HEADER, DEFAULT_PROTOCOL_VERSION
from courier.core.serialization import encode_json
from courier.http.body import BodyIngestor, ParameterBuckets
from courier.http.message import (
    HeaderValue,
    ServerMessage,
    build_server_params,
    parse_query_params,
)
from courier.http.methods import RequestMethod
from courier.http.request import Request
from courier.http.response import Response
from courier.http.routing import Router

FORM_CONTENT_TYPES = frozenset({"application/x-www-form-urlencoded", "multipart/form-data"})


def _media_type(content_type: str) -> str:
    return content_type.split(";", 1)[0].strip().lower()


def split_form(form: FormData) -> tuple[dict[str, Any], dict[str, Any]]:
    """Split form data into plain fields and uploaded files.

    Keys ending in ``[]`` collect every value into a list, like query strings.
    """
    fields: dict[str, Any] = {}
    files: dict[str, Any] = {}
    for key, value in form.multi_items():
        target = files if isinstance(value, UploadFile) else fields
        if key.endswith("[]"):
            target.setdefault(key[:-2], []).append(value)
        else:
            target[key] = value
    return fields, files


class RequestFactory:
    """Build ``Request`` decorators."""

    @staticmethod
    def create_stream(content: bytes | str = b"") -> io.BytesIO:
        """Create a body stream positioned at the start."""
        return io.BytesIO(content.encode("utf-8") if isinstance(content, str) else content)

    @classmethod
    def from_message(
        cls,
        message: ServerMessage,
        router: Router | None = None,
        settings: Settings | None = None,
    ) -> Request:
        """Wrap a server message, decoding a JSON body into the parameter buckets.

        The decoded object becomes the message's parsed body and the body
        stream is rewound, so handlers can read the raw body again.

        Raises:
            MalformedBody: If a JSON body is not a valid JSON object.
        """
        method = RequestMethod.parse(message.method)
        buckets = ParameterBuckets.seed(method, message.query_params, message.parsed_body)
        decoded = BodyIngestor().ingest(
            message.headers.getlist(CONTENT_TYPE_HEADER), method, message.body, buckets
        )
        if decoded is not None:
            message = message.with_parsed_body(decoded)
        message.body.seek(0)
        return Request(message, router=router, settings=settings, buckets=buckets)

    @classmethod
    async def from_starlette(
        cls,
        request: StarletteRequest,
        router: Router | None = None,
        settings: Settings | None = None,
    ) -> Request:
        """Build a request from a Starlette request.

        Reads the body, form fields and uploaded files, and derives CGI-style
        server params (``REQUEST_METHOD``, ``REQUEST_URI``, ``REMOTE_ADDR``,
        ``HTTP_*`` headers and so on) from the ASGI scope.
        """
        body = await request.body()
        parsed_body: dict[str, Any] | None = None
        uploaded_files: dict[str, Any] = {}
        if _media_type(request.headers.get(CONTENT_TYPE_HEADER, "")) in FORM_CONTENT_TYPES:
            parsed_body, uploaded_files = split_form(await request.form())

        protocol_version = request.scope.get("http_version", DEFAULT_PROTOCOL_VERSION)
        message = ServerMessage(
            method=request.method,
            url=request.url,
            headers=request.headers,
            body=io.BytesIO(body),
            protocol_version=protocol_version,
            server_params=build_server_params(
                request.method,
                request.url,
                request.headers,
                protocol_version=protocol_version,
                remote_addr=request.client.host if request.client else None,
            ),
            cookies=dict(request.cookies),
            query_params=parse_query_params(request.query_params),
            parsed_body=parsed_body,
            uploaded_files=uploaded_files,
        )
        logger.debug(
            "Built request from ASGI scope",
            method=request.method,
            path=request.url.path,
        )
        return cls.from_message(message, router=router, settings=settings)


class ResponseFactory:
    """Build ``Response`` decorators."""

    @staticmethod
    def create_stream(content: bytes | str = b"") -> io.BytesIO:
        return RequestFactory.create_stream(content)

    def create_response(self, code: int = 200, reason_phrase: str = "") -> Response:
        return self.create_full_response(code, reason=reason_phrase)

    def create_full_response(
        self,
        code: int = 200,
        headers: Mapping[str, HeaderValue] | None = None,
        body: io.BytesIO | bytes | str | None = None,
        version: str = DEFAULT_PROTOCOL_VERSION,
        reason: str | None = None,
    ) -> Response:
        """Create a response from all of its parts."""
        response = Response(protocol_version=version).with_status(code, reason or "")
        for name, value in (headers or {}).items():
            response = response.with_header(name, value)
        if isinstance(body, str):
            response = response.with_string_body(body)
        elif body is not None:
            response = response.with_body(body)
        return response

    def create_json_response(
        self,
        data: Any,  # noqa: ANN401 - any JSON-serializable value
        code: int = 200,
        headers: Mapping[str, HeaderValue] | None = None,
        version: str = DEFAULT_PROTOCOL_VERSION,
        reason: str | None = None,
    ) -> Response:
        """Create a JSON response.

        Raises:
            SerializationError: If the data cannot be encoded.
        """
        content = encode_json(data)
        response = self.create_full_response(code, headers, content, version, reason)
        return response.with_header(CONTENT_TYPE_HEADER, "application/json")
