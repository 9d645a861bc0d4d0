"""Response decorator over a Starlette response.

``Response`` is immutable from the caller's point of view: every ``with_*``
method builds a new Starlette response and returns a new decorator, so the
receiver can keep being shared. Encoding helpers serialize first and only
then build the new instance, so a failed encode never leaves a half-updated
response behind.

The decorator is itself an ASGI application and can be returned from an ASGI
host as is.
"""

from __future__ import annotations

import io
from collections.abc import Iterable
from http import HTTPStatus
from typing import Any

from starlette.datastructures import MutableHeaders
from starlette.responses import Response as StarletteResponse
from starlette.types import Receive, Scope, Send

from courier.core.constants import (
    BODYLESS_STATUSES,
    CONTENT_TYPE_HEADER,
    DEFAULT_PROTOCOL_VERSION,
    JSON_CONTENT_TYPE,
    XML_CONTENT_TYPE,
)
from courier.core.serialization import encode_json, encode_xml

type HeaderValue = str | Iterable[str]

MIN_STATUS_CODE = 100
MAX_STATUS_CODE = 599


def default_reason_phrase(status_code: int) -> str:
    """Standard reason phrase for a status code, or "" when unknown."""
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return ""


def _header_values(value: HeaderValue) -> list[str]:
    if isinstance(value, str):
        return [value]
    return [str(item) for item in value]


def _build(
    status_code: int, raw_headers: list[tuple[bytes, bytes]], body: bytes
) -> StarletteResponse:
    response = StarletteResponse(content=body, status_code=status_code)
    headers = [(name, value) for name, value in raw_headers if name != b"content-length"]
    if status_code >= 200 and status_code not in BODYLESS_STATUSES:  # noqa: PLR2004
        headers.append((b"content-length", str(len(body)).encode("latin-1")))
    response.raw_headers = headers
    return response


class Response:
    """Immutable HTTP response decorator.

    Args:
        response: Starlette response to wrap; an empty 200 response when omitted.
        protocol_version: HTTP protocol version, e.g. "1.1".
        reason_phrase: Reason phrase; the standard phrase for the status when
            omitted or empty.
    """

    def __init__(
        self,
        response: StarletteResponse | None = None,
        *,
        protocol_version: str = DEFAULT_PROTOCOL_VERSION,
        reason_phrase: str | None = None,
    ) -> None:
        if response is None:
            response = _build(HTTPStatus.OK.value, [], b"")
        self._response = response
        self._protocol_version = protocol_version
        self._reason_phrase = reason_phrase or default_reason_phrase(response.status_code)

    def _replace(
        self,
        *,
        status_code: int | None = None,
        raw_headers: list[tuple[bytes, bytes]] | None = None,
        body: bytes | None = None,
        protocol_version: str | None = None,
        reason_phrase: str | None = None,
    ) -> Response:
        status = self._response.status_code if status_code is None else status_code
        response = _build(
            status,
            list(self._response.raw_headers) if raw_headers is None else raw_headers,
            self._response.body if body is None else body,
        )
        return Response(
            response,
            protocol_version=protocol_version or self._protocol_version,
            reason_phrase=self._reason_phrase if reason_phrase is None else reason_phrase,
        )

    def _edit_headers(self) -> MutableHeaders:
        return MutableHeaders(raw=list(self._response.raw_headers))

    # Starlette / ASGI

    @property
    def starlette_response(self) -> StarletteResponse:
        """The wrapped Starlette response."""
        return self._response

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self._response(scope, receive, send)

    # Status line

    def get_status_code(self) -> int:
        return self._response.status_code

    def get_reason_phrase(self) -> str:
        return self._reason_phrase

    def with_status(self, code: int, reason_phrase: str = "") -> Response:
        """Return a response with another status code.

        Raises:
            ValueError: If ``code`` is outside 100-599.
        """
        if not MIN_STATUS_CODE <= code <= MAX_STATUS_CODE:
            raise ValueError(f"Invalid HTTP status code: {code}")
        return self._replace(
            status_code=code,
            reason_phrase=reason_phrase or default_reason_phrase(code),
        )

    def get_protocol_version(self) -> str:
        return self._protocol_version

    def with_protocol_version(self, version: str) -> Response:
        return self._replace(protocol_version=version)

    # Headers

    def get_headers(self) -> dict[str, list[str]]:
        """All headers, keyed by lowercase name, in insertion order."""
        headers: dict[str, list[str]] = {}
        for name, value in self._response.raw_headers:
            headers.setdefault(name.decode("latin-1"), []).append(value.decode("latin-1"))
        return headers

    def has_header(self, name: str) -> bool:
        return name.lower() in self._response.headers

    def get_header(self, name: str) -> list[str]:
        return self._response.headers.getlist(name)

    def get_header_line(self, name: str) -> str:
        return ", ".join(self.get_header(name))

    def with_header(self, name: str, value: HeaderValue) -> Response:
        headers = self._edit_headers()
        del headers[name]
        for item in _header_values(value):
            headers.append(name, item)
        return self._replace(raw_headers=headers.raw)

    def with_added_header(self, name: str, value: HeaderValue) -> Response:
        headers = self._edit_headers()
        for item in _header_values(value):
            headers.append(name, item)
        return self._replace(raw_headers=headers.raw)

    def without_header(self, name: str) -> Response:
        headers = self._edit_headers()
        del headers[name]
        return self._replace(raw_headers=headers.raw)

    # Body

    def get_body(self) -> io.BytesIO:
        """A fresh stream over the body; reading it never affects the response."""
        return io.BytesIO(self._response.body)

    def get_body_contents(self) -> bytes:
        return bytes(self._response.body)

    def with_body(self, body: io.BytesIO | bytes) -> Response:
        if isinstance(body, io.BytesIO):
            body = body.getvalue()
        return self._replace(body=bytes(body))

    def with_string_body(self, body: str) -> Response:
        return self.with_body(body.encode("utf-8"))

    def with_json_body(self, data: Any) -> Response:  # noqa: ANN401
        """Return a response with ``data`` encoded as JSON.

        Raises:
            SerializationError: If the data cannot be encoded. The receiver
                is unchanged.
        """
        content = encode_json(data)
        return self.with_body(content).with_header(CONTENT_TYPE_HEADER, JSON_CONTENT_TYPE)

    def with_xml_body(self, data: Any) -> Response:  # noqa: ANN401
        """Return a response with ``data`` encoded as XML.

        Raises:
            SerializationError: If the data cannot be encoded. The receiver
                is unchanged.
        """
        content = encode_xml(data)
        return self.with_body(content).with_header(CONTENT_TYPE_HEADER, XML_CONTENT_TYPE)

    def __repr__(self) -> str:
        return (
            f"Response(status_code={self.get_status_code()}, "
            f"headers={self.get_headers()!r})"
        )
