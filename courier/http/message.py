"""Immutable server request message.

``ServerMessage`` is the value the request decorator wraps. It replaces
implicit process globals with one explicit object: method, URL, headers,
body stream, server params, cookies, query params, parsed body, uploaded
files and attributes.

Parsing is delegated to Starlette: ``URL`` splits the request URI,
``Headers`` stores case-insensitive multi-valued headers, and
``QueryParams`` decodes the query string. Every ``with_*`` method returns a
new message and leaves the receiver untouched; the body stream is shared.
"""

from __future__ import annotations

import io
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from starlette.datastructures import URL, Headers, MutableHeaders, QueryParams

from courier.core.constants import DEFAULT_PROTOCOL_VERSION

type HeaderValue = str | Iterable[str]


def parse_query_params(query: str | QueryParams) -> dict[str, Any]:
    """Decode a query string into a parameter mapping.

    Keys ending in ``[]`` collect every value into a list under the bare key
    (``p[]=a&p[]=b`` gives ``{"p": ["a", "b"]}``); for other repeated keys the
    last value wins.
    """
    params = query if isinstance(query, QueryParams) else QueryParams(query)
    parsed: dict[str, Any] = {}
    for key in params:
        values = params.getlist(key)
        if key.endswith("[]"):
            parsed[key[:-2]] = values
        else:
            parsed[key] = values[-1]
    return parsed


def build_server_params(
    method: str,
    url: URL,
    headers: Headers,
    *,
    protocol_version: str = DEFAULT_PROTOCOL_VERSION,
    remote_addr: str | None = None,
    extra: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Build CGI-style server params for a request.

    Every header becomes an ``HTTP_*`` entry, so proxy headers such as
    ``Client-IP`` and ``X-Forwarded-For`` appear as ``HTTP_CLIENT_IP`` and
    ``HTTP_X_FORWARDED_FOR``.
    """
    params: dict[str, Any] = {
        "SERVER_PROTOCOL": f"HTTP/{protocol_version}",
        "REQUEST_METHOD": method,
        "REQUEST_URI": url.path + (f"?{url.query}" if url.query else ""),
        "QUERY_STRING": url.query,
    }
    if url.hostname:
        params["SERVER_NAME"] = url.hostname
    if url.port:
        params["SERVER_PORT"] = url.port
    params["HTTPS"] = "on" if url.scheme == "https" else "off"
    for name, value in headers.items():
        key = "HTTP_" + name.upper().replace("-", "_")
        params.setdefault(key, value)
    if remote_addr:
        params["REMOTE_ADDR"] = remote_addr
    if extra:
        params.update(extra)
    return params


def _header_values(value: HeaderValue) -> list[str]:
    if isinstance(value, str):
        return [value]
    return [str(item) for item in value]


class ServerMessage(BaseModel):
    """Immutable server-side HTTP request message."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    method: str = "GET"
    url: URL = Field(default_factory=lambda: URL("/"))
    headers: Headers = Field(default_factory=Headers)
    body: io.BytesIO = Field(default_factory=io.BytesIO)
    protocol_version: str = DEFAULT_PROTOCOL_VERSION
    server_params: dict[str, Any] = Field(default_factory=dict)
    cookies: dict[str, str] = Field(default_factory=dict)
    query_params: dict[str, Any] = Field(default_factory=dict)
    parsed_body: Any = None
    uploaded_files: dict[str, Any] = Field(default_factory=dict)
    attributes: dict[str, Any] = Field(default_factory=dict)
    request_target: str | None = None

    @classmethod
    def create(
        cls,
        method: str,
        uri: str | URL,
        headers: Mapping[str, HeaderValue] | None = None,
        body: bytes | str = b"",
        *,
        server_params: Mapping[str, Any] | None = None,
        cookies: Mapping[str, str] | None = None,
        parsed_body: Any = None,  # noqa: ANN401 - form data or decoded JSON
        uploaded_files: Mapping[str, Any] | None = None,
        protocol_version: str = DEFAULT_PROTOCOL_VERSION,
    ) -> ServerMessage:
        """Create a message from raw request parts.

        Query params are decoded from the URI, and server params are derived
        from the method, URI and headers, then overlaid with ``server_params``.
        """
        url = uri if isinstance(uri, URL) else URL(uri)
        raw_headers = [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, values in (headers or {}).items()
            for value in _header_values(values)
        ]
        header_map = Headers(raw=raw_headers)
        content = body.encode() if isinstance(body, str) else body
        return cls(
            method=method,
            url=url,
            headers=header_map,
            body=io.BytesIO(content),
            protocol_version=protocol_version,
            server_params=build_server_params(
                method,
                url,
                header_map,
                protocol_version=protocol_version,
                extra=server_params,
            ),
            cookies=dict(cookies or {}),
            query_params=parse_query_params(url.query),
            parsed_body=parsed_body,
            uploaded_files=dict(uploaded_files or {}),
        )

    def _replace(self, **changes: Any) -> ServerMessage:  # noqa: ANN401
        return self.model_copy(update=changes)

    # Headers

    def _edit_headers(self) -> MutableHeaders:
        return MutableHeaders(raw=list(self.headers.raw))

    def with_header(self, name: str, value: HeaderValue) -> ServerMessage:
        headers = self._edit_headers()
        del headers[name]
        for item in _header_values(value):
            headers.append(name, item)
        return self._replace(headers=Headers(raw=headers.raw))

    def with_added_header(self, name: str, value: HeaderValue) -> ServerMessage:
        headers = self._edit_headers()
        for item in _header_values(value):
            headers.append(name, item)
        return self._replace(headers=Headers(raw=headers.raw))

    def without_header(self, name: str) -> ServerMessage:
        headers = self._edit_headers()
        del headers[name]
        return self._replace(headers=Headers(raw=headers.raw))

    # Request line

    def with_method(self, method: str) -> ServerMessage:
        return self._replace(method=method)

    def with_protocol_version(self, version: str) -> ServerMessage:
        return self._replace(protocol_version=version)

    def with_request_target(self, target: str) -> ServerMessage:
        return self._replace(request_target=target)

    def with_uri(self, uri: str | URL, preserve_host: bool = False) -> ServerMessage:
        """Return a message with a new URI.

        The Host header follows the new URI unless ``preserve_host`` is set
        and the message already carries a Host header.
        """
        url = uri if isinstance(uri, URL) else URL(uri)
        message = self._replace(url=url)
        if url.netloc and not (preserve_host and "host" in self.headers):
            message = message.with_header("host", url.netloc)
        return message

    # Body and parameters

    def with_body(self, body: io.BytesIO) -> ServerMessage:
        return self._replace(body=body)

    def with_cookie_params(self, cookies: Mapping[str, str]) -> ServerMessage:
        return self._replace(cookies=dict(cookies))

    def with_query_params(self, query: Mapping[str, Any]) -> ServerMessage:
        return self._replace(query_params=dict(query))

    def with_parsed_body(self, data: Any) -> ServerMessage:  # noqa: ANN401
        return self._replace(parsed_body=data)

    def with_uploaded_files(self, files: Mapping[str, Any]) -> ServerMessage:
        return self._replace(uploaded_files=dict(files))

    def with_attribute(self, name: str, value: Any) -> ServerMessage:  # noqa: ANN401
        return self._replace(attributes={**self.attributes, name: value})

    def without_attribute(self, name: str) -> ServerMessage:
        attributes = dict(self.attributes)
        attributes.pop(name, None)
        return self._replace(attributes=attributes)
