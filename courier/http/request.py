"""Request decorator.

``Request`` wraps an immutable ``ServerMessage`` and adds what a handler
needs on top of the raw message:

- **Typed method**: ``get_type()`` normalizes the method, unknown verbs are GET
- **Route path**: lowercase segments, resolved once and cached
- **Route lookup**: lazy and memoized through the bound router
- **Parameters**: query/post/put buckets and router-filled route params
- **Client info**: IP with proxy-header precedence, ajax detection
- **Feedback**: errors and notices, including pass-lists for the next request

All ``with_*`` methods are copy-on-write and return a new decorator bound to
the same router and settings.
"""

from __future__ import annotations

import io
from collections.abc import Mapping
from typing import Any, Final, Self
from urllib.parse import unquote

from loguru import logger
from starlette.datastructures import URL

from courier.core.config import Settings, get_settings
from courier.core.constants import (
    AJAX_REQUESTED_WITH,
    IP_SERVER_PARAMS,
    REQUESTED_WITH_HEADER,
)
from courier.core.exceptions import NotReady, RouteNotFound
from courier.core.redaction import redact_cookies, redact_headers
from courier.core.types import ParamBucket, PathSegments
from courier.http.body import ParameterBuckets
from courier.http.feedback import FeedbackMixin
from courier.http.message import HeaderValue, ServerMessage
from courier.http.methods import RequestMethod
from courier.http.path_resolver import PathResolver
from courier.http.routing import Route, Router
from courier.http.static_files import is_static_file, static_file_mime


class _Unresolved:
    def __repr__(self) -> str:
        return "<unresolved>"


_UNRESOLVED: Final = _Unresolved()


class Request(FeedbackMixin):
    """HTTP request decorator.

    Args:
        message: The wrapped server message.
        router: Router used to look up the route; required by ``get_route``.
        settings: Application settings; defaults to the cached settings.
        buckets: Pre-built parameter buckets. Derived from the message's query
            params and parsed body when omitted.
    """

    def __init__(
        self,
        message: ServerMessage,
        *,
        router: Router | None = None,
        settings: Settings | None = None,
        buckets: ParameterBuckets | None = None,
    ) -> None:
        self._message = message
        self._router = router
        self._settings = settings or get_settings()
        self._resolver = PathResolver.from_config(self._settings.routing_config)
        self._type = RequestMethod.parse(message.method)
        self._buckets = buckets or ParameterBuckets.seed(
            self._type, message.query_params, message.parsed_body
        )
        self._route_params: ParamBucket = {}
        self._path: PathSegments | None = None
        self._route: Route | None | _Unresolved = _UNRESOLVED
        self._previous: Request | None = None
        self._init_feedback()

    def _derive(self, message: ServerMessage) -> Request:
        return Request(message, router=self._router, settings=self._settings)

    @property
    def message(self) -> ServerMessage:
        return self._message

    @property
    def router(self) -> Router | None:
        return self._router

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def buckets(self) -> ParameterBuckets:
        return self._buckets

    @property
    def route_params(self) -> ParamBucket:
        """Mutable mapping the router fills with path parameters on a match."""
        return self._route_params

    @property
    def previous_request(self) -> Request | None:
        """The request this one follows in a redirect chain, if any."""
        return self._previous

    # Method and routing

    def get_method(self) -> str:
        return self._message.method

    def get_type(self) -> RequestMethod:
        return self._type

    def get_path(self) -> PathSegments:
        """Route path segments, resolved on first access."""
        if self._path is None:
            self._path = self._resolver.resolve(
                self._message.url.path, self._message.query_params
            )
        return self._path

    def get_route(self) -> Route | None:
        """Look up the route once; later calls return the cached outcome.

        Raises:
            NotReady: If the request has no router.
        """
        if isinstance(self._route, _Unresolved):
            if self._router is None:
                raise NotReady("Request has no router - pass router= to look up routes")
            self._route = self._router.get_route(
                self.get_type(), self.get_path(), self._route_params
            )
            logger.debug(
                "Resolved route",
                method=self.get_method(),
                path="/".join(self.get_path()),
                route=self._route.name if self._route is not None else None,
            )
        return self._route

    def handle(self) -> Any:  # noqa: ANN401 - whatever the route handler returns
        """Dispatch to the matched route.

        Raises:
            RouteNotFound: If no route matches the method and path.
        """
        route = self.get_route()
        if route is None:
            raise RouteNotFound(self.get_method(), self.get_path())
        return route.handle(self)

    # Parameters

    def set_params(self, params: Mapping[str, Any]) -> Self:
        """Replace the route parameters."""
        self._route_params.clear()
        self._route_params.update(params)
        return self

    def get_param(self, name: str, default: Any = None) -> Any:  # noqa: ANN401
        """Read a parameter; route params win over the merged request bucket."""
        if name in self._route_params:
            return self._route_params[name]
        return self._buckets.request.get(name, default)

    def get_get(self, name: str, default: Any = None) -> Any:  # noqa: ANN401
        return self._buckets.query.get(name, default)

    def get_post(self, name: str, default: Any = None) -> Any:  # noqa: ANN401
        """Read a field of the parsed body (form fields or decoded JSON object)."""
        parsed = self._message.parsed_body
        if isinstance(parsed, Mapping):
            return parsed.get(name, default)
        return self._buckets.post.get(name, default)

    # Client

    def get_ip(self) -> str:
        """Client IP: Client-IP header, then X-Forwarded-For, then the socket address.

        The first source present wins, even when its value is empty.

        Proxy headers are trusted as sent. Do not rely on this value behind
        proxies that pass client-supplied headers through.
        """
        params = self._message.server_params
        for key in IP_SERVER_PARAMS:
            value = params.get(key)
            if value is not None:
                return str(value)
        return ""

    def is_ajax(self) -> bool:
        return any(
            value.strip().lower() == AJAX_REQUESTED_WITH
            for value in self.get_header(REQUESTED_WITH_HEADER)
        )

    def is_static_file(self) -> bool:
        return is_static_file(self._message.url.path, self._settings)

    def get_static_file_mime(self) -> str:
        return static_file_mime(unquote(self._message.url.path), self._settings)

    # Feedback

    def set_previous_request(self, request: Request) -> Self:
        """Follow ``request`` in a redirect chain and show its pass messages first."""
        self._previous = request
        self.import_pass_messages(request)
        return self

    # Message delegation

    def get_protocol_version(self) -> str:
        return self._message.protocol_version

    def get_headers(self) -> dict[str, list[str]]:
        headers: dict[str, list[str]] = {}
        for name, value in self._message.headers.items():
            headers.setdefault(name, []).append(value)
        return headers

    def has_header(self, name: str) -> bool:
        return name.lower() in self._message.headers

    def get_header(self, name: str) -> list[str]:
        return self._message.headers.getlist(name)

    def get_header_line(self, name: str) -> str:
        return ", ".join(self.get_header(name))

    def get_body(self) -> io.BytesIO:
        """The shared body stream. Rewind it after reading."""
        return self._message.body

    def get_body_contents(self) -> bytes:
        """Read the whole body and rewind the stream."""
        stream = self._message.body
        stream.seek(0)
        content = stream.read()
        stream.seek(0)
        return content

    def get_request_target(self) -> str:
        if self._message.request_target:
            return self._message.request_target
        url = self._message.url
        target = url.path or "/"
        return f"{target}?{url.query}" if url.query else target

    def get_uri(self) -> URL:
        return self._message.url

    def get_server_params(self) -> dict[str, Any]:
        return dict(self._message.server_params)

    def get_cookie_params(self) -> dict[str, str]:
        return dict(self._message.cookies)

    def get_query_params(self) -> dict[str, Any]:
        return dict(self._message.query_params)

    def get_uploaded_files(self) -> dict[str, Any]:
        return dict(self._message.uploaded_files)

    def get_parsed_body(self) -> Any:  # noqa: ANN401 - form data, decoded JSON or None
        return self._message.parsed_body

    def get_attributes(self) -> dict[str, Any]:
        return dict(self._message.attributes)

    def get_attribute(self, name: str, default: Any = None) -> Any:  # noqa: ANN401
        return self._message.attributes.get(name, default)

    # Copy-on-write mutators

    def with_protocol_version(self, version: str) -> Request:
        return self._derive(self._message.with_protocol_version(version))

    def with_header(self, name: str, value: HeaderValue) -> Request:
        return self._derive(self._message.with_header(name, value))

    def with_added_header(self, name: str, value: HeaderValue) -> Request:
        return self._derive(self._message.with_added_header(name, value))

    def without_header(self, name: str) -> Request:
        return self._derive(self._message.without_header(name))

    def with_body(self, body: io.BytesIO) -> Request:
        return self._derive(self._message.with_body(body))

    def with_request_target(self, target: str) -> Request:
        return self._derive(self._message.with_request_target(target))

    def with_method(self, method: str) -> Request:
        return self._derive(self._message.with_method(method))

    def with_uri(self, uri: str | URL, preserve_host: bool = False) -> Request:
        return self._derive(self._message.with_uri(uri, preserve_host))

    def with_cookie_params(self, cookies: Mapping[str, str]) -> Request:
        return self._derive(self._message.with_cookie_params(cookies))

    def with_query_params(self, query: Mapping[str, Any]) -> Request:
        return self._derive(self._message.with_query_params(query))

    def with_uploaded_files(self, files: Mapping[str, Any]) -> Request:
        return self._derive(self._message.with_uploaded_files(files))

    def with_parsed_body(self, data: Any) -> Request:  # noqa: ANN401
        return self._derive(self._message.with_parsed_body(data))

    def with_attribute(self, name: str, value: Any) -> Request:  # noqa: ANN401
        return self._derive(self._message.with_attribute(name, value))

    def without_attribute(self, name: str) -> Request:
        return self._derive(self._message.without_attribute(name))

    # Serialization

    def to_dict(self) -> dict[str, Any]:
        """JSON-serializable public state.

        ``route_name`` is included once a route with a non-empty name has
        been resolved; serializing never triggers a route lookup. Credential
        headers and cookie values are redacted.
        """
        data: dict[str, Any] = {
            "method": self.get_method(),
            "type": self.get_type().value,
            "uri": str(self._message.url),
            "path": list(self.get_path()),
            "ip": self.get_ip(),
            "ajax": self.is_ajax(),
            "headers": redact_headers(self.get_headers()),
            "params": dict(self._route_params),
            **self._buckets.to_dict(),
            "cookies": redact_cookies(self.get_cookie_params()),
            "errors": self.get_errors(),
            "notices": self.get_notices(),
            "pass_errors": self.get_pass_errors(),
            "pass_notices": self.get_pass_notices(),
        }
        route = self._route
        if not isinstance(route, _Unresolved) and route is not None and route.name:
            data["route_name"] = route.name
        return data

    def __repr__(self) -> str:
        return f"Request(method={self.get_method()!r}, uri={str(self._message.url)!r})"
