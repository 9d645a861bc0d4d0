"""Protocols for the router supplied by the host framework.

Courier never matches routes itself. A router receives the normalized method,
the resolved path and a mutable parameter mapping; on a match it fills the
mapping with the route's path parameters and returns the route.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from courier.core.types import ParamBucket, PathSegments
    from courier.http.methods import RequestMethod


@runtime_checkable
class Route(Protocol):
    """A matched route."""

    @property
    def name(self) -> str: ...

    def handle(self, request: Any) -> Any: ...  # noqa: ANN401 - handlers return anything


@runtime_checkable
class Router(Protocol):
    """Route lookup collaborator."""

    def get_route(
        self,
        method: RequestMethod,
        path: PathSegments,
        params: ParamBucket,
    ) -> Route | None: ...
