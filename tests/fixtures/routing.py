"""In-memory router used by the test suite."""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from courier.core.types import ParamBucket, PathSegments
from courier.http.methods import RequestMethod


@dataclass
class FakeRoute:
    """Route calling a plain function with the request."""

    name: str
    handler: Callable[[Any], Any]

    def handle(self, request: Any) -> Any:  # noqa: ANN401
        return self.handler(request)


@dataclass
class FakeRouter:
    """Router matching exact segments; ``{name}`` segments capture a param."""

    routes: list[tuple[RequestMethod, PathSegments, FakeRoute]] = field(default_factory=list)
    lookups: list[tuple[RequestMethod, PathSegments]] = field(default_factory=list)

    def add(
        self,
        method: RequestMethod,
        pattern: str,
        handler: Callable[[Any], Any],
        name: str = "",
    ) -> FakeRoute:
        segments = tuple(segment.lower() for segment in pattern.split("/") if segment)
        route = FakeRoute(name, handler)
        self.routes.append((method, segments, route))
        return route

    def get_route(
        self,
        method: RequestMethod,
        path: PathSegments,
        params: ParamBucket,
    ) -> FakeRoute | None:
        self.lookups.append((method, path))
        for route_method, pattern, route in self.routes:
            if route_method is not method or len(pattern) != len(path):
                continue
            captured: dict[str, str] = {}
            for expected, actual in zip(pattern, path, strict=True):
                if expected.startswith("{") and expected.endswith("}"):
                    captured[expected[1:-1]] = actual
                elif expected != actual:
                    break
            else:
                params.update(captured)
                return route
        return None
