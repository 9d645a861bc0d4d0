"""Route path resolution.

Turns a raw request target into the lowercase segment tuple routers match
against::

    >>> PathResolver().resolve("/POST/User/123?x=1")
    ('post', 'user', '123')

Requests addressed to a front-controller script (``/index.php``) carry their
logical path in a query parameter instead::

    >>> PathResolver().resolve("/index.php", {"p": ["test", "post"]})
    ('test', 'post')

Resolution is free of side effects. Serving static files is a separate guard
(see ``courier.http.static_files``) that hosts call before resolving.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from starlette.datastructures import URL

from courier.core.config import RoutingConfig
from courier.core.types import PathSegments
from courier.http.message import parse_query_params


class PathResolver:
    """Resolve request targets into path segments.

    Args:
        script_extension: Suffix identifying front-controller scripts.
        path_query_param: Query parameter holding the path for such scripts.
    """

    def __init__(self, script_extension: str = ".php", path_query_param: str = "p") -> None:
        self.script_extension = script_extension.lower()
        self.path_query_param = path_query_param

    @classmethod
    def from_config(cls, config: RoutingConfig) -> PathResolver:
        return cls(config.script_extension, config.path_query_param)

    def is_script(self, path: str) -> bool:
        """Whether ``path`` addresses a front-controller script."""
        return bool(self.script_extension) and path.lower().endswith(self.script_extension)

    def resolve(
        self,
        raw_target: str | Sequence[str],
        query_params: Mapping[str, Any] | None = None,
    ) -> PathSegments:
        """Resolve a request target.

        Args:
            raw_target: URL or path string, or an already split path.
            query_params: Decoded query params of the request. When omitted,
                the query string of ``raw_target`` is used.

        Returns:
            PathSegments: Lowercase segments; empty for the root.
        """
        if not isinstance(raw_target, str):
            return self.resolve_segments(raw_target)

        if raw_target.startswith("/"):
            # "//a/b" would otherwise parse "a" as the host
            raw_target = "/" + raw_target.lstrip("/")
        url = URL(raw_target)
        if self.is_script(url.path):
            params = (
                query_params if query_params is not None else parse_query_params(url.query)
            )
            logical = params.get(self.path_query_param)
            if logical is None:
                return ()
            if isinstance(logical, str):
                return self.split(logical)
            return self.resolve_segments(logical)

        return self.split(url.path)

    @staticmethod
    def resolve_segments(segments: Sequence[Any]) -> PathSegments:
        """Lowercase pre-split segments, keeping order and empty entries."""
        return tuple(str(segment).lower() for segment in segments)

    @staticmethod
    def split(path: str) -> PathSegments:
        """Split a path on ``/``, dropping empty segments."""
        return tuple(segment.lower() for segment in path.split("/") if segment)
