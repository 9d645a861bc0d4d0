"""Command line requests.

A CLI request carries a command path (``"cache/clear"`` or a pre-split
sequence) instead of a URL. The route is looked up eagerly with the ``CLI``
method, and the remaining process arguments are handed to the handler
unparsed.

``run_cli`` is the entry point hosts call from ``__main__``::

    sys.exit(run_cli(router, sys.argv, known_commands=commands))
"""

from __future__ import annotations

import difflib
import sys
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any, Self, TextIO

from loguru import logger

from courier.core.exceptions import MissingCommandPath, RouteNotFound
from courier.core.types import ParamBucket, PathSegments
from courier.http.feedback import FeedbackMixin
from courier.http.methods import RequestMethod
from courier.http.path_resolver import PathResolver
from courier.http.routing import Route, Router

SUGGESTION_CUTOFF = 0.6


def suggest_command(command: str, known_commands: Iterable[str]) -> str | None:
    """Closest known command to ``command``, if any is similar enough."""
    matches = difflib.get_close_matches(
        command, list(known_commands), n=1, cutoff=SUGGESTION_CUTOFF
    )
    return matches[0] if matches else None


class CliRequest(FeedbackMixin):
    """Request issued from the command line.

    Args:
        path: Command path, as a ``/`` separated string or a sequence whose
            elements are used as given, lowercased.
        router: Router the route is looked up in.
        argv: Process arguments; everything after the command path becomes
            ``args``. Defaults to ``sys.argv``.
        known_commands: Command names used to suggest a correction for an
            unknown command.

    Raises:
        MissingCommandPath: If the path has no segments.
    """

    def __init__(
        self,
        path: str | Sequence[str],
        router: Router | None = None,
        argv: Sequence[str] | None = None,
        known_commands: Iterable[str] = (),
    ) -> None:
        self._init_feedback()
        if isinstance(path, str):
            self.path: PathSegments = PathResolver.split(path)
        else:
            self.path = PathResolver.resolve_segments(path)
        if not self.path:
            raise MissingCommandPath()

        self.params: ParamBucket = {}
        self.known_commands = list(known_commands)
        self.args = list(sys.argv if argv is None else argv)[2:]
        self.route: Route | None = (
            router.get_route(RequestMethod.CLI, self.path, self.params) if router else None
        )
        logger.debug(
            "Resolved CLI route",
            path="/".join(self.path),
            route=self.route.name if self.route is not None else None,
        )

    def get_type(self) -> RequestMethod:
        return RequestMethod.CLI

    def get_method(self) -> str:
        return RequestMethod.CLI.value

    def get_path(self) -> PathSegments:
        return self.path

    def get_route(self) -> Route | None:
        return self.route

    def handle(self) -> Any:  # noqa: ANN401 - whatever the command returns
        """Run the matched command.

        Raises:
            RouteNotFound: If no command matches; carries a suggestion when a
                known command is close to the requested one.
        """
        if self.route is None:
            command = "/".join(self.path)
            raise RouteNotFound(
                self.get_method(),
                self.path,
                suggestion=suggest_command(command, self.known_commands),
            )
        return self.route.handle(self)

    def set_params(self, params: Mapping[str, Any]) -> Self:
        self.params.clear()
        self.params.update(params)
        return self

    def get_param(self, name: str, default: Any = None) -> Any:  # noqa: ANN401
        return self.params.get(name, default)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": RequestMethod.CLI.value,
            "path": list(self.path),
            "args": list(self.args),
            "params": dict(self.params),
            "errors": self.get_errors(),
            "notices": self.get_notices(),
        }
        if self.route is not None and self.route.name:
            data["route_name"] = self.route.name
        return data


def run_cli(
    router: Router,
    argv: Sequence[str] | None = None,
    known_commands: Iterable[str] = (),
    stderr: TextIO | None = None,
) -> int:
    """Dispatch a command line invocation.

    Args:
        router: Router holding the CLI routes.
        argv: Process arguments, ``argv[1]`` being the command path.
        known_commands: Command names used for suggestions.
        stderr: Stream errors are reported on; defaults to ``sys.stderr``.

    Returns:
        int: 0 on success, 1 when the command is missing or unknown.
    """
    argv = list(sys.argv if argv is None else argv)
    out = stderr or sys.stderr
    caller = Path(argv[0]).name if argv else "courier"

    try:
        request = CliRequest(argv[1] if len(argv) > 1 else "", router, argv, known_commands)
        request.handle()
    except MissingCommandPath as e:
        logger.warning("CLI request without command path")
        print(e.message, file=out)
        print(f"Usage: {caller} <command> [args...]", file=out)
        return 1
    except RouteNotFound as e:
        command = "/".join(e.path)
        logger.warning("Unknown CLI command", path=command, suggestion=e.suggestion)
        hint = f' Did you mean: "{e.suggestion}"?' if e.suggestion else ""
        print(f'Unknown request "{command}".{hint}', file=out)
        print(f"\nTo list all available commands use:\n{caller} list", file=out)
        return 1
    return 0
