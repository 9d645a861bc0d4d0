"""HTTP and CLI request/response decorators.

Exports the building blocks hosts use most: the request and response
decorators, their factories and the static file guard.
"""

from courier.http.cli_request import CliRequest, run_cli
from courier.http.factory import RequestFactory, ResponseFactory
from courier.http.message import ServerMessage
from courier.http.methods import RequestMethod
from courier.http.request import Request
from courier.http.response import Response
from courier.http.routing import Route, Router
from courier.http.static_files import serve_static_file_if_present

__all__ = [
    "CliRequest",
    "Request",
    "RequestFactory",
    "RequestMethod",
    "Response",
    "ResponseFactory",
    "Route",
    "Router",
    "ServerMessage",
    "run_cli",
    "serve_static_file_if_present",
]
