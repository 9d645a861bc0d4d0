"""Request method enum shared by HTTP and CLI requests."""

from enum import Enum


class RequestMethod(Enum):
    """Normalized request methods.

    ``UPDATE`` is accepted alongside ``PUT``/``PATCH`` for clients that
    tunnel updates through a custom verb. ``CLI`` marks command line requests.
    """

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"
    CLI = "CLI"

    @classmethod
    def parse(cls, value: str, default: "RequestMethod | None" = None) -> "RequestMethod":
        """Parse a method string case-insensitively.

        Unknown values fall back to ``default`` (GET when not given) instead
        of raising.
        """
        try:
            return cls(value.strip().upper())
        except ValueError:
            return default or cls.GET

    @property
    def is_update(self) -> bool:
        """Whether the method replaces or modifies an existing resource."""
        return self in (RequestMethod.PUT, RequestMethod.PATCH, RequestMethod.UPDATE)
