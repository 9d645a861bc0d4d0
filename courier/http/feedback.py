"""Error and notice accumulation for requests.

Messages added with ``add_error``/``add_notice`` belong to the request that is
being handled. Messages added with ``add_pass_error``/``add_pass_notice`` are
meant for the next request of a redirect chain; the next request imports
them through ``import_pass_messages`` and shows them before its own.
"""

from __future__ import annotations

from typing import Self

from courier.core.types import Notice


class FeedbackMixin:
    """Ordered error and notice lists with pass-through lists."""

    def _init_feedback(self) -> None:
        self._errors: list[str] = []
        self._notices: list[Notice] = []
        self._pass_errors: list[str] = []
        self._pass_notices: list[Notice] = []

    def add_error(self, error: str) -> Self:
        self._errors.append(error)
        return self

    def add_notice(self, notice: Notice) -> Self:
        """Add a notice: a string or ``{"content": ..., "title"?: ..., "type"?: ...}``."""
        self._notices.append(notice)
        return self

    def add_pass_error(self, error: str) -> Self:
        self._pass_errors.append(error)
        return self

    def add_pass_notice(self, notice: Notice) -> Self:
        self._pass_notices.append(notice)
        return self

    def get_errors(self) -> list[str]:
        return list(self._errors)

    def get_notices(self) -> list[Notice]:
        return list(self._notices)

    def get_pass_errors(self) -> list[str]:
        return list(self._pass_errors)

    def get_pass_notices(self) -> list[Notice]:
        return list(self._pass_notices)

    def import_pass_messages(self, previous: FeedbackMixin) -> None:
        """Prepend the pass lists of ``previous`` to this object's own lists."""
        self._errors = previous.get_pass_errors() + self._errors
        self._notices = previous.get_pass_notices() + self._notices
