"""Map request data onto validated, typed objects.

Mapping runs in three steps:

1. **Denormalize** the parsed body or query params with ``ObjectMapper``
2. **Validate constraints** declared on the model with ``RequestValidator``
3. **Run the model's own ``check()``** method, if it defines one

Steps 2 and 3 always both run, so a caller learns about every problem in one
round trip. Step 2 reports one failure per invalid field and step 3 adds one
more when the check fails. A single failure is raised as is; several raise a
``ValidationMultiFailure`` that keeps each of them apart.

Example:
    >>> mapper = RequestValidationMapper().set_request(request)
    >>> payload = mapper.map_body_to_object(CreateUser)
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Self

from loguru import logger
from pydantic import BaseModel

from courier.core.exceptions import NotReady, ValidationFailure, ValidationMultiFailure
from courier.validation.mapper import ObjectMapper
from courier.validation.result import (
    MappingFailed,
    MappingFailedMulti,
    MappingResult,
    collect,
)
from courier.validation.validator import RequestValidator

if TYPE_CHECKING:
    from courier.http.request import Request

NOT_SET_MESSAGE = "Request is not set - call set_request() before mapping"
CHECK_METHOD = "check"


class RequestValidationMapper:
    """Map request body or query data onto Pydantic models.

    Args:
        mapper: Denormalizer; a plain ``ObjectMapper`` when omitted.
        validator: Constraint validator; a plain ``RequestValidator`` when omitted.
    """

    def __init__(
        self,
        mapper: ObjectMapper | None = None,
        validator: RequestValidator | None = None,
    ) -> None:
        self.mapper = mapper or ObjectMapper()
        self.validator = validator or RequestValidator()
        self._request: Request | None = None

    @property
    def request(self) -> Request | None:
        return self._request

    def set_request(self, request: Request) -> Self:
        self._request = request
        return self

    def _bound_request(self) -> Request:
        if self._request is None:
            raise NotReady(NOT_SET_MESSAGE)
        return self._request

    # Tagged results

    def try_map_body[M: BaseModel](self, target: type[M]) -> MappingResult[M]:
        """Map the parsed body onto ``target`` without raising on invalid data.

        Raises:
            NotReady: If no request is bound.
        """
        return self._map(self._bound_request().get_parsed_body(), target, "body")

    def try_map_query[M: BaseModel](self, target: type[M]) -> MappingResult[M]:
        """Map the query params onto ``target`` without raising on invalid data.

        Raises:
            NotReady: If no request is bound.
        """
        return self._map(self._bound_request().get_query_params(), target, "query")

    # Raising wrappers

    def map_body_to_object[M: BaseModel](self, target: type[M]) -> M:
        """Map the parsed body onto ``target``.

        Raises:
            NotReady: If no request is bound.
            ValidationFailure: If a single field or only the check failed.
            ValidationMultiFailure: If more than one field or the check failed.
        """
        return self.try_map_body(target).unwrap()

    def map_query_to_object[M: BaseModel](self, target: type[M]) -> M:
        """Map the query params onto ``target``.

        Raises:
            NotReady: If no request is bound.
            ValidationFailure: If a single field or only the check failed.
            ValidationMultiFailure: If more than one field or the check failed.
        """
        return self.try_map_query(target).unwrap()

    def _map[M: BaseModel](
        self, data: Any, target: type[M], source: str  # noqa: ANN401
    ) -> MappingResult[M]:
        raw = data if isinstance(data, Mapping) else {}
        instance = self.mapper.map(raw, target)
        failures: list[ValidationFailure] = []

        try:
            instance = self.validator.validate_all(target, raw)
        except ValidationMultiFailure as e:
            failures.extend(e.failures)
        except ValidationFailure as e:
            failures.append(e)

        check = getattr(instance, CHECK_METHOD, None)
        if callable(check):
            try:
                check()
            except ValidationFailure as e:
                failures.append(e)

        result = collect(instance, failures)
        if isinstance(result, (MappingFailed, MappingFailedMulti)):
            logger.info(
                "Request {} does not map onto {}",
                source,
                target.__name__,
                failures=len(failures),
                fields=[error.field for failure in failures for error in failure.errors],
            )
        return result
