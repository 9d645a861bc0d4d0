"""Success response schema."""

from __future__ import annotations

from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    model_serializer,
)

from courier.api.constants import SUCCESS_MESSAGE
from courier.api.schemas.errors import omit_empty
from courier.http.response import Response


class SuccessResponse(BaseModel):
    """Payload acknowledging a successful operation.

    Optional fields are left out of the serialized payload when empty.
    """

    model_config = ConfigDict(frozen=True)

    message: str = Field(
        default=SUCCESS_MESSAGE,
        description="Short human-readable summary",
        examples=["Message"],
    )

    detail: str | None = Field(
        default=None,
        description="Longer description",
        examples=["Description"],
    )

    values: dict[str, Any] | None = Field(
        default=None,
        description="Additional data about the outcome",
        examples=[{"key1": "value1", "key2": "value2"}],
    )

    @model_serializer(mode="wrap")
    def serialize_without_empty(
        self, handler: SerializerFunctionWrapHandler
    ) -> dict[str, Any]:
        return omit_empty(handler(self), frozenset({"message"}))

    def to_response(self, status_code: int = 200) -> Response:
        return Response().with_status(status_code).with_json_body(self)
