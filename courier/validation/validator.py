"""Constraint validation for mapped request objects.

Pydantic enforces the constraints declared on a model: required fields,
string length bounds, numeric ranges and nested models, all reported in one
pass. ``RequestValidator`` turns its errors into one ``ValidationFailure``
per invalid field. Violations on a single field raise that failure; violations
on several fields raise a ``ValidationMultiFailure`` listing each field's
failure separately.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ValidationError

from courier.core.exceptions import FieldError, ValidationFailure, ValidationMultiFailure


def _field_name(location: tuple[int | str, ...]) -> str:
    return ".".join(str(part) for part in location) or "__root__"


def _group_by_field(errors: list[FieldError]) -> dict[str, list[FieldError]]:
    grouped: dict[str, list[FieldError]] = {}
    for error in errors:
        grouped.setdefault(error.field, []).append(error)
    return grouped


class RequestValidator:
    """Validate raw data against a model's declared constraints."""

    def validate_all[M: BaseModel](
        self, target: type[M], data: Mapping[str, Any] | None
    ) -> M:
        """Validate ``data`` against every constraint of ``target``.

        Values are coerced the way Pydantic's lax mode does, so query string
        values such as ``"2"`` satisfy integer fields.

        Returns:
            M: The validated instance.

        Raises:
            ValidationFailure: If the constraints of exactly one field are violated.
            ValidationMultiFailure: If several fields are invalid, holding one
                failure per field.
        """
        try:
            return target.model_validate(data if data is not None else {})
        except ValidationError as e:
            errors = [
                FieldError(_field_name(error["loc"]), error["msg"], error["type"])
                for error in e.errors()
            ]
            by_field = _group_by_field(errors)
            message = f"{target.__name__} has {len(by_field)} invalid field(s)"
            if len(by_field) == 1:
                raise ValidationFailure(message, errors, e) from e

            failures = [
                ValidationFailure(f"{target.__name__}.{field}: {group[0].message}", group, e)
                for field, group in by_field.items()
            ]
            raise ValidationMultiFailure(failures, message, e) from e
