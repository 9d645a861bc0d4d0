"""Tagged outcomes of mapping request data onto a typed object.

A mapping either succeeds with a fully validated object or fails with one or
more validation failures. There is no partial result.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NoReturn

from courier.core.exceptions import ValidationFailure, ValidationMultiFailure


@dataclass(frozen=True, slots=True)
class MappingOk[T]:
    """The mapped, validated object."""

    value: T

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True, slots=True)
class MappingFailed:
    """Exactly one validation pass failed."""

    failure: ValidationFailure

    def unwrap(self) -> NoReturn:
        raise self.failure


@dataclass(frozen=True, slots=True)
class MappingFailedMulti:
    """More than one validation failed; each failure is kept apart."""

    failures: tuple[ValidationFailure, ...]

    def unwrap(self) -> NoReturn:
        raise ValidationMultiFailure(self.failures)


type MappingResult[T] = MappingOk[T] | MappingFailed | MappingFailedMulti


def collect[T](value: T, failures: list[ValidationFailure]) -> MappingResult[T]:
    """Turn the failures of all validation passes into a result."""
    if not failures:
        return MappingOk(value)
    if len(failures) == 1:
        return MappingFailed(failures[0])
    return MappingFailedMulti(tuple(failures))
