"""Unit tests for tagged mapping results."""

import pytest

from courier.core.exceptions import ValidationFailure, ValidationMultiFailure
from courier.validation.result import (
    MappingFailed,
    MappingFailedMulti,
    MappingOk,
    collect,
)


@pytest.mark.unit
class TestMappingResult:
    """Test result variants and collection."""

    def test_ok(self) -> None:
        """Success unwraps to its value."""
        assert MappingOk(42).unwrap() == 42

    def test_failed_raises_its_failure(self) -> None:
        """A single failure is raised as is."""
        failure = ValidationFailure.for_field("name", "required")

        with pytest.raises(ValidationFailure) as exc_info:
            MappingFailed(failure).unwrap()

        assert exc_info.value is failure

    def test_multi_raises_aggregate(self) -> None:
        """Several failures are raised together, each kept apart."""
        first = ValidationFailure.for_field("name", "required")
        second = ValidationFailure.for_field("age", "too low")

        with pytest.raises(ValidationMultiFailure) as exc_info:
            MappingFailedMulti((first, second)).unwrap()

        assert list(exc_info.value) == [first, second]

    def test_collect(self) -> None:
        """collect picks the variant from the number of failures."""
        first = ValidationFailure.for_field("name", "required")
        second = ValidationFailure.for_field("age", "too low")

        assert collect("value", []) == MappingOk("value")
        assert collect("value", [first]) == MappingFailed(first)
        assert collect("value", [first, second]) == MappingFailedMulti((first, second))

    def test_frozen(self) -> None:
        """Results cannot be changed after creation."""
        result = MappingOk(1)

        with pytest.raises(AttributeError):
            result.value = 2  # type: ignore[misc]
