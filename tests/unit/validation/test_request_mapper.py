"""Unit tests for RequestValidationMapper."""

from typing import Any

import pytest

from courier.core.exceptions import NotReady, ValidationFailure, ValidationMultiFailure
from courier.http.request import Request
from courier.validation import (
    MappingFailed,
    MappingFailedMulti,
    MappingOk,
    ObjectMapper,
    RequestValidationMapper,
    RequestValidator,
)
from courier.validation.request_mapper import NOT_SET_MESSAGE
from tests.fixtures.builders import RequestBuilder
from tests.fixtures.models import Address, Person, PersonQuery, Registration

JSON = {"Content-Type": "application/json"}


def json_request(make_request: RequestBuilder, body: bytes, uri: str = "/") -> Request:
    return make_request("POST", uri, JSON, body)


@pytest.mark.unit
class TestValidRequests:
    """Test mapping of valid bodies and queries."""

    @pytest.mark.parametrize(
        ("body", "uri", "expected_query"),
        [
            (
                b'{"name": "John Doe", "age": 32, "tags": ["tag1", "tag2"]}',
                "/?filter=test&page=1&tags[]=tag1",
                {"filter": "test", "page": 1, "tags": ["tag1"]},
            ),
            (
                b'{"name": "Jane Doe", "age": 28, "tags": ["tag3"]}',
                "/?tags[]=tag1",
                {"filter": None, "page": 0, "tags": ["tag1"]},
            ),
            (
                b'{"name": "Test Testovi\xc4\x8d", "age": 99, "tags": ["test1", "test2"],'
                b' "address": {"street": "Testovac\xc3\xad", "number": 123, "city": "Testov"}}',
                "/?page=10",
                {"filter": None, "page": 10, "tags": []},
            ),
        ],
    )
    def test_body_and_query(
        self,
        make_request: RequestBuilder,
        body: bytes,
        uri: str,
        expected_query: dict[str, Any],
    ) -> None:
        """Body and query map onto their models."""
        mapper = RequestValidationMapper().set_request(json_request(make_request, body, uri))

        person = mapper.map_body_to_object(Person)
        query = mapper.map_query_to_object(PersonQuery)

        assert isinstance(person, Person)
        assert person.model_dump(exclude={"address"}) == {
            key: value
            for key, value in mapper.request.get_parsed_body().items()
            if key != "address"
        }
        assert query.model_dump() == expected_query

    def test_nested_model(self, make_request: RequestBuilder) -> None:
        """Nested objects become nested models."""
        request = json_request(
            make_request,
            b'{"name": "Ada Lovelace", "age": 36,'
            b' "address": {"street": "Baker St", "city": "London", "number": 221}}',
        )

        person = RequestValidationMapper().set_request(request).map_body_to_object(Person)

        assert person.address == Address(street="Baker St", city="London", number=221)

    def test_try_map_ok(self, make_request: RequestBuilder) -> None:
        """try_map_body returns a tagged success."""
        request = json_request(make_request, b'{"name": "John Doe", "age": 32}')

        result = RequestValidationMapper().set_request(request).try_map_body(Person)

        assert isinstance(result, MappingOk)
        assert result.value.name == "John Doe"

    def test_check_passes(self, make_request: RequestBuilder) -> None:
        """The check hook runs on valid objects too."""
        request = json_request(
            make_request, b'{"name": "a", "password": "x", "passwordConfirm": "x"}'
        )

        result = RequestValidationMapper().set_request(request).map_body_to_object(Registration)

        assert result.password_confirm == "x"


@pytest.mark.unit
class TestInvalidRequests:
    """Test mapping failures."""

    @pytest.mark.parametrize(
        ("body", "fields"),
        [
            (b'{"name": "", "age": 32, "tags": ["tag1", "tag2"]}', ["name"]),
            (b'{"age": 32, "tags": ["tag1", "tag2"]}', ["name"]),
            (b'{"name": "John Doe", "age": 0}', ["age"]),
            (
                b'{"name": "John Doe", "age": 5,'
                b' "address": {"street": "x", "city": "Prague", "number": 1}}',
                ["address.street"],
            ),
        ],
    )
    def test_invalid_body(
        self, make_request: RequestBuilder, body: bytes, fields: list[str]
    ) -> None:
        """Constraint violations raise ValidationFailure naming the fields."""
        mapper = RequestValidationMapper().set_request(json_request(make_request, body))

        with pytest.raises(ValidationFailure) as exc_info:
            mapper.map_body_to_object(Person)

        assert not isinstance(exc_info.value, ValidationMultiFailure)
        assert [error.field for error in exc_info.value.errors] == fields

    def test_invalid_query(self, make_request: RequestBuilder) -> None:
        """Negative pages are rejected."""
        mapper = RequestValidationMapper().set_request(make_request("GET", "/?page=-1"))

        with pytest.raises(ValidationFailure) as exc_info:
            mapper.map_query_to_object(PersonQuery)

        assert exc_info.value.field_messages().keys() == {"page"}

    def test_empty_body_reports_required_fields(self, make_request: RequestBuilder) -> None:
        """A request without a body maps as empty data."""
        mapper = RequestValidationMapper().set_request(make_request("POST", "/"))

        result = mapper.try_map_body(Person)

        assert isinstance(result, MappingFailedMulti)
        assert [failure.errors[0].field for failure in result.failures] == ["name", "age"]

    def test_missing_field_and_out_of_range_number(self, make_request: RequestBuilder) -> None:
        """Two invalid fields raise a multi-failure with one failure per field."""
        mapper = RequestValidationMapper().set_request(
            json_request(make_request, b'{"age": 0}')
        )

        with pytest.raises(ValidationMultiFailure) as exc_info:
            mapper.map_body_to_object(Person)

        name, age = exc_info.value
        assert [(error.field, error.kind) for error in name.errors] == [("name", "missing")]
        assert [(error.field, error.kind) for error in age.errors] == [
            ("age", "greater_than_equal")
        ]
        assert name.message != age.message

    def test_field_failures_and_check_failure_are_flattened(
        self, make_request: RequestBuilder
    ) -> None:
        """Per-field failures and the check failure sit side by side."""
        request = json_request(
            make_request, b'{"name": "", "password": 1, "passwordConfirm": "y"}'
        )

        result = RequestValidationMapper().set_request(request).try_map_body(Registration)

        assert isinstance(result, MappingFailedMulti)
        assert [failure.errors[0].field for failure in result.failures] == [
            "name",
            "password",
            "password_confirm",
        ]
        assert all(
            not isinstance(failure, ValidationMultiFailure) for failure in result.failures
        )

    def test_check_failure_alone(self, make_request: RequestBuilder) -> None:
        """A failing check on otherwise valid data is a single failure."""
        request = json_request(
            make_request, b'{"name": "a", "password": "x", "passwordConfirm": "y"}'
        )

        result = RequestValidationMapper().set_request(request).try_map_body(Registration)

        assert isinstance(result, MappingFailed)
        assert result.failure.errors[0].field == "password_confirm"

    def test_both_passes_fail(self, make_request: RequestBuilder) -> None:
        """Constraint and check failures are both reported, kept apart."""
        request = json_request(make_request, b'{"password": "x", "passwordConfirm": "y"}')
        mapper = RequestValidationMapper().set_request(request)

        result = mapper.try_map_body(Registration)

        assert isinstance(result, MappingFailedMulti)
        assert len(result.failures) == 2
        with pytest.raises(ValidationMultiFailure) as exc_info:
            mapper.map_body_to_object(Registration)
        first, second = exc_info.value
        assert [error.field for error in first.errors] == ["name"]
        assert [error.field for error in second.errors] == ["password_confirm"]

    def test_failure_logged(
        self, make_request: RequestBuilder, log_records: list[dict[str, Any]]
    ) -> None:
        """Failed mappings are logged with the failing fields."""
        mapper = RequestValidationMapper().set_request(make_request("GET", "/?page=-1"))

        mapper.try_map_query(PersonQuery)

        record = next(r for r in log_records if r["message"].startswith("Request query"))
        assert record["message"] == "Request query does not map onto PersonQuery"
        assert record["extra"]["fields"] == ["page"]
        assert record["extra"]["failures"] == 1


@pytest.mark.unit
class TestUnboundMapper:
    """Test the mapper without a request."""

    @pytest.mark.parametrize(
        "operation",
        ["map_body_to_object", "map_query_to_object", "try_map_body", "try_map_query"],
    )
    def test_not_ready(self, operation: str) -> None:
        """Mapping without a request raises NotReady."""
        mapper = RequestValidationMapper()

        with pytest.raises(NotReady) as exc_info:
            getattr(mapper, operation)(Person)

        assert exc_info.value.message == NOT_SET_MESSAGE
        assert NOT_SET_MESSAGE == "Request is not set - call set_request() before mapping"

    def test_collaborators(self) -> None:
        """Mapper and validator can be injected."""
        mapper = ObjectMapper()
        validator = RequestValidator()

        request_mapper = RequestValidationMapper(mapper, validator)

        assert request_mapper.mapper is mapper
        assert request_mapper.validator is validator
        assert request_mapper.request is None
