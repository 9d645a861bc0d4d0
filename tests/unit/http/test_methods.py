"""Unit tests for request method parsing."""

import pytest

from courier.http.methods import RequestMethod


@pytest.mark.unit
class TestRequestMethod:
    """Test the RequestMethod enum."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("GET", RequestMethod.GET),
            ("post", RequestMethod.POST),
            (" Put ", RequestMethod.PUT),
            ("patch", RequestMethod.PATCH),
            ("UPDATE", RequestMethod.UPDATE),
            ("delete", RequestMethod.DELETE),
            ("cli", RequestMethod.CLI),
        ],
    )
    def test_parse(self, raw: str, expected: RequestMethod) -> None:
        """Methods parse case-insensitively."""
        assert RequestMethod.parse(raw) is expected

    @pytest.mark.parametrize("raw", ["PROPFIND", "", "G E T"])
    def test_unknown_defaults_to_get(self, raw: str) -> None:
        """Unknown verbs are treated as GET."""
        assert RequestMethod.parse(raw) is RequestMethod.GET

    def test_unknown_with_explicit_default(self) -> None:
        """A caller-supplied default replaces GET."""
        assert RequestMethod.parse("BREW", RequestMethod.OPTIONS) is RequestMethod.OPTIONS

    @pytest.mark.parametrize(
        ("method", "expected"),
        [
            (RequestMethod.PUT, True),
            (RequestMethod.PATCH, True),
            (RequestMethod.UPDATE, True),
            (RequestMethod.POST, False),
            (RequestMethod.GET, False),
        ],
    )
    def test_is_update(self, method: RequestMethod, expected: bool) -> None:
        """Only PUT, PATCH and UPDATE count as updates."""
        assert method.is_update is expected
