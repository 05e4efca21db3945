"""Tests for the parser error type."""

from pathlib import Path

from opml_toolkit.shared.errors import ErrorKind, OPMLParserError


class TestOPMLParserError:
    """Test error construction and descriptions."""

    def test_unable_to_open(self) -> None:
        """Test the error raised for unreadable locators."""
        cause = FileNotFoundError("missing")
        error = OPMLParserError.unable_to_open(Path("/tmp/missing.opml"), cause)

        assert error.kind is ErrorKind.UNABLE_TO_OPEN
        assert error.locator == Path("/tmp/missing.opml")
        assert error.cause is cause
        assert str(error) == "Unable to open a file at the given URL /tmp/missing.opml"

    def test_parse_error_carries_cause(self) -> None:
        """Test the error raised for malformed XML."""
        cause = ValueError("mismatched tag")
        error = OPMLParserError.parse_error(cause)

        assert error.kind is ErrorKind.PARSE_ERROR
        assert error.cause is cause
        assert error.locator is None
        assert str(error) == "XML parsing error: mismatched tag"

    def test_invalid_document(self) -> None:
        """Test the error raised for well-formed non-OPML input."""
        assert str(OPMLParserError.invalid_document()) == "Invalid or missing XML document"

        error = OPMLParserError.invalid_document("empty input")
        assert error.kind is ErrorKind.INVALID_DOCUMENT
        assert str(error) == "Invalid or missing XML document: empty input"

    def test_repr_names_kind(self) -> None:
        """Test that repr shows the error kind."""
        error = OPMLParserError.invalid_document()

        assert "INVALID_DOCUMENT" in repr(error)
        assert isinstance(error, Exception)
