"""Error type raised by the OPML parsing entry points.

Failures are terminal for the call that raised them: no partial document is
ever returned. The three failure modes are distinguished by
:class:`ErrorKind` rather than by subclass, so callers branch on ``error.kind``.
"""

from enum import Enum, auto
from pathlib import Path
from typing import Optional, Union

Locator = Union[str, Path]


class ErrorKind(Enum):
    """Failure modes of an OPML parse."""

    UNABLE_TO_OPEN = auto()     # Source could not be opened or read
    PARSE_ERROR = auto()        # Tokenizer rejected the XML as malformed
    INVALID_DOCUMENT = auto()   # Well-formed XML that never closed an <opml> root


class OPMLParserError(Exception):
    """Raised when a source cannot be turned into a Document.

    Attributes:
        kind: Which failure occurred
        locator: Path or URL that could not be opened (UNABLE_TO_OPEN only)
        cause: Underlying exception reported by the tokenizer or I/O layer
    """

    def __init__(
        self,
        kind: ErrorKind,
        locator: Optional[Locator] = None,
        cause: Optional[BaseException] = None,
        reason: Optional[str] = None
    ) -> None:
        self.kind = kind
        self.locator = locator
        self.cause = cause
        self.reason = reason
        super().__init__(self.description)

    @classmethod
    def unable_to_open(
        cls, locator: Locator, cause: Optional[BaseException] = None
    ) -> "OPMLParserError":
        """Create an error for a locator that could not be opened."""
        return cls(ErrorKind.UNABLE_TO_OPEN, locator=locator, cause=cause)

    @classmethod
    def parse_error(cls, cause: BaseException) -> "OPMLParserError":
        """Create an error wrapping a tokenizer failure."""
        return cls(ErrorKind.PARSE_ERROR, cause=cause)

    @classmethod
    def invalid_document(cls, reason: Optional[str] = None) -> "OPMLParserError":
        """Create an error for well-formed input that is not an OPML document."""
        return cls(ErrorKind.INVALID_DOCUMENT, reason=reason)

    @property
    def description(self) -> str:
        """Human-readable message for the failure."""
        if self.kind is ErrorKind.UNABLE_TO_OPEN:
            return f"Unable to open a file at the given URL {self.locator}"
        if self.kind is ErrorKind.PARSE_ERROR:
            return f"XML parsing error: {self.cause}"
        if self.reason:
            return f"Invalid or missing XML document: {self.reason}"
        return "Invalid or missing XML document"

    def __repr__(self) -> str:
        return (
            f"OPMLParserError(kind={self.kind.name}, locator={self.locator!r}, "
            f"cause={self.cause!r})"
        )
