"""Core tree building implementation for OPML parsing.

This module converts the flat, depth-first stream of SAX events into a
:class:`~opml_toolkit.model.Document`. Outlines still being read are kept as
mutable :class:`OutlineFrame` objects on an explicit stack; a frame is sealed
into an immutable :class:`~opml_toolkit.model.Outline` only when its end tag
arrives, and is then appended to its parent frame or to the top-level list.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Dict, List, Mapping, Optional, Tuple

from xml.sax.handler import ContentHandler

from opml_toolkit.model import Attribute, Document, Outline
from opml_toolkit.shared import (
    ReaderConfig,
    get_logger,
    parse_rfc822_date,
    parse_uri,
)

# Header elements whose text is copied verbatim (empty means absent)
_STRING_HEADER_FIELDS = {
    "title": "title",
    "ownerName": "owner_name",
    "ownerEmail": "owner_email",
}
_DATE_HEADER_FIELDS = {
    "dateCreated": "date_created",
    "dateModified": "date_modified",
}
_URI_HEADER_FIELDS = {
    "ownerId": "owner_id",
    "docs": "docs",
}


class BuilderState(Enum):
    """Position of the builder within the OPML document structure."""

    BEFORE_ROOT = auto()    # No <opml> root seen yet
    IN_DOCUMENT = auto()    # Inside <opml>, outside <head> and <body>
    IN_HEAD = auto()        # Inside <head>
    IN_BODY = auto()        # Inside <body>, no outline open
    IN_OUTLINE = auto()     # At least one outline open; depth = frame stack size
    DONE = auto()           # </opml> closed, document assembled
    FAILED = auto()         # Tokenizer reported an error


@dataclass
class OutlineFrame:
    """Mutable builder for an outline whose end tag has not arrived yet."""

    text: str
    title: str
    attributes: Optional[Tuple[Attribute, ...]]
    children: List[Outline] = field(default_factory=list)

    @classmethod
    def from_attributes(cls, attrs: Mapping[str, str]) -> "OutlineFrame":
        """Create a frame from an element's attribute mapping.

        ``title`` falls back to ``text`` when absent; the full mapping is kept
        as the attribute list, or None when the element had no attributes.
        """
        text = attrs.get("text", "")
        title = attrs.get("title", attrs.get("text", ""))
        attributes = tuple(Attribute(name, value) for name, value in attrs.items())
        return cls(text=text, title=title, attributes=attributes or None)

    def seal(self) -> Outline:
        """Freeze this frame into an Outline; no children means ``children=None``."""
        return Outline(
            text=self.text,
            title=self.title,
            attributes=self.attributes,
            children=tuple(self.children) if self.children else None,
        )


@dataclass
class HeaderFields:
    """Accumulated <head> values."""

    title: Optional[str] = None
    date_created: Optional[datetime] = None
    date_modified: Optional[datetime] = None
    owner_name: Optional[str] = None
    owner_email: Optional[str] = None
    owner_id: Optional[str] = None
    docs: Optional[str] = None


class OPMLTreeBuilder(ContentHandler):
    """SAX content handler that builds a Document from OPML events.

    One builder serves exactly one parse. After the event source finishes,
    :attr:`document` holds the result if the ``opml`` root closed, else None.
    """

    def __init__(
        self,
        config: Optional[ReaderConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize tree builder.

        Args:
            config: Reader configuration (defaults used when omitted)
            correlation_id: Optional correlation ID for request tracking
        """
        super().__init__()
        self.config = config or ReaderConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "opml_tree_builder")

        self.state = BuilderState.BEFORE_ROOT
        self.document: Optional[Document] = None

        self._open_elements: List[str] = []
        self._frames: List[OutlineFrame] = []
        self._text_buffer: List[str] = []
        self._version = self.config.default_version
        self._header = HeaderFields()
        self._outlines: List[Outline] = []
        self._recovered_fields: List[str] = []

    @property
    def depth(self) -> int:
        """Number of outlines currently open."""
        return len(self._frames)

    @property
    def recovered_fields(self) -> List[str]:
        """Header elements that were present but discarded as invalid."""
        return list(self._recovered_fields)

    def fail(self) -> None:
        """Mark the build as failed after a tokenizer error."""
        self.state = BuilderState.FAILED

    # SAX callbacks

    def startElement(self, name: str, attrs: Mapping[str, str]) -> None:
        parent = self._open_elements[-1] if self._open_elements else None
        self._open_elements.append(name)
        self._text_buffer.clear()

        if self.state is BuilderState.BEFORE_ROOT:
            if name == "opml" and parent is None:
                self._version = attrs.get("version", self.config.default_version)
                self.state = BuilderState.IN_DOCUMENT
        elif self.state is BuilderState.IN_DOCUMENT:
            if name == "head" and parent == "opml":
                self.state = BuilderState.IN_HEAD
            elif name == "body" and parent == "opml":
                self.state = BuilderState.IN_BODY
        elif self.state in (BuilderState.IN_BODY, BuilderState.IN_OUTLINE):
            if name == "outline":
                self._frames.append(OutlineFrame.from_attributes(dict(attrs)))
                self.state = BuilderState.IN_OUTLINE

    def endElement(self, name: str) -> None:
        if self._open_elements:
            self._open_elements.pop()
        parent = self._open_elements[-1] if self._open_elements else None
        text = "".join(self._text_buffer).strip()
        self._text_buffer.clear()

        if self.state is BuilderState.IN_HEAD:
            if name == "head" and parent == "opml":
                self.state = BuilderState.IN_DOCUMENT
            elif parent == "head":
                self._assign_header_field(name, text)
        elif self.state is BuilderState.IN_OUTLINE:
            if name == "outline":
                self._close_outline()
        elif self.state is BuilderState.IN_BODY:
            if name == "body" and parent == "opml":
                self.state = BuilderState.IN_DOCUMENT
        elif self.state is BuilderState.IN_DOCUMENT:
            if name == "opml" and parent is None:
                self._finish_document()

    def characters(self, content: str) -> None:
        # Outline elements carry no text body; only header text is kept
        if self.state is BuilderState.IN_HEAD:
            self._text_buffer.append(content)

    # Internal state transitions

    def _close_outline(self) -> None:
        outline = self._frames.pop().seal()
        if self._frames:
            self._frames[-1].children.append(outline)
        else:
            self._outlines.append(outline)
            self.state = BuilderState.IN_BODY

    def _assign_header_field(self, name: str, text: str) -> None:
        if name in _STRING_HEADER_FIELDS:
            setattr(self._header, _STRING_HEADER_FIELDS[name], text or None)
        elif name in _DATE_HEADER_FIELDS:
            value = parse_rfc822_date(text)
            if value is None and text:
                self._note_recovered(name, text)
            setattr(self._header, _DATE_HEADER_FIELDS[name], value)
        elif name in _URI_HEADER_FIELDS:
            value = parse_uri(text)
            if value is None and text:
                self._note_recovered(name, text)
            setattr(self._header, _URI_HEADER_FIELDS[name], value)

    def _note_recovered(self, name: str, text: str) -> None:
        self._recovered_fields.append(name)
        self.logger.debug(
            "Discarded unparseable header field",
            extra={"element": name, "value": text}
        )

    def _finish_document(self) -> None:
        header = self._header
        self.document = Document(
            version=self._version,
            title=header.title,
            date_created=header.date_created,
            date_modified=header.date_modified,
            owner_name=header.owner_name,
            owner_email=header.owner_email,
            owner_id=header.owner_id,
            docs=header.docs,
            outlines=tuple(self._outlines),
        )
        self.state = BuilderState.DONE
        self.logger.debug(
            "OPML document assembled",
            extra={
                "version": self._version,
                "top_level_outlines": len(self._outlines),
                "recovered_fields": self._recovered_fields,
            }
        )

    def statistics(self) -> Dict[str, object]:
        """Summary of the build for logging."""
        return {
            "state": self.state.name,
            "top_level_outlines": len(self._outlines),
            "open_outlines": self.depth,
            "recovered_fields": list(self._recovered_fields),
        }
