"""Serialization of OPML documents to XML text.

Output has a fixed shape: XML declaration, ``<opml>``, a ``<head>`` with the
present header fields in canonical order, and a ``<body>`` with the outlines
written depth-first. Serialization cannot fail for a valid Document.
"""

from typing import List, Optional

from opml_toolkit.model import Document, Outline
from opml_toolkit.shared import (
    OPMLConfig,
    format_rfc822_date,
    get_logger,
    xml_escape,
)


class OPMLSerializer:
    """Writes a Document as indented OPML XML."""

    def __init__(
        self,
        config: Optional[OPMLConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.config = config or OPMLConfig()
        self.writer = self.config.writer
        self.logger = get_logger(__name__, correlation_id, "opml_serializer")

    def serialize(self, document: Document) -> str:
        """Convert ``document`` to a complete XML string."""
        lines: List[str] = []

        if self.writer.xml_declaration:
            lines.append(f'<?xml version="1.0" encoding="{self.writer.encoding}"?>')
        lines.append(f'<opml version="{xml_escape(document.version)}">')

        lines.append(self._indent(1) + "<head>")
        self._write_head(document, lines)
        lines.append(self._indent(1) + "</head>")

        lines.append(self._indent(1) + "<body>")
        for outline in document.outlines:
            self._write_outline(outline, 2, lines)
        lines.append(self._indent(1) + "</body>")
        lines.append("</opml>")

        self.logger.debug(
            "OPML document serialized",
            extra={
                "top_level_outlines": len(document.outlines),
                "line_count": len(lines),
            }
        )
        return "\n".join(lines) + "\n"

    def _indent(self, level: int) -> str:
        return " " * (self.writer.indent_width * level)

    def _write_head(self, document: Document, lines: List[str]) -> None:
        fields = [
            ("title", document.title),
            ("dateCreated", document.date_created and format_rfc822_date(document.date_created)),
            ("dateModified", document.date_modified and format_rfc822_date(document.date_modified)),
            ("ownerName", document.owner_name),
            ("ownerEmail", document.owner_email),
            ("ownerId", document.owner_id),
            ("docs", document.docs),
        ]
        indent = self._indent(2)
        for tag, value in fields:
            if value is not None:
                lines.append(f"{indent}<{tag}>{xml_escape(value)}</{tag}>")

    def _write_outline(self, root: Outline, level: int, lines: List[str]) -> None:
        # Explicit stack: (outline, level) opens an element, (None, level) closes one
        stack = [(root, level)]
        while stack:
            outline, depth = stack.pop()
            indent = self._indent(depth)
            if outline is None:
                lines.append(f"{indent}</outline>")
                continue

            # text and title are always written, even when the attribute list
            # repeats them; existing consumers read the output in this shape
            parts = [
                f'{indent}<outline text="{xml_escape(outline.text)}"',
                f' title="{xml_escape(outline.title)}"',
            ]
            for attribute in outline.attributes or ():
                parts.append(f' {attribute.name}="{xml_escape(attribute.value)}"')

            if outline.children:
                parts.append(">")
                lines.append("".join(parts))
                stack.append((None, depth))
                for child in reversed(outline.children):
                    stack.append((child, depth + 1))
            else:
                parts.append(" />")
                lines.append("".join(parts))


def serialize(
    document: Document,
    config: Optional[OPMLConfig] = None,
    correlation_id: Optional[str] = None
) -> str:
    """Serialize a Document to an OPML XML string.

    Args:
        document: Document to write
        config: Optional configuration (defaults used when omitted)
        correlation_id: Optional correlation ID for request tracking

    Returns:
        XML text, UTF-8 declared, two-space indentation by default

    Examples:
        >>> xml = serialize(Document(title="Feeds"))
        >>> "<title>Feeds</title>" in xml
        True
    """
    return OPMLSerializer(config, correlation_id).serialize(document)
