"""Immutable OPML document model.

:class:`Document` holds the header fields and the top-level outlines;
:class:`Outline` is one node of the recursively nested body tree. Both are
frozen value types: the parser builds them bottom-up and edits produce new
copies through :meth:`Document.replace` / :meth:`Outline.replace`.

The distinction between ``children=None`` (no nested outline elements) and
``children=()`` is kept by the model, although both serialize to a
self-closing tag.
"""

from dataclasses import dataclass, field, replace as dataclass_replace
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from opml_toolkit.shared.values import (
    format_rfc822_date,
    parse_rfc822_date,
    parse_uri,
)

OPML_SPEC_URL = "https://opml.org/spec2.opml"

AttributeInput = Union["Attribute", Tuple[str, str]]


@dataclass(frozen=True)
class Attribute:
    """A single name/value pair taken from an outline element."""

    name: str
    value: str

    def __post_init__(self) -> None:
        """Validate attribute values."""
        if not isinstance(self.name, str) or not isinstance(self.value, str):
            raise TypeError("Attribute name and value must be strings")
        if not self.name:
            raise ValueError("Attribute name cannot be empty")


def _to_attributes(
    attributes: Optional[Iterable[AttributeInput]]
) -> Optional[Tuple[Attribute, ...]]:
    if attributes is None:
        return None
    if isinstance(attributes, dict):
        attributes = attributes.items()
    sealed = []
    for item in attributes:
        if isinstance(item, Attribute):
            sealed.append(item)
        elif isinstance(item, tuple) and len(item) == 2:
            sealed.append(Attribute(item[0], item[1]))
        else:
            raise TypeError(
                "Attributes must be Attribute instances or (name, value) pairs"
            )
    return tuple(sealed)


def _to_outlines(
    outlines: Optional[Iterable["Outline"]], what: str
) -> Optional[Tuple["Outline", ...]]:
    if outlines is None:
        return None
    sealed = tuple(outlines)
    for outline in sealed:
        if not isinstance(outline, Outline):
            raise TypeError(f"{what} must contain only Outline instances")
    return sealed


@dataclass(frozen=True)
class Outline:
    """One node of the OPML body tree.

    ``attributes`` holds every XML attribute of the element, including
    ``text`` and ``title`` even though those are also promoted to fields.
    ``attributes`` and ``children`` are None when the element had none.
    """

    text: str = ""
    title: str = ""
    attributes: Optional[Tuple[Attribute, ...]] = None
    children: Optional[Tuple["Outline", ...]] = None

    def __post_init__(self) -> None:
        """Validate promoted fields and seal sequences into tuples."""
        if not isinstance(self.text, str) or not isinstance(self.title, str):
            raise TypeError("Outline text and title must be strings")
        object.__setattr__(self, "attributes", _to_attributes(self.attributes))
        object.__setattr__(self, "children", _to_outlines(self.children, "children"))

    @property
    def has_children(self) -> bool:
        """Check if this outline has at least one child outline."""
        return bool(self.children)

    @property
    def site_url(self) -> Optional[str]:
        """URI from the ``htmlUrl`` attribute, if present and valid."""
        return parse_uri(self.get_attribute("htmlUrl"))

    @property
    def feed_url(self) -> Optional[str]:
        """URI from the ``xmlUrl`` attribute, if present and valid."""
        return parse_uri(self.get_attribute("xmlUrl"))

    def get_attribute(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get the value of the first attribute called ``name``."""
        for attribute in self.attributes or ():
            if attribute.name == name:
                return attribute.value
        return default

    def replace(self, **changes: Any) -> "Outline":
        """Return a copy of this outline with the given fields replaced."""
        return dataclass_replace(self, **changes)

    def with_children(self, children: Optional[Iterable["Outline"]]) -> "Outline":
        """Return a copy of this outline carrying ``children``."""
        return dataclass_replace(self, children=children)

    def to_dict(self) -> Dict[str, Any]:
        """Convert outline to dictionary representation."""
        return {
            "text": self.text,
            "title": self.title,
            "attributes": (
                None if self.attributes is None
                else [{"name": a.name, "value": a.value} for a in self.attributes]
            ),
            "children": (
                None if self.children is None
                else [child.to_dict() for child in self.children]
            ),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Outline":
        """Create an outline from :meth:`to_dict` output."""
        attributes = data.get("attributes")
        children = data.get("children")
        return cls(
            text=data.get("text", ""),
            title=data.get("title", ""),
            attributes=(
                None if attributes is None
                else [Attribute(item["name"], item["value"]) for item in attributes]
            ),
            children=(
                None if children is None
                else [cls.from_dict(child) for child in children]
            ),
        )


@dataclass(frozen=True)
class Document:
    """One OPML file: header fields plus the ordered top-level outlines.

    See https://opml.org/spec2.opml for the meaning of each header element.
    """

    version: str = "2.0"
    title: Optional[str] = None
    date_created: Optional[datetime] = None
    date_modified: Optional[datetime] = None
    owner_name: Optional[str] = None
    owner_email: Optional[str] = None
    owner_id: Optional[str] = None
    docs: Optional[str] = None
    outlines: Tuple[Outline, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        """Validate header field types and seal outlines into a tuple."""
        if not isinstance(self.version, str):
            raise TypeError("Document version must be a string")
        for name in ("title", "owner_name", "owner_email", "owner_id", "docs"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, str):
                raise TypeError(f"Document {name} must be a string or None")
        for name in ("date_created", "date_modified"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, datetime):
                raise TypeError(f"Document {name} must be a datetime or None")
        if self.outlines is None:
            raise TypeError("Document outlines must be a sequence of Outline instances")
        object.__setattr__(self, "outlines", _to_outlines(self.outlines, "outlines"))

    @classmethod
    def new(
        cls,
        title: Optional[str] = None,
        outlines: Iterable[Outline] = (),
        date_created: Optional[datetime] = None,
        docs: Optional[str] = OPML_SPEC_URL,
        **header: Any
    ) -> "Document":
        """Create a document for export, stamping the creation date.

        ``date_created`` defaults to the current UTC time and ``docs`` to the
        OPML 2.0 specification URL.
        """
        return cls(
            title=title,
            date_created=date_created or datetime.now(timezone.utc),
            docs=docs,
            outlines=tuple(outlines),
            **header
        )

    @property
    def outline_count(self) -> int:
        """Total number of outlines at every depth."""
        return sum(1 for _ in self.iter_outlines())

    @property
    def max_depth(self) -> int:
        """Number of outline levels (0 for an empty body)."""
        deepest = 0
        stack: List[Tuple[Outline, int]] = [(o, 1) for o in self.outlines]
        while stack:
            outline, depth = stack.pop()
            deepest = max(deepest, depth)
            for child in outline.children or ():
                stack.append((child, depth + 1))
        return deepest

    def iter_outlines(self) -> Iterator[Outline]:
        """Iterate over all outlines in document order (depth-first, pre-order)."""
        stack = list(reversed(self.outlines))
        while stack:
            outline = stack.pop()
            yield outline
            if outline.children:
                stack.extend(reversed(outline.children))

    def find_by_attribute(self, name: str, value: Optional[str] = None) -> List[Outline]:
        """Find outlines by attribute name and optionally value."""
        results = []
        for outline in self.iter_outlines():
            found = outline.get_attribute(name)
            if found is not None and (value is None or found == value):
                results.append(outline)
        return results

    def feeds(self) -> List[Outline]:
        """All outlines, at any depth, that carry a valid ``xmlUrl``."""
        return [o for o in self.iter_outlines() if o.feed_url is not None]

    def replace(self, **changes: Any) -> "Document":
        """Return a copy of this document with the given fields replaced."""
        return dataclass_replace(self, **changes)

    def to_xml(self, config: Optional[Any] = None) -> str:
        """Serialize this document; see :func:`opml_toolkit.api.serializer.serialize`."""
        from opml_toolkit.api.serializer import serialize

        return serialize(self, config=config)

    def to_dict(self) -> Dict[str, Any]:
        """Convert document to dictionary representation."""
        return {
            "version": self.version,
            "title": self.title,
            "date_created": (
                format_rfc822_date(self.date_created) if self.date_created else None
            ),
            "date_modified": (
                format_rfc822_date(self.date_modified) if self.date_modified else None
            ),
            "owner_name": self.owner_name,
            "owner_email": self.owner_email,
            "owner_id": self.owner_id,
            "docs": self.docs,
            "outlines": [outline.to_dict() for outline in self.outlines],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Document":
        """Create a document from :meth:`to_dict` output.

        Dates and URIs go through the same recovery rules as the parser, so
        unparseable values become None.
        """
        return cls(
            version=data.get("version") or "2.0",
            title=data.get("title"),
            date_created=parse_rfc822_date(data.get("date_created")),
            date_modified=parse_rfc822_date(data.get("date_modified")),
            owner_name=data.get("owner_name"),
            owner_email=data.get("owner_email"),
            owner_id=parse_uri(data.get("owner_id")),
            docs=parse_uri(data.get("docs")),
            outlines=tuple(Outline.from_dict(o) for o in data.get("outlines") or ()),
        )
