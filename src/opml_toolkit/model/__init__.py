"""Document model for OPML outlines.

Key Components:
    Document: Header fields plus the ordered top-level outlines
    Outline: One node of the nested body tree
    Attribute: Name/value pair captured from an outline element
"""

from .document import (
    OPML_SPEC_URL,
    Attribute,
    Document,
    Outline,
)

__all__ = [
    "OPML_SPEC_URL",
    "Attribute",
    "Document",
    "Outline",
]
