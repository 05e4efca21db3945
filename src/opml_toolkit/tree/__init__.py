"""Tree building engine for OPML parsing.

This module provides the SAX content handler that reconstructs the nested
outline tree and the document header from a flat stream of XML events.

Key Components:
    OPMLTreeBuilder: Content handler driving the frame stack
    OutlineFrame: Mutable builder for an outline still being read
    BuilderState: Position of the builder within the document
"""

from .builder import (
    BuilderState,
    HeaderFields,
    OPMLTreeBuilder,
    OutlineFrame,
)

__all__ = [
    "BuilderState",
    "HeaderFields",
    "OPMLTreeBuilder",
    "OutlineFrame",
]
