"""OPML Toolkit.

Reads and writes OPML (Outline Processor Markup Language) documents, the XML
format commonly used to exchange feed subscription lists.

Progressive API Disclosure:
- Level 1: Simple functions - parse(), parse_file(), serialize()
- Level 2: Configured facades - OPMLParser, OPMLSerializer with OPMLConfig
"""

__version__ = "0.1.0"
__author__ = "OPML Toolkit Team"

# Level 1: Simple functions
# Level 2: Configured facades
from .api import (
    OPMLParser,
    OPMLSerializer,
    parse,
    parse_bytes,
    parse_file,
    parse_locator,
    parse_string,
    parse_url,
    serialize,
)

# Document model
from .model import Attribute, Document, Outline

# Configuration and errors
from .shared import ErrorKind, OPMLConfig, OPMLParserError

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple functions
    "parse",
    "parse_bytes",
    "parse_file",
    "parse_locator",
    "parse_string",
    "parse_url",
    "serialize",

    # Level 2: Configured facades
    "OPMLParser",
    "OPMLSerializer",

    # Document model
    "Attribute",
    "Document",
    "Outline",

    # Configuration and errors
    "ErrorKind",
    "OPMLConfig",
    "OPMLParserError",
]
