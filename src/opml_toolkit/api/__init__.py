"""Public parse and serialize API for OPML documents."""

from .parser import (
    OPMLParser,
    parse,
    parse_bytes,
    parse_file,
    parse_locator,
    parse_string,
    parse_url,
)
from .serializer import (
    OPMLSerializer,
    serialize,
)

__all__ = [
    "OPMLParser",
    "OPMLSerializer",
    "parse",
    "parse_bytes",
    "parse_file",
    "parse_locator",
    "parse_string",
    "parse_url",
    "serialize",
]
