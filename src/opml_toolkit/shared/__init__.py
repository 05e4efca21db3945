"""Shared utilities for OPML reading and writing.

This module provides configuration objects, the parser error type, value
conversions for header fields, and logging helpers used by every layer.
"""

from .config import (
    ConfigError,
    ConfigValidationError,
    FetchConfig,
    GlobalConfig,
    OPMLConfig,
    ReaderConfig,
    WriterConfig,
)
from .errors import (
    ErrorKind,
    OPMLParserError,
)
from .logging import (
    CorrelationLogger,
    configure_logging,
    get_logger,
)
from .values import (
    format_rfc822_date,
    parse_rfc822_date,
    parse_uri,
    xml_escape,
)

__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "FetchConfig",
    "GlobalConfig",
    "OPMLConfig",
    "ReaderConfig",
    "WriterConfig",
    "ErrorKind",
    "OPMLParserError",
    "CorrelationLogger",
    "configure_logging",
    "get_logger",
    "format_rfc822_date",
    "parse_rfc822_date",
    "parse_uri",
    "xml_escape",
]
