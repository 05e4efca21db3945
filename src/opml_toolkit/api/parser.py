"""Core parser API for reading OPML documents.

This module provides module-level parse functions for buffers and locators,
plus the :class:`OPMLParser` facade that carries a configuration between
calls. Every call builds its own :class:`~opml_toolkit.tree.OPMLTreeBuilder`,
so no parsing state is shared between calls or threads.

All functions either return a complete :class:`~opml_toolkit.model.Document`
or raise :class:`~opml_toolkit.shared.OPMLParserError`.
"""

import codecs
import io
import time
from pathlib import Path
from typing import BinaryIO, Optional, TextIO, Union
from urllib.parse import urlsplit
from urllib.request import url2pathname
from xml.sax import SAXException
from xml.sax.xmlreader import InputSource

import defusedxml.sax
import requests
from defusedxml import DefusedXmlException

from opml_toolkit.model import Document
from opml_toolkit.shared import (
    CorrelationLogger,
    OPMLConfig,
    OPMLParserError,
    configure_logging,
    get_logger,
)
from opml_toolkit.tree import OPMLTreeBuilder

# Type definitions for input data
Buffer = Union[str, bytes, bytearray]
Locator = Union[str, Path]
InputType = Union[str, bytes, bytearray, Path, BinaryIO, TextIO]

MS_PER_SECOND = 1000  # Milliseconds per second conversion

# Byte order mark and XML whitespace allowed before the first tag
_LEADING_BLANKS = "\ufeff \t\r\n"

# UTF-32 marks first: the UTF-16 LE mark is a prefix of the UTF-32 LE one
_BYTE_ORDER_MARKS = (
    (codecs.BOM_UTF32_LE, "utf-32"),
    (codecs.BOM_UTF32_BE, "utf-32"),
    (codecs.BOM_UTF8, "utf-8-sig"),
    (codecs.BOM_UTF16_LE, "utf-16"),
    (codecs.BOM_UTF16_BE, "utf-16"),
)


def parse(
    input_data: InputType,
    config: Optional[OPMLConfig] = None,
    correlation_id: Optional[str] = None
) -> Document:
    """Parse OPML from a buffer, locator or file-like object.

    A ``str`` whose first non-blank character is ``<`` is treated as XML text;
    any other ``str`` is treated as a locator (path or URL).

    Args:
        input_data: XML content, Path, path/URL string, or file-like object
        config: Optional configuration (defaults used when omitted)
        correlation_id: Optional correlation ID for request tracking

    Returns:
        Parsed Document

    Raises:
        OPMLParserError: If the source cannot be opened or is not OPML

    Examples:
        >>> document = parse(b'<opml version="2.0"><body><outline text="A"/></body></opml>')
        >>> document.outlines[0].title
        'A'
    """
    if isinstance(input_data, (bytes, bytearray)):
        return parse_bytes(input_data, config, correlation_id)
    if isinstance(input_data, Path):
        return parse_file(input_data, config, correlation_id)
    if isinstance(input_data, str):
        if input_data.lstrip(_LEADING_BLANKS).startswith("<"):
            return parse_string(input_data, config, correlation_id)
        return parse_locator(input_data, config, correlation_id)
    if hasattr(input_data, "read"):
        content = input_data.read()
        if isinstance(content, str):
            return parse_string(content, config, correlation_id)
        return parse_bytes(content, config, correlation_id)
    raise TypeError(f"Unsupported OPML input type: {type(input_data).__name__}")


def parse_bytes(
    data: Union[bytes, bytearray],
    config: Optional[OPMLConfig] = None,
    correlation_id: Optional[str] = None
) -> Document:
    """Parse OPML from raw bytes; the encoding is taken from the XML declaration."""
    return _parse_buffer(bytes(data), config or OPMLConfig(), correlation_id)


def parse_string(
    xml_string: str,
    config: Optional[OPMLConfig] = None,
    correlation_id: Optional[str] = None
) -> Document:
    """Parse OPML from already decoded text.

    Any ``encoding`` in the XML declaration is ignored since the text is
    already decoded.
    """
    return _parse_buffer(xml_string, config or OPMLConfig(), correlation_id)


def parse_file(
    file_path: Locator,
    config: Optional[OPMLConfig] = None,
    correlation_id: Optional[str] = None
) -> Document:
    """Parse OPML from a local file.

    Raises:
        OPMLParserError: UNABLE_TO_OPEN if the file cannot be read, before any
            XML is processed
    """
    logger = get_logger(__name__, correlation_id, "parse_file")
    data = _read_file(Path(file_path), file_path, logger)
    return parse_bytes(data, config, correlation_id)


def _read_file(path_obj: Path, locator: Locator, logger: CorrelationLogger) -> bytes:
    """Read ``path_obj``, reporting failures against the caller's ``locator``."""
    try:
        data = path_obj.read_bytes()
    except OSError as e:
        logger.error(
            "Unable to open OPML file",
            extra={"file_path": str(path_obj), "error": str(e)}
        )
        raise OPMLParserError.unable_to_open(locator, e) from e

    logger.debug(
        "OPML file read",
        extra={"file_path": str(path_obj), "content_length": len(data)}
    )
    return data


def parse_url(
    url: str,
    config: Optional[OPMLConfig] = None,
    correlation_id: Optional[str] = None
) -> Document:
    """Parse OPML from a URL.

    ``file:`` URLs are read from disk; other schemes must be listed in
    ``config.fetch.allowed_schemes`` and are fetched with requests.

    Raises:
        OPMLParserError: UNABLE_TO_OPEN if the resource cannot be fetched
    """
    config = config or OPMLConfig()
    logger = get_logger(__name__, correlation_id, "parse_url")

    try:
        parts = urlsplit(url)
    except ValueError as e:
        raise OPMLParserError.unable_to_open(url, e) from e

    scheme = parts.scheme.lower()
    if scheme == "file":
        data = _read_file(Path(url2pathname(parts.path)), url, logger)
        return parse_bytes(data, config, correlation_id)
    if scheme not in config.fetch.allowed_schemes:
        logger.error(
            "Refusing to open URL with unsupported scheme",
            extra={"url": url, "scheme": scheme}
        )
        raise OPMLParserError.unable_to_open(url)

    try:
        response = requests.get(
            url,
            timeout=config.fetch.timeout_seconds,
            headers={"User-Agent": config.fetch.user_agent},
        )
        response.raise_for_status()
    except requests.RequestException as e:
        logger.error("Unable to fetch OPML URL", extra={"url": url, "error": str(e)})
        raise OPMLParserError.unable_to_open(url, e) from e

    logger.debug(
        "OPML URL fetched",
        extra={
            "url": url,
            "status_code": response.status_code,
            "content_length": len(response.content),
        }
    )
    return parse_bytes(response.content, config, correlation_id)


def parse_locator(
    locator: Locator,
    config: Optional[OPMLConfig] = None,
    correlation_id: Optional[str] = None
) -> Document:
    """Parse OPML from a path or URL, choosing the opener by its form."""
    if isinstance(locator, str) and "://" in locator:
        return parse_url(locator, config, correlation_id)
    return parse_file(locator, config, correlation_id)


def _is_blank(source: Union[str, bytes]) -> bool:
    """True when ``source`` holds nothing but a byte order mark and whitespace."""
    if isinstance(source, bytes):
        for mark, encoding in _BYTE_ORDER_MARKS:
            if source.startswith(mark):
                try:
                    source = source.decode(encoding)
                except UnicodeDecodeError:
                    return False
                break
        else:
            return not source.strip()
    return not source.lstrip(_LEADING_BLANKS).strip()


def _parse_buffer(
    source: Union[str, bytes],
    config: OPMLConfig,
    correlation_id: Optional[str]
) -> Document:
    """Drive the SAX reader over ``source`` and return the assembled document."""
    start_time = time.time()
    if not config.global_.enable_correlation_tracking:
        correlation_id = None
    logger = get_logger(__name__, correlation_id, "parse_buffer")

    logger.info(
        "Starting OPML parse",
        extra={"input_type": type(source).__name__, "content_length": len(source)}
    )

    if _is_blank(source):
        logger.error("Empty OPML input")
        raise OPMLParserError.invalid_document("empty input")

    input_source = InputSource()
    if isinstance(source, str):
        source = source.lstrip("\ufeff")
        input_source.setCharacterStream(io.StringIO(source))
    else:
        input_source.setByteStream(io.BytesIO(source))

    builder = OPMLTreeBuilder(config.reader, correlation_id)
    try:
        defusedxml.sax.parse(
            input_source,
            builder,
            forbid_dtd=config.reader.forbid_dtd,
            forbid_entities=config.reader.forbid_entities,
            forbid_external=config.reader.forbid_external,
        )
    except (SAXException, DefusedXmlException) as e:
        builder.fail()
        logger.error(
            "XML tokenizer rejected OPML input",
            extra={"error": str(e), **builder.statistics()}
        )
        raise OPMLParserError.parse_error(e) from e

    document = builder.document
    if document is None:
        logger.error("No <opml> root element was closed", extra=builder.statistics())
        raise OPMLParserError.invalid_document("no <opml> root element")

    processing_time = (time.time() - start_time) * MS_PER_SECOND
    logger.info(
        "OPML parse completed",
        extra={
            "version": document.version,
            "top_level_outlines": len(document.outlines),
            "processing_time_ms": processing_time,
        }
    )
    return document


class OPMLParser:
    """Parser facade that applies one configuration to every call.

    Instances hold configuration only; each call builds fresh tree-building
    state, so a single instance may be shared across threads.

    Examples:
        >>> parser = OPMLParser(OPMLConfig.hardened())
        >>> document = parser.parse_file("subscriptions.opml")
    """

    def __init__(
        self,
        config: Optional[OPMLConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.config = config or OPMLConfig()
        self.correlation_id = correlation_id
        if self.config.global_.logging_level is not None:
            configure_logging(self.config.global_.logging_level)

    def parse(self, input_data: InputType) -> Document:
        """Parse OPML from any supported input; see :func:`parse`."""
        return parse(input_data, self.config, self.correlation_id)

    def parse_bytes(self, data: Union[bytes, bytearray]) -> Document:
        """Parse OPML from raw bytes."""
        return parse_bytes(data, self.config, self.correlation_id)

    def parse_string(self, xml_string: str) -> Document:
        """Parse OPML from decoded text."""
        return parse_string(xml_string, self.config, self.correlation_id)

    def parse_file(self, file_path: Locator) -> Document:
        """Parse OPML from a local file."""
        return parse_file(file_path, self.config, self.correlation_id)

    def parse_url(self, url: str) -> Document:
        """Parse OPML from a URL."""
        return parse_url(url, self.config, self.correlation_id)

    def parse_locator(self, locator: Locator) -> Document:
        """Parse OPML from a path or URL."""
        return parse_locator(locator, self.config, self.correlation_id)
