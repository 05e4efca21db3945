"""Structured logging utilities for OPML reading and writing.

Every record emitted through :class:`CorrelationLogger` carries the name of the
component that produced it and, when one was supplied, the correlation ID of
the parse or serialize call it belongs to.
"""

import logging
from typing import Any, Dict, Optional

PACKAGE_LOGGER = "opml_toolkit"

LogFields = Optional[Dict[str, Any]]


class CorrelationLogger:
    """Wraps a stdlib logger and stamps component and correlation fields on records."""

    def __init__(
        self,
        name: str,
        correlation_id: Optional[str] = None,
        component: Optional[str] = None
    ) -> None:
        """Bind a logger to one component and, optionally, one call.

        Args:
            name: Dotted logger name, usually the module's ``__name__``
            correlation_id: ID shared by all records of a single parse
            component: Short label for the emitting component; defaults to
                the last segment of ``name``
        """
        self.logger = logging.getLogger(name)
        self.component = component or name.rsplit(".", 1)[-1]
        self.correlation_id = correlation_id

    def _fields(self, extra: LogFields) -> Dict[str, Any]:
        fields: Dict[str, Any] = {
            "component": self.component,
            "correlation_id": self.correlation_id,
        }
        fields.update(extra or {})
        return fields

    def _log(self, level: int, message: str, extra: LogFields, exc_info: bool = False) -> None:
        if self.logger.isEnabledFor(level):
            self.logger.log(level, message, extra=self._fields(extra), exc_info=exc_info)

    def is_enabled_for(self, level: int) -> bool:
        """Check whether a record at ``level`` would be emitted."""
        return self.logger.isEnabledFor(level)

    def debug(self, message: str, extra: LogFields = None) -> None:
        self._log(logging.DEBUG, message, extra)

    def info(self, message: str, extra: LogFields = None) -> None:
        self._log(logging.INFO, message, extra)

    def warning(self, message: str, extra: LogFields = None) -> None:
        self._log(logging.WARNING, message, extra)

    def error(self, message: str, extra: LogFields = None, exc_info: bool = False) -> None:
        self._log(logging.ERROR, message, extra, exc_info)

    def exception(self, message: str, extra: LogFields = None) -> None:
        """Log at error level with the active exception's traceback attached."""
        self._log(logging.ERROR, message, extra, exc_info=True)


def get_logger(
    name: str,
    correlation_id: Optional[str] = None,
    component: Optional[str] = None
) -> CorrelationLogger:
    """Return a :class:`CorrelationLogger` for ``name``.

    Args:
        name: Dotted logger name, usually the module's ``__name__``
        correlation_id: ID shared by all records of a single parse
        component: Short label for the emitting component
    """
    return CorrelationLogger(name, correlation_id, component)


def configure_logging(level: str = "INFO") -> None:
    """Set the level of the package's root logger.

    Handlers are left to the host application; this only adjusts how much
    of the package's output reaches them.

    Args:
        level: Standard logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    logging.getLogger(PACKAGE_LOGGER).setLevel(level)
