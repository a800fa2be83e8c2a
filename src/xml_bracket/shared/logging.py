"""Structured logging utilities for bracket notation conversion.

This module provides a run-aware logger that tags every record with the
component that emitted it and the run it belongs to, so that the log of a
long conversion can be filtered per invocation.
"""

import logging
import sys
import uuid
from typing import Any, Dict, Optional

LOG_FORMAT = "%(asctime)s %(levelname)s [%(component)s %(run_id)s] %(message)s"
HANDLER_NAME = "xml_bracket.stderr"


class RunLogger:
    """Logger that automatically includes run ID and component information."""

    def __init__(
        self,
        name: str,
        run_id: Optional[str] = None,
        component: Optional[str] = None
    ) -> None:
        """Initialize run logger.

        Args:
            name: Logger name (typically __name__)
            run_id: Identifier of the conversion or comparison run
            component: Component name for structured logging
        """
        self.logger = logging.getLogger(name)
        self.run_id = run_id or "-"
        self.component = component or name.split('.')[-1]

    def _get_extra(self, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        combined_extra = {
            "component": self.component,
            "run_id": self.run_id,
        }

        if extra:
            combined_extra.update(extra)

        return combined_extra

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log debug message with run info."""
        self.logger.debug(message, extra=self._get_extra(extra))

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log info message with run info."""
        self.logger.info(message, extra=self._get_extra(extra))

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log warning message with run info."""
        self.logger.warning(message, extra=self._get_extra(extra))

    def error(
        self,
        message: str,
        extra: Optional[Dict[str, Any]] = None,
        exc_info: bool = True
    ) -> None:
        """Log error message with run info."""
        self.logger.error(message, extra=self._get_extra(extra), exc_info=exc_info)

    def exception(
        self,
        message: str,
        extra: Optional[Dict[str, Any]] = None
    ) -> None:
        """Log exception message with run info and traceback."""
        self.logger.exception(message, extra=self._get_extra(extra))


def new_run_id() -> str:
    """Return a short identifier for a single run."""
    return uuid.uuid4().hex[:12]


def get_logger(
    name: str,
    run_id: Optional[str] = None,
    component: Optional[str] = None
) -> RunLogger:
    """Get a run-aware logger instance.

    Args:
        name: Logger name (typically __name__)
        run_id: Identifier of the current run
        component: Component name for structured logging

    Returns:
        RunLogger instance
    """
    return RunLogger(name, run_id, component)


class _RunFieldsFilter(logging.Filter):
    """Fill in the structured fields for records not emitted via RunLogger."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "component"):
            record.component = record.name.split(".")[-1]
        if not hasattr(record, "run_id"):
            record.run_id = "-"
        return True


def configure_logging(level: int = logging.WARNING) -> None:
    """Install a stderr handler on the package logger.

    Calling it again changes the level and points the existing handler at
    the current ``sys.stderr``.
    """
    package_logger = logging.getLogger("xml_bracket")
    package_logger.setLevel(level)
    for handler in package_logger.handlers:
        if handler.get_name() == HANDLER_NAME:
            handler.setStream(sys.stderr)
            return

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(_RunFieldsFilter())
    package_logger.addHandler(handler)
