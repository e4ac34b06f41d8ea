"""Error-reporting sink.

Provider code reports non-fatal problems (skipped price records, securities
no vendor could describe) here instead of failing the whole operation. The
host application injects its own error tracker; the default writes to the log.
"""

import logging
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class ErrorReporter(Protocol):
    """Anything that can record an exception with tags and context."""

    def capture_exception(
        self,
        exc: BaseException,
        level: str = "error",
        tags: dict[str, Any] | None = None,
        context: dict[str, Any] | None = None,
    ) -> None: ...


class LoggingErrorReporter:
    """Error reporter that writes captured exceptions to the log."""

    LEVELS = {
        "debug": logging.DEBUG,
        "info": logging.INFO,
        "warning": logging.WARNING,
        "error": logging.ERROR,
        "fatal": logging.CRITICAL,
    }

    def capture_exception(
        self,
        exc: BaseException,
        level: str = "error",
        tags: dict[str, Any] | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        logger.log(
            self.LEVELS.get(level, logging.ERROR),
            "Captured %s: %s (tags=%s, context=%s)",
            type(exc).__name__,
            exc,
            tags or {},
            context or {},
        )


_default_reporter: ErrorReporter = LoggingErrorReporter()


def get_error_reporter() -> ErrorReporter:
    """Return the process-wide error reporter."""
    return _default_reporter


def set_error_reporter(reporter: ErrorReporter) -> None:
    """Replace the process-wide error reporter (e.g. with an error-tracking client)."""
    global _default_reporter
    _default_reporter = reporter
