"""Shared infrastructure used by provider adapters and services."""

from .error_reporting import (
    ErrorReporter,
    LoggingErrorReporter,
    get_error_reporter,
    set_error_reporter,
)
from .http_client import HTTPClient, HTTPClientError, UnauthorizedError

__all__ = [
    "ErrorReporter",
    "HTTPClient",
    "HTTPClientError",
    "LoggingErrorReporter",
    "UnauthorizedError",
    "get_error_reporter",
    "set_error_reporter",
]
