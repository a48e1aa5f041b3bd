"""Typed errors, error classification and retry policy.

Every error raised by netinfo derives from NetinfoError and carries a kind,
a message, the originating cause and a capture timestamp. Errors coming
from libraries (requests, psutil, OSError) are classified by type and, as a
last resort, by common substrings of their message.
"""

from datetime import datetime, timezone
from typing import Any

import requests

import config
from enums import ErrorKind

# User-facing messages per error kind
MSG_TRY_AGAIN = "Please try again or check your network configuration"
MSG_TIMEOUT = MSG_TRY_AGAIN + " (Operation timed out)"
MSG_PERMISSION = "Permission denied - some features may require elevated privileges"
MSG_NETWORK = "Network is not available"
MSG_COMMAND = "This feature is not available on your system"
MSG_PARSE = "Data parsing error - please try again"
MSG_VALIDATION = "Invalid input provided"

_KIND_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.TIMEOUT: MSG_TIMEOUT,
    ErrorKind.PERMISSION: MSG_PERMISSION,
    ErrorKind.NETWORK: MSG_NETWORK,
    ErrorKind.COMMAND: MSG_COMMAND,
    ErrorKind.PARSE: MSG_PARSE,
    ErrorKind.VALIDATION: MSG_VALIDATION,
    ErrorKind.UNKNOWN: MSG_TRY_AGAIN,
}

# Substring patterns for errors that did not originate here
_TIMEOUT_PATTERNS = ("timeout", "timed out", "deadline exceeded")
_PERMISSION_PATTERNS = ("permission denied", "access denied", "not permitted")
_NETWORK_PATTERNS = ("network", "connection", "unreachable")


class NetinfoError(Exception):
    """Base error for all netinfo failures.

    Attributes:
        kind: ErrorKind classification
        message: Human-readable description
        cause: Originating exception (or None)
        timestamp: UTC capture time
        context: Free-form diagnostic details
    """

    default_kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        kind: ErrorKind | None = None,
        **context: Any,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.kind = kind if kind is not None else self.default_kind
        self.timestamp = datetime.now(timezone.utc)
        self.context: dict[str, Any] = dict(context)

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message


class CommandTimeout(NetinfoError):
    """External command exceeded its deadline and was killed."""

    default_kind = ErrorKind.TIMEOUT


class CommandFailed(NetinfoError):
    """External command exited non-zero or could not be started.

    stdout holds whatever the command printed; it is diagnostic only and
    must never be parsed as a valid result.
    """

    default_kind = ErrorKind.COMMAND

    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        kind: ErrorKind | None = None,
        returncode: int | None = None,
        stdout: str = "",
        **context: Any,
    ) -> None:
        super().__init__(message, cause, kind, **context)
        self.returncode = returncode
        self.stdout = stdout


class ParseError(NetinfoError):
    """Structured or text output did not have the expected shape."""

    default_kind = ErrorKind.PARSE


class ConfigReadError(NetinfoError):
    """A system configuration file could not be read."""

    default_kind = ErrorKind.COMMAND


class CollectionError(NetinfoError):
    """OS enumeration (sockets, interfaces) failed."""

    default_kind = ErrorKind.COMMAND


class NoGatewayFound(NetinfoError):
    """Every gateway tier finished without producing a record."""

    default_kind = ErrorKind.COMMAND


class NoRoutesFound(NetinfoError):
    """Every route tier finished without producing a record."""

    default_kind = ErrorKind.COMMAND


class NotFoundError(NetinfoError):
    """A lookup by name found nothing."""

    default_kind = ErrorKind.VALIDATION


class NetworkError(NetinfoError):
    """Connectivity or transport failure."""

    default_kind = ErrorKind.NETWORK


class ValidationError(NetinfoError):
    """User-supplied input was rejected."""

    default_kind = ErrorKind.VALIDATION


def classify_error(error: BaseException) -> ErrorKind:
    """Classify any exception into an ErrorKind.

    Order:
        1. NetinfoError: its own kind
        2. Known exception types (timeouts, permissions, requests)
        3. Message substrings
        4. UNKNOWN

    Args:
        error: Exception to classify

    Returns:
        ErrorKind value.
    """
    if isinstance(error, NetinfoError):
        return error.kind

    if isinstance(error, (TimeoutError, requests.Timeout)):
        return ErrorKind.TIMEOUT
    if isinstance(error, PermissionError):
        return ErrorKind.PERMISSION
    if isinstance(error, (ConnectionError, requests.ConnectionError)):
        return ErrorKind.NETWORK

    text = str(error).lower()
    if any(pattern in text for pattern in _TIMEOUT_PATTERNS):
        return ErrorKind.TIMEOUT
    if any(pattern in text for pattern in _PERMISSION_PATTERNS):
        return ErrorKind.PERMISSION
    if any(pattern in text for pattern in _NETWORK_PATTERNS):
        return ErrorKind.NETWORK

    return ErrorKind.UNKNOWN


def should_retry(error: BaseException) -> bool:
    """Only timeouts and network failures are worth another attempt."""
    return classify_error(error) in (ErrorKind.TIMEOUT, ErrorKind.NETWORK)


def get_retry_delay(attempt: int) -> float:
    """Linear backoff delay for a retry attempt.

    Args:
        attempt: Attempt number (1 for the first retry)

    Returns:
        Delay in seconds, never above MAX_RETRY_DELAY_SECONDS.
    """
    if attempt <= 0:
        return config.RETRY_DELAY_SECONDS
    delay = attempt * config.RETRY_DELAY_SECONDS
    return min(delay, config.MAX_RETRY_DELAY_SECONDS)


def get_user_friendly_message(error: BaseException) -> str:
    """Translate an error into a short, actionable message.

    Args:
        error: Any exception

    Returns:
        Message suitable for end users (never the raw error text).
    """
    if isinstance(error, NetinfoError):
        return _KIND_MESSAGES[error.kind]

    # Specific patterns first, they would otherwise match the generic ones
    text = str(error).lower()
    if "no such host" in text:
        return "Host not found - check the hostname or DNS settings"
    if "connection refused" in text:
        return "Connection refused - the service may not be running"
    if "network unreachable" in text:
        return "Network unreachable - check your network connection"

    return _KIND_MESSAGES[classify_error(error)]
