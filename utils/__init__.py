"""Utilities package for netinfo.

Provides command execution, platform detection, typed errors, input
validation and display formatting.
"""

from .errors import (
    CollectionError,
    CommandFailed,
    CommandTimeout,
    ConfigReadError,
    NetinfoError,
    NetworkError,
    NoGatewayFound,
    NoRoutesFound,
    NotFoundError,
    ParseError,
    ValidationError,
    classify_error,
    get_retry_delay,
    get_user_friendly_message,
    should_retry,
)
from .formatters import format_ms, format_percent, join_or_marker, shorten_text
from .platform import detect_platform
from .system import command_exists, run_command, sanitize_for_log
from .validators import (
    ip_family,
    is_private_ip,
    is_valid_ip,
    is_valid_ipv4,
    is_valid_ipv6,
    validate_hostname,
    validate_interface_name,
)

__all__ = [
    # System
    "run_command",
    "command_exists",
    "sanitize_for_log",
    # Platform
    "detect_platform",
    # Errors
    "NetinfoError",
    "CommandTimeout",
    "CommandFailed",
    "ParseError",
    "ConfigReadError",
    "CollectionError",
    "NoGatewayFound",
    "NoRoutesFound",
    "NotFoundError",
    "NetworkError",
    "ValidationError",
    "classify_error",
    "should_retry",
    "get_retry_delay",
    "get_user_friendly_message",
    # Validators
    "validate_interface_name",
    "validate_hostname",
    "is_valid_ipv4",
    "is_valid_ipv6",
    "is_valid_ip",
    "ip_family",
    "is_private_ip",
    # Formatters
    "shorten_text",
    "format_ms",
    "format_percent",
    "join_or_marker",
]
