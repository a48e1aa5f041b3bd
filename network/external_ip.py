"""Public IP address and approximate location.

Public IP: plain-text echo services tried one after another, bounded by an
overall deadline that is checked before each attempt.
Location: ipapi.co JSON, retried only for timeout/network failures.
"""

import json
import time
from collections.abc import Sequence
from typing import Any

import requests

import config
from enums import ErrorKind
from logging_config import get_logger
from models import IPLocation
from utils import (
    NetworkError,
    ValidationError,
    get_retry_delay,
    is_valid_ip,
    sanitize_for_log,
    should_retry,
)

logger = get_logger(__name__)

NOT_AVAILABLE = "N/A"


def fetch_public_ip(endpoint: str, timeout: float = config.HTTP_TIMEOUT) -> str:
    """Query a single echo service.

    Args:
        endpoint: URL returning the caller's IP as plain text
        timeout: Request timeout in seconds

    Returns:
        The IP address (whitespace stripped).

    Raises:
        requests.RequestException: Transport error or non-2xx status
        ValidationError: Body is not an IP address
    """
    response = requests.get(endpoint, timeout=timeout)
    response.raise_for_status()

    address = response.text.strip()
    if not is_valid_ip(address):
        raise ValidationError(
            f"Invalid IP address from {endpoint}: {sanitize_for_log(address)}",
            endpoint=endpoint,
        )
    return address


def get_public_ip(
    endpoints: Sequence[str] = config.PUBLIC_IP_ENDPOINTS,
    timeout: float = config.HTTP_TIMEOUT,
    deadline: float = config.PUBLIC_IP_DEADLINE,
) -> str:
    """Public IP address from the first echo service that answers.

    Algorithm:
        1. Check the overall deadline, give up if it has passed
        2. GET endpoint N (per-request timeout, capped by time left)
        3. Non-2xx, transport error or non-IP body: move to N+1

    Args:
        endpoints: Echo service URLs in order of preference
        timeout: Per-request timeout in seconds
        deadline: Budget for the whole loop in seconds

    Returns:
        Public IP address string.

    Raises:
        NetworkError: Every endpoint failed (kind TIMEOUT when the
            deadline ran out first).
    """
    started = time.monotonic()

    for endpoint in endpoints:
        remaining = deadline - (time.monotonic() - started)
        if remaining <= 0:
            logger.debug("Public IP lookup deadline of %gs exceeded", deadline)
            raise NetworkError(
                "Timeout while getting public IP", kind=ErrorKind.TIMEOUT, deadline=deadline
            )

        try:
            address = fetch_public_ip(endpoint, timeout=min(timeout, remaining))
        except (requests.RequestException, ValidationError) as e:
            logger.debug("Public IP endpoint %s failed: %s", endpoint, sanitize_for_log(str(e)))
            continue

        logger.debug("Public IP from %s", endpoint)
        return address

    logger.warning("Failed to get public IP from all %d endpoints", len(endpoints))
    raise NetworkError("Failed to get public IP from all endpoints", endpoints=list(endpoints))


def get_with_retry(
    url: str,
    timeout: float = config.HTTP_TIMEOUT,
    attempts: int = config.RETRY_ATTEMPTS,
) -> requests.Response:
    """Request with linear backoff, retrying timeout/network errors only.

    Args:
        url: URL to request
        timeout: Request timeout in seconds
        attempts: Maximum number of attempts

    Returns:
        Successful response.

    Raises:
        NetworkError: Non-retryable failure or attempts exhausted.
    """
    for attempt in range(1, attempts + 1):
        try:
            response = requests.get(url, timeout=timeout)
            response.raise_for_status()
            return response
        except requests.RequestException as e:
            if attempt < attempts and should_retry(e):
                sleep_time = get_retry_delay(attempt)
                logger.debug("Request attempt %d failed, retrying in %gs", attempt, sleep_time)
                time.sleep(sleep_time)
                continue

            logger.debug("Request failed after %d attempts: %s", attempt, str(e))
            raise NetworkError(f"Request to {url} failed", cause=e, attempts=attempt) from e

    raise NetworkError(f"Request to {url} failed", attempts=attempts)


def _field(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None or value == "":
        return NOT_AVAILABLE
    return str(value)


def get_ip_location(ip: str, url_template: str = config.IP_LOCATION_URL) -> IPLocation:
    """Approximate location of an IP address.

    Args:
        ip: Public IP address
        url_template: Lookup URL with an {ip} placeholder

    Returns:
        IPLocation (missing fields are "N/A").

    Raises:
        ValidationError: ip is not an IP address
        NetworkError: Lookup failed or the service returned an error
    """
    if not is_valid_ip(ip):
        raise ValidationError(f"Invalid IP address: {ip!r}", ip=ip)

    response = get_with_retry(url_template.format(ip=ip))

    try:
        data = response.json()
    except json.JSONDecodeError as e:
        logger.error("Invalid JSON from location service")
        raise NetworkError("Invalid response from location service", cause=e) from e

    if not isinstance(data, dict):
        raise NetworkError("Invalid response from location service")
    if data.get("error"):
        reason = _field(data, "reason")
        raise NetworkError(f"Location lookup failed: {reason}", ip=ip)

    return IPLocation(
        ip=_field(data, "ip") if data.get("ip") else ip,
        city=_field(data, "city"),
        region=_field(data, "region"),
        country=_field(data, "country_name"),
        org=_field(data, "org"),
        timezone=_field(data, "timezone"),
    )
