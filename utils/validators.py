"""Input validation utilities.

Provides validation for interface names, hostnames and IP addresses.
Critical for security - values reach external commands as arguments.
"""

import ipaddress
import re

from enums import IPFamily

_HOSTNAME_LABEL = re.compile(r"^(?!-)[a-zA-Z0-9-]{1,63}(?<!-)$")


def validate_interface_name(name: str) -> bool:
    """Validate interface name (security check).

    Allowed characters: [a-zA-Z0-9._:@ -]
    Note: space allowed for Windows aliases ("Wi-Fi 2")
    Max length: 256

    Args:
        name: Interface name to validate

    Returns:
        True if valid, False otherwise.
    """
    if not name or len(name) > 256:
        return False

    return re.match(r"^[a-zA-Z0-9._:@ ()-]+$", name) is not None


def validate_hostname(host: str) -> bool:
    """Validate a ping/resolve target (hostname or IP literal).

    Rejects anything that could be read as a command-line option.

    Args:
        host: Hostname or IP address

    Returns:
        True if valid, False otherwise.
    """
    if not host or len(host) > 253 or host.startswith("-"):
        return False

    if is_valid_ip(host):
        return True

    labels = host.rstrip(".").split(".")
    return all(_HOSTNAME_LABEL.match(label) for label in labels)


def is_valid_ipv4(address: str | None) -> bool:
    """Validate IPv4 address.

    Args:
        address: IPv4 address string or None

    Returns:
        True if valid IPv4 address, False otherwise.
    """
    if not address:
        return False
    try:
        ipaddress.IPv4Address(address)
        return True
    except ValueError:
        return False


def is_valid_ipv6(address: str | None) -> bool:
    """Validate IPv6 address.

    Strips zone identifier (e.g., %eth0) before validation.
    Zone identifiers are used for link-local addresses.

    Args:
        address: IPv6 address string or None

    Returns:
        True if valid IPv6 address, False otherwise.
    """
    if not address:
        return False

    # Strip zone identifier (fe80::1%eth0 → fe80::1)
    address = address.split("%")[0]

    try:
        ipaddress.IPv6Address(address)
        return True
    except ValueError:
        return False


def is_valid_ip(address: str | None) -> bool:
    """Validate IPv4 or IPv6 address.

    Args:
        address: IP address string or None

    Returns:
        True if valid IPv4 or IPv6 address, False otherwise.
    """
    return is_valid_ipv4(address) or is_valid_ipv6(address)


def ip_family(address: str) -> IPFamily:
    """Family of an address: IPv4 if it parses as a dotted quad, else IPv6.

    Args:
        address: Address string (not required to be valid)

    Returns:
        IPFamily.IPV4 or IPFamily.IPV6.
    """
    return IPFamily.IPV4 if is_valid_ipv4(address) else IPFamily.IPV6


def is_private_ip(address: str) -> bool:
    """Check for RFC 1918 and loopback IPv4 ranges.

    Args:
        address: IP address string

    Returns:
        True for 10/8, 172.16/12, 192.168/16 and 127/8, False otherwise
        (including unparseable input).
    """
    if not is_valid_ipv4(address):
        return False
    ip = ipaddress.IPv4Address(address)
    return any(
        ip in ipaddress.IPv4Network(network)
        for network in ("10.0.0.0/8", "172.16.0.0/12", "192.168.0.0/16", "127.0.0.0/8")
    )
