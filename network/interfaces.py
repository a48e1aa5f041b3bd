"""Network interface enumeration via psutil.

Status is derived from the "up" flag only (see InterfaceRecord.status).
"""

import ipaddress
import socket
from typing import Any

import psutil

from enums import InterfaceStatus
from logging_config import get_logger
from models import InterfaceRecord
from utils import (
    CollectionError,
    NotFoundError,
    ValidationError,
    sanitize_for_log,
    validate_interface_name,
)

logger = get_logger(__name__)


def read_interface_tables() -> tuple[dict[str, list[Any]], dict[str, Any]]:
    """Snapshot psutil's address and stats tables.

    Returns:
        Tuple of (net_if_addrs, net_if_stats).

    Raises:
        CollectionError: psutil could not enumerate interfaces.
    """
    try:
        return (psutil.net_if_addrs(), psutil.net_if_stats())
    except (psutil.Error, OSError) as e:
        raise CollectionError("Failed to enumerate network interfaces", cause=e) from e


def strip_zone(address: str) -> str:
    """Drop an IPv6 zone identifier (fe80::1%eth0 → fe80::1)."""
    return address.split("%", 1)[0]


def prefix_length(netmask: str | None) -> int | None:
    """Prefix length of a dotted or colon netmask, None if not a mask."""
    if not netmask:
        return None
    try:
        return bin(int(ipaddress.ip_address(netmask))).count("1")
    except ValueError:
        return None


def format_interface_address(addr: Any) -> str:
    """Render an IP address as "address/prefix" (bare when no netmask)."""
    address = strip_zone(addr.address)
    prefix = prefix_length(addr.netmask)
    return f"{address}/{prefix}" if prefix is not None else address


def parse_flags(stats: Any) -> tuple[str, ...]:
    """Lowercase flag names from psutil stats.

    psutil reports flags as a comma separated string, empty on platforms
    that do not expose them; "up" is then taken from isup.
    """
    flags = [flag.strip().lower() for flag in (stats.flags or "").split(",") if flag.strip()]
    if stats.isup and "up" not in flags:
        flags.insert(0, "up")
    return tuple(flags)


def interface_index(name: str) -> int:
    """OS interface index, 0 when the name has none."""
    try:
        return socket.if_nametoindex(name)
    except OSError:
        return 0


def build_interface_record(name: str, addrs: list[Any], stats: Any | None) -> InterfaceRecord:
    """Combine psutil address and stats entries for one interface."""
    hardware_addr = ""
    addresses = []
    for addr in addrs:
        if addr.family in (socket.AF_INET, socket.AF_INET6):
            addresses.append(format_interface_address(addr))
        elif addr.family == psutil.AF_LINK:
            hardware_addr = addr.address

    return InterfaceRecord(
        name=name,
        index=interface_index(name),
        mtu=stats.mtu if stats is not None else 0,
        hardware_addr=hardware_addr,
        flags=parse_flags(stats) if stats is not None else (),
        addresses=tuple(addresses),
    )


def get_interfaces() -> list[InterfaceRecord]:
    """All network interfaces, ordered by index then name.

    Raises:
        CollectionError: Enumeration failed.
    """
    addrs_table, stats_table = read_interface_tables()

    interfaces = [
        build_interface_record(name, addrs_table.get(name, []), stats_table.get(name))
        for name in set(addrs_table) | set(stats_table)
    ]
    interfaces.sort(key=lambda iface: (iface.index, iface.name))

    logger.debug(
        "Found %d interfaces (%d up)",
        len(interfaces),
        sum(1 for iface in interfaces if iface.status == InterfaceStatus.UP),
    )
    return interfaces


def get_interface_by_name(name: str) -> InterfaceRecord:
    """Look up one interface by exact name.

    Raises:
        ValidationError: name is not a plausible interface name.
        NotFoundError: No interface with that name.
    """
    if not validate_interface_name(name):
        raise ValidationError(f"Invalid interface name: {name!r}", interface=name)

    for iface in get_interfaces():
        if iface.name == name:
            return iface
    logger.debug("Interface %s not found", sanitize_for_log(name))
    raise NotFoundError(f"Interface {name} not found", interface=name)


def get_active_interfaces() -> list[InterfaceRecord]:
    """Interfaces that are UP and carry at least one address."""
    return [iface for iface in get_interfaces() if iface.is_up and iface.addresses]
