"""Local IP addresses per interface."""

import ipaddress
import socket

from logging_config import get_logger
from models import IPRecord
from network.interfaces import read_interface_tables, strip_zone
from utils import NotFoundError, is_valid_ipv4

logger = get_logger(__name__)


def _is_loopback(address: str) -> bool:
    try:
        return ipaddress.ip_address(address).is_loopback
    except ValueError:
        return False


def get_local_ips() -> list[IPRecord]:
    """Non-loopback addresses of every UP interface.

    Interfaces that are down, or left without addresses once loopback
    ones are removed, are skipped.

    Returns:
        One IPRecord per interface, ordered by interface name.

    Raises:
        CollectionError: Enumeration failed.
    """
    addrs_table, stats_table = read_interface_tables()

    records = []
    for name in sorted(addrs_table):
        stats = stats_table.get(name)
        if stats is None or not stats.isup:
            continue

        local_ips = [
            strip_zone(addr.address)
            for addr in addrs_table[name]
            if addr.family in (socket.AF_INET, socket.AF_INET6)
        ]
        local_ips = [ip for ip in local_ips if not _is_loopback(ip)]
        if not local_ips:
            continue

        records.append(
            IPRecord(
                interface=name,
                ipv4=next((ip for ip in local_ips if is_valid_ipv4(ip)), ""),
                ipv6=next((ip for ip in local_ips if not is_valid_ipv4(ip)), ""),
                local_ips=tuple(local_ips),
            )
        )

    logger.debug("Local IPs found on %d interfaces", len(records))
    return records


def get_primary_local_ip() -> str:
    """First non-loopback IPv4 address of any UP interface.

    Raises:
        NotFoundError: No interface has an IPv4 address.
    """
    for record in get_local_ips():
        if record.ipv4:
            return record.ipv4
    raise NotFoundError("No local IPv4 address found")
