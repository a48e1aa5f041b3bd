"""DNS server configuration and resolution.

Two mutually exclusive strategies, chosen by platform:
    Windows: Get-DnsClientServerAddress (PowerShell, JSON per interface)
    POSIX:   /etc/resolv.conf (single "system" record)

An empty result is a valid configuration, not an error.
"""

import socket
from collections.abc import Iterable
from pathlib import Path

import config
from enums import ErrorKind, Platform
from logging_config import get_logger
from models import DNSConfig, DNSRecord, DNSResolution
from network.route_parsing import parse_json_records, to_str
from utils import (
    ConfigReadError,
    NetworkError,
    NotFoundError,
    ValidationError,
    detect_platform,
    is_valid_ipv4,
    is_valid_ipv6,
    run_command,
    sanitize_for_log,
    validate_hostname,
    validate_interface_name,
)

logger = get_logger(__name__)

SYSTEM_INTERFACE = "system"
_COMMENT_MARKERS = ("#", ";")


def build_dns_record(interface: str, servers: Iterable[str]) -> DNSRecord:
    """Split servers into IPv4 and IPv6 lists.

    A server is IPv4 iff it parses as a dotted quad. Strings that are not
    addresses at all stay in servers but land in neither list.

    Args:
        interface: Interface name (or "system")
        servers: Server address strings in source order

    Returns:
        DNSRecord.
    """
    servers = tuple(servers)
    ipv4 = tuple(s for s in servers if is_valid_ipv4(s))
    ipv6 = tuple(s for s in servers if not is_valid_ipv4(s) and is_valid_ipv6(s))
    return DNSRecord(interface=interface, ipv4=ipv4, ipv6=ipv6, servers=servers)


def parse_powershell_dns(output: str) -> DNSConfig:
    """Parse Get-DnsClientServerAddress JSON.

    Format: [{"InterfaceAlias": "Ethernet",
              "ServerAddresses": ["192.168.1.1", "fe80::1"]}, ...]
    or a single object when there is one entry.

    Entries without InterfaceAlias and interfaces with zero servers are
    not reported.

    Args:
        output: JSON command output

    Returns:
        DNSConfig (search domains are not reported on Windows).

    Raises:
        ParseError: Output is not a JSON array or object.
    """
    records = []
    for entry in parse_json_records(output):
        interface = to_str(entry.get("InterfaceAlias"))
        if not interface:
            continue

        addresses = entry.get("ServerAddresses")
        if isinstance(addresses, str):
            addresses = [addresses]
        elif not isinstance(addresses, list):
            addresses = []

        servers = [a for a in addresses if isinstance(a, str) and a]
        if servers:
            records.append(build_dns_record(interface, servers))

    return DNSConfig(records=tuple(records))


def parse_resolv_conf(content: str) -> DNSConfig:
    """Parse resolv.conf content.

    Rules:
        - Blank lines and lines starting with "#" or ";" are skipped
        - "nameserver <addr>" adds one server to the "system" record
        - "search <d1> <d2> ..." extends the search list (no de-dup)

    Args:
        content: File content

    Returns:
        DNSConfig with at most one record.
    """
    servers: list[str] = []
    search_domains: list[str] = []

    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith(_COMMENT_MARKERS):
            continue

        fields = line.split()
        if len(fields) < 2:
            continue

        if fields[0] == "nameserver":
            servers.append(fields[1])
        elif fields[0] == "search":
            search_domains.extend(fields[1:])

    records = (build_dns_record(SYSTEM_INTERFACE, servers),) if servers else ()
    return DNSConfig(records=records, search_domains=tuple(search_domains))


def read_resolv_conf(path: str | Path = config.RESOLV_CONF_PATH) -> str:
    """Read resolv.conf.

    Raises:
        ConfigReadError: File missing or unreadable (kind PERMISSION when
            access was denied).
    """
    try:
        return Path(path).read_text()
    except PermissionError as e:
        raise ConfigReadError(f"Cannot read {path}", cause=e, kind=ErrorKind.PERMISSION) from e
    except OSError as e:
        raise ConfigReadError(f"Cannot read {path}", cause=e) from e


def get_dns_config(
    platform: Platform | None = None,
    resolv_conf_path: str | Path = config.RESOLV_CONF_PATH,
) -> DNSConfig:
    """Collect DNS configuration for this host.

    Args:
        platform: Host platform (default: detected)
        resolv_conf_path: resolv.conf location (POSIX only)

    Returns:
        DNSConfig (possibly empty).

    Raises:
        CommandFailed / CommandTimeout: PowerShell query failed
        ParseError: PowerShell output was not JSON
        ConfigReadError: resolv.conf unreadable
    """
    platform = platform or detect_platform()

    if platform == Platform.WINDOWS:
        output = run_command(
            ["powershell", "-NoProfile", "-Command", config.WINDOWS_DNS_CMD],
            timeout=config.POWERSHELL_TIMEOUT,
        )
        dns_config = parse_powershell_dns(output)
    else:
        dns_config = parse_resolv_conf(read_resolv_conf(resolv_conf_path))

    logger.debug(
        "DNS: %d records, %d IPv4, %d IPv6, %d search domains",
        len(dns_config.records),
        dns_config.ipv4_count,
        dns_config.ipv6_count,
        len(dns_config.search_domains),
    )
    return dns_config


def get_dns_servers_by_interface(
    interface: str,
    platform: Platform | None = None,
    resolv_conf_path: str | Path = config.RESOLV_CONF_PATH,
) -> DNSRecord:
    """DNS record for one interface ("system" on POSIX).

    Raises:
        ValidationError: interface is not a plausible interface name.
        NotFoundError: No record for that interface.
    """
    if not validate_interface_name(interface):
        raise ValidationError(f"Invalid interface name: {interface!r}", interface=interface)

    dns_config = get_dns_config(platform, resolv_conf_path)
    for record in dns_config.records:
        if record.interface == interface:
            return record
    raise NotFoundError(f"No DNS servers found for interface: {interface}", interface=interface)


def resolve_hostname(hostname: str) -> DNSResolution:
    """Resolve a hostname to its IPv4 and IPv6 addresses.

    Args:
        hostname: Name to resolve

    Returns:
        DNSResolution with unique addresses in resolver order.

    Raises:
        ValidationError: Hostname is malformed
        NetworkError: Resolution failed
    """
    if not validate_hostname(hostname):
        raise ValidationError(f"Invalid hostname: {hostname!r}", hostname=hostname)

    try:
        infos = socket.getaddrinfo(hostname, None, proto=socket.IPPROTO_TCP)
    except socket.gaierror as e:
        logger.debug("Resolution of %s failed: %s", sanitize_for_log(hostname), e)
        raise NetworkError(f"No such host: {hostname}", cause=e, hostname=hostname) from e

    ipv4: list[str] = []
    ipv6: list[str] = []
    for family, _, _, _, sockaddr in infos:
        address = str(sockaddr[0])
        target = ipv4 if family == socket.AF_INET else ipv6
        if address not in target:
            target.append(address)

    return DNSResolution(hostname=hostname, ipv4=tuple(ipv4), ipv6=tuple(ipv6))


def is_public_dns(address: str, known: frozenset[str] = config.PUBLIC_DNS_SERVERS) -> bool:
    """True if address is a well-known public resolver (Cloudflare, Google...)."""
    return address in known
