"""Routing table collection and classification.

Same tier chain as the gateway adapter, but unscoped:
    1. ip -4|-6 -j route show   (JSON)
    2. ip -4|-6 route show      (text)
    3. /proc/net/route + /proc/net/ipv6_route

Windows uses PowerShell Get-NetRoute.
"""

import ipaddress
from collections import Counter
from collections.abc import Sequence

import config
from enums import DataSource, IPFamily, Platform, RouteType
from logging_config import get_logger
from models import RouteRecord, RouteSummary
from network.route_parsing import (
    DEFAULT_DESTINATIONS,
    RouteLine,
    first_nexthop,
    parse_json_records,
    parse_kernel_tables,
    parse_route_text,
    read_kernel_tables,
    to_int,
    to_str,
)
from network.tiers import Tier, acquire_each, parse_each, run_tiers
from utils import (
    NoRoutesFound,
    ValidationError,
    detect_platform,
    run_command,
    validate_interface_name,
)

logger = get_logger(__name__)


def classify_route(destination: str) -> RouteType:
    """Classify a route by its destination string.

    Rules:
        "0.0.0.0/0", "::/0", "default" → DEFAULT
        anything else containing "/"    → NETWORK
        everything else                 → HOST

    Args:
        destination: Destination as reported by the source

    Returns:
        RouteType enum value.
    """
    if destination in DEFAULT_DESTINATIONS:
        return RouteType.DEFAULT
    if "/" in destination:
        return RouteType.NETWORK
    return RouteType.HOST


def _record(
    destination: str,
    gateway: str,
    interface: str,
    metric: int,
    protocol: str,
    source: DataSource,
) -> RouteRecord:
    return RouteRecord(
        destination=destination,
        gateway=gateway,
        interface=interface,
        metric=metric,
        protocol=protocol,
        source=source.value,
        route_type=classify_route(destination),
    )


def _from_route_line(route: RouteLine, source: DataSource) -> RouteRecord:
    return _record(
        route.destination, route.gateway, route.interface, route.metric, route.protocol, source
    )


def parse_ip_json_routes(output: str) -> list[RouteRecord]:
    """Parse "ip -j route show".

    Entries without "dst" are skipped. Multipath routes take gateway and
    interface from their first next hop.

    Args:
        output: JSON command output

    Returns:
        List of RouteRecord in output order.
    """
    routes = []
    for route in parse_json_records(output):
        destination = to_str(route.get("dst"))
        if not destination:
            continue
        hop = first_nexthop(route)
        routes.append(
            _record(
                destination,
                to_str(hop.get("gateway")),
                to_str(hop.get("dev")),
                to_int(route.get("metric")),
                to_str(route.get("protocol")),
                DataSource.IP_JSON,
            )
        )
    return routes


def parse_ip_route_routes(output: str) -> list[RouteRecord]:
    """Parse "ip route show" text output.

    Format: "<destination> [via <gw>] dev <iface> [proto <p>] ... [metric <n>]"
    Protocol defaults to "static" when absent. Indented "nexthop" lines
    belong to the multipath route above them.

    Args:
        output: Command output

    Returns:
        List of RouteRecord in output order.
    """
    return [_from_route_line(route, DataSource.IP_TEXT) for route in parse_route_text(output)]


def parse_kernel_routes(tables: tuple[str, str]) -> list[RouteRecord]:
    """Convert raw kernel table entries into RouteRecords."""
    return [_from_route_line(route, DataSource.PROC_NET) for route in parse_kernel_tables(tables)]


def parse_powershell_routes(output: str) -> list[RouteRecord]:
    """Parse Get-NetRoute JSON (array or single object).

    Args:
        output: JSON command output

    Returns:
        List of RouteRecord in output order.
    """
    routes = []
    for route in parse_json_records(output):
        destination = to_str(route.get("DestinationPrefix"))
        if not destination:
            continue
        routes.append(
            _record(
                destination,
                to_str(route.get("NextHop")),
                to_str(route.get("InterfaceAlias")),
                to_int(route.get("RouteMetric")),
                _powershell_protocol(route.get("Protocol")),
                DataSource.POWERSHELL,
            )
        )
    return routes


def _powershell_protocol(value: object) -> str:
    # Windows PowerShell 5.1 serializes enums as their integer value
    if isinstance(value, str):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return ""


def _ip_routes(*options: str) -> tuple[str, ...]:
    """Run "ip [options] route show" for IPv4, then IPv6."""
    return acquire_each([
        (
            family.value,
            lambda flag=flag: run_command(
                ["ip", flag, *options, "route", "show"], timeout=config.ROUTE_COMMAND_TIMEOUT
            ),
        )
        for family, flag in ((IPFamily.IPV4, "-4"), (IPFamily.IPV6, "-6"))
    ])


def build_route_tiers(
    platform: Platform,
    proc_route_path: str = config.PROC_NET_ROUTE_PATH,
    proc_ipv6_route_path: str = config.PROC_NET_IPV6_ROUTE_PATH,
) -> list[Tier[RouteRecord]]:
    """Ordered route strategies for a platform.

    Args:
        platform: Host platform
        proc_route_path: IPv4 kernel table path
        proc_ipv6_route_path: IPv6 kernel table path

    Returns:
        List of tiers, most preferred first.
    """
    if platform == Platform.WINDOWS:
        return [
            Tier(
                DataSource.POWERSHELL.value,
                lambda: run_command(
                    ["powershell", "-NoProfile", "-Command", config.WINDOWS_ROUTES_CMD],
                    timeout=config.POWERSHELL_TIMEOUT,
                ),
                parse_powershell_routes,
            )
        ]

    return [
        Tier(DataSource.IP_JSON.value, lambda: _ip_routes("-j"), parse_each(parse_ip_json_routes)),
        Tier(DataSource.IP_TEXT.value, _ip_routes, parse_each(parse_ip_route_routes)),
        Tier(
            DataSource.PROC_NET.value,
            lambda: read_kernel_tables(proc_route_path, proc_ipv6_route_path),
            parse_kernel_routes,
        ),
    ]


def route_sort_key(route: RouteRecord) -> tuple[int, int, int, int, str]:
    """CIDR-aware sort key.

    Order: IPv4 before IPv6, then by network address, then by prefix
    length. "default" sorts as the all-zero network of its family.
    Destinations that do not parse go last, lexicographically.

    Args:
        route: Route to key

    Returns:
        Tuple usable with sorted().
    """
    destination = route.destination
    if destination == "default":
        destination = "::/0" if ":" in route.gateway else "0.0.0.0/0"
    try:
        network = ipaddress.ip_network(destination, strict=False)
    except ValueError:
        return (1, 0, 0, 0, route.destination)
    return (0, network.version, int(network.network_address), network.prefixlen, "")


def sort_routes(routes: Sequence[RouteRecord]) -> list[RouteRecord]:
    return sorted(routes, key=route_sort_key)


def get_routes(tiers: Sequence[Tier[RouteRecord]] | None = None) -> list[RouteRecord]:
    """Collect the routing table using the platform's tier chain.

    Args:
        tiers: Strategy chain (default: build_route_tiers for this host)

    Returns:
        Routes sorted by destination (CIDR-aware).

    Raises:
        NoRoutesFound: Every tier failed or produced nothing.
    """
    if tiers is None:
        tiers = build_route_tiers(detect_platform())

    routes, source = run_tiers(tiers)
    if not routes:
        logger.warning("No routing information available (tried %d sources)", len(tiers))
        raise NoRoutesFound("No routing information available", tiers=[t.name for t in tiers])

    logger.debug("Collected %d routes from %s", len(routes), source)
    return sort_routes(routes)


def get_routes_by_interface(
    interface: str,
    tiers: Sequence[Tier[RouteRecord]] | None = None,
) -> list[RouteRecord]:
    """Routes whose outgoing interface matches exactly.

    Raises:
        ValidationError: interface is not a plausible interface name.
        NoRoutesFound: Every tier failed or produced nothing.
    """
    if not validate_interface_name(interface):
        raise ValidationError(f"Invalid interface name: {interface!r}", interface=interface)
    return [route for route in get_routes(tiers) if route.interface == interface]


def get_default_routes(tiers: Sequence[Tier[RouteRecord]] | None = None) -> list[RouteRecord]:
    """Routes classified as DEFAULT."""
    return [route for route in get_routes(tiers) if route.route_type == RouteType.DEFAULT]


def summarize_routes(routes: Sequence[RouteRecord]) -> RouteSummary:
    """Count routes by type, protocol and interface.

    Args:
        routes: Routes from get_routes()

    Returns:
        RouteSummary; by_interface is ordered by descending count.
    """
    by_interface = Counter(route.interface for route in routes)
    return RouteSummary(
        total=len(routes),
        by_type=dict(Counter(route.route_type.value for route in routes)),
        by_protocol=dict(Counter(route.protocol for route in routes)),
        by_interface=dict(by_interface.most_common()),
        default_routes=sum(1 for route in routes if route.route_type == RouteType.DEFAULT),
    )
