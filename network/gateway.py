"""Default gateway detection.

Tiers (POSIX), tried until one yields a gateway:
    1. ip -4|-6 -j route show default   (JSON)
    2. ip -4|-6 route show default      (text)
    3. /proc/net/route + /proc/net/ipv6_route (raw kernel tables)

Windows uses PowerShell Get-NetRoute, one query per IP family.

The first gateway seen for a family within a run is that family's default.
"""

from collections.abc import Sequence

import config
from enums import DataSource, IPFamily, Platform
from logging_config import get_logger
from models import GatewayConfig, GatewayRecord
from network.route_parsing import (
    RouteLine,
    parse_json_records,
    first_nexthop,
    parse_kernel_tables,
    parse_route_text,
    read_kernel_tables,
    to_int,
    to_str,
)
from network.tiers import Tier, acquire_each, parse_each, run_tiers
from utils import (
    NoGatewayFound,
    detect_platform,
    ip_family,
    run_command,
    sanitize_for_log,
)

logger = get_logger(__name__)


def parse_ip_json_gateways(output: str) -> list[GatewayRecord]:
    """Parse "ip -j route show default".

    Format: [{"dst": "default", "gateway": "192.168.1.1", "dev": "wlan0",
              "protocol": "dhcp", "metric": 600, ...}]

    Entries without a gateway (e.g. "default dev wg0") are skipped.
    Multipath defaults use their first next hop.

    Args:
        output: JSON command output

    Returns:
        List of GatewayRecord in output order.
    """
    gateways = []
    for route in parse_json_records(output):
        hop = first_nexthop(route)
        interface = to_str(hop.get("dev"))
        gateway = to_str(hop.get("gateway"))
        if not interface or not gateway:
            continue
        gateways.append(
            GatewayRecord(
                interface=interface,
                gateway=gateway,
                family=ip_family(gateway),
                metric=to_int(route.get("metric")),
                source=DataSource.IP_JSON.value,
            )
        )
    return gateways


def parse_ip_route_gateways(output: str) -> list[GatewayRecord]:
    """Parse "ip route show default" text output.

    Format: "default via 192.168.1.1 dev wlan0 proto dhcp metric 600"

    Only lines starting with "default" are accepted. Multipath defaults
    take the gateway of their first "nexthop" line.

    Args:
        output: Command output

    Returns:
        List of GatewayRecord in output order.
    """
    gateways = []
    for route in parse_route_text(output):
        if route.destination != "default":
            continue
        gateway = _gateway_from_route_line(route, DataSource.IP_TEXT)
        if gateway:
            gateways.append(gateway)
    return gateways


def parse_kernel_gateways(tables: tuple[str, str]) -> list[GatewayRecord]:
    """Extract default-route gateways from the raw kernel tables.

    Args:
        tables: (ipv4, ipv6) contents of /proc/net/route and ipv6_route

    Returns:
        List of GatewayRecord, IPv4 table first.
    """
    gateways = []
    for route in parse_kernel_tables(tables):
        if not route.is_default:
            continue
        gateway = _gateway_from_route_line(route, DataSource.PROC_NET)
        if gateway:
            gateways.append(gateway)
    return gateways


def _gateway_from_route_line(route: RouteLine, source: DataSource) -> GatewayRecord | None:
    if not route.interface or not route.gateway:
        return None
    return GatewayRecord(
        interface=route.interface,
        gateway=route.gateway,
        family=ip_family(route.gateway),
        metric=route.metric,
        source=source.value,
    )


def parse_powershell_gateways(output: str, family: IPFamily) -> list[GatewayRecord]:
    """Parse Get-NetRoute JSON for one family.

    Format: {"InterfaceAlias": "Ethernet", "NextHop": "192.168.1.1",
             "RouteMetric": 0} or an array of such objects.

    Args:
        output: JSON command output
        family: Family the query was scoped to

    Returns:
        List of GatewayRecord in output order.
    """
    gateways = []
    for route in parse_json_records(output):
        interface = to_str(route.get("InterfaceAlias"))
        gateway = to_str(route.get("NextHop"))
        if not interface or not gateway:
            continue
        gateways.append(
            GatewayRecord(
                interface=interface,
                gateway=gateway,
                family=family,
                metric=to_int(route.get("RouteMetric")),
                source=DataSource.POWERSHELL.value,
            )
        )
    return gateways


def _powershell(command: str) -> str:
    return run_command(
        ["powershell", "-NoProfile", "-Command", command],
        timeout=config.POWERSHELL_TIMEOUT,
    )


def _windows_tier() -> Tier[GatewayRecord]:
    """Both families in one tier; either query may fail without hiding the other."""

    def acquire() -> tuple[str, ...]:
        return acquire_each([
            ("IPv4 gateway", lambda: _powershell(config.WINDOWS_GATEWAY_CMD)),
            ("IPv6 gateway", lambda: _powershell(config.WINDOWS_GATEWAY_IPV6_CMD)),
        ])

    def parse(outputs: tuple[str, ...]) -> list[GatewayRecord]:
        ipv4_output, ipv6_output = outputs
        return parse_powershell_gateways(ipv4_output, IPFamily.IPV4) + parse_powershell_gateways(
            ipv6_output, IPFamily.IPV6
        )

    return Tier(DataSource.POWERSHELL.value, acquire, parse)


def _ip_default_routes(*options: str) -> tuple[str, ...]:
    """Run "ip [options] route show default" for IPv4, then IPv6."""
    return acquire_each([
        (
            family.value,
            lambda flag=flag: run_command(
                ["ip", flag, *options, "route", "show", "default"],
                timeout=config.ROUTE_COMMAND_TIMEOUT,
            ),
        )
        for family, flag in ((IPFamily.IPV4, "-4"), (IPFamily.IPV6, "-6"))
    ])


def build_gateway_tiers(
    platform: Platform,
    proc_route_path: str = config.PROC_NET_ROUTE_PATH,
    proc_ipv6_route_path: str = config.PROC_NET_IPV6_ROUTE_PATH,
) -> list[Tier[GatewayRecord]]:
    """Ordered gateway strategies for a platform.

    Each ip tier queries IPv4 and IPv6 separately ("ip -4" then "ip -6").

    Args:
        platform: Host platform
        proc_route_path: IPv4 kernel table path
        proc_ipv6_route_path: IPv6 kernel table path

    Returns:
        List of tiers, most preferred first.
    """
    if platform == Platform.WINDOWS:
        return [_windows_tier()]

    return [
        Tier(
            DataSource.IP_JSON.value,
            lambda: _ip_default_routes("-j"),
            parse_each(parse_ip_json_gateways),
        ),
        Tier(
            DataSource.IP_TEXT.value,
            _ip_default_routes,
            parse_each(parse_ip_route_gateways),
        ),
        Tier(
            DataSource.PROC_NET.value,
            lambda: read_kernel_tables(proc_route_path, proc_ipv6_route_path),
            parse_kernel_gateways,
        ),
    ]


def select_defaults(gateways: Sequence[GatewayRecord]) -> GatewayConfig:
    """Designate the first gateway of each family as its default.

    Args:
        gateways: Records in acquisition order

    Returns:
        GatewayConfig with at most one default per family.
    """
    default_ipv4 = next((g for g in gateways if g.family == IPFamily.IPV4), None)
    default_ipv6 = next((g for g in gateways if g.family == IPFamily.IPV6), None)
    return GatewayConfig(
        gateways=tuple(gateways),
        default_ipv4=default_ipv4,
        default_ipv6=default_ipv6,
    )


def get_gateways(tiers: Sequence[Tier[GatewayRecord]] | None = None) -> GatewayConfig:
    """Collect gateways using the platform's tier chain.

    Args:
        tiers: Strategy chain (default: build_gateway_tiers for this host)

    Returns:
        GatewayConfig with defaults selected.

    Raises:
        NoGatewayFound: Every tier failed or produced nothing.
    """
    if tiers is None:
        tiers = build_gateway_tiers(detect_platform())

    gateways, source = run_tiers(tiers)
    if not gateways:
        logger.warning("No default gateway found (tried %d sources)", len(tiers))
        raise NoGatewayFound("No default gateway found", tiers=[t.name for t in tiers])

    result = select_defaults(gateways)
    for label, default in (("IPv4", result.default_ipv4), ("IPv6", result.default_ipv6)):
        if default:
            logger.debug(
                "Default %s gateway: %s via %s (source: %s)",
                label,
                sanitize_for_log(default.gateway),
                sanitize_for_log(default.interface),
                source,
            )
    return result


def get_default_gateway(
    family: IPFamily,
    tiers: Sequence[Tier[GatewayRecord]] | None = None,
) -> GatewayRecord:
    """Default gateway for one IP family.

    Args:
        family: IPFamily.IPV4 or IPFamily.IPV6
        tiers: Strategy chain (default: this host's)

    Returns:
        The family's default GatewayRecord.

    Raises:
        NoGatewayFound: No tier produced a gateway of that family.
    """
    gateways = get_gateways(tiers)
    default = gateways.default_ipv4 if family == IPFamily.IPV4 else gateways.default_ipv6
    if default is None:
        raise NoGatewayFound(f"No default {family.value} gateway found", family=family.value)
    return default
