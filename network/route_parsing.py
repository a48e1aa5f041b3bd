"""Parsers shared by the gateway and route adapters.

Three source formats converge here:
    - JSON from "ip -j route" and PowerShell ConvertTo-Json
    - Text lines from "ip route show"
    - Raw kernel tables /proc/net/route and /proc/net/ipv6_route
"""

import ipaddress
import json
import socket
import struct
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from utils import ConfigReadError, ParseError

# /proc/net/route flag bits (linux/route.h)
RTF_UP = 0x0001
RTF_GATEWAY = 0x0002
RTF_REJECT = 0x0200

IPV4_ANY = "0.0.0.0"
IPV6_ANY = "::"
DEFAULT_DESTINATIONS = frozenset({"default", "0.0.0.0/0", "::/0"})

NEXTHOP_KEYWORD = "nexthop"

# Route types "ip route" prints ahead of the destination
ROUTE_TYPE_KEYWORDS = frozenset({
    "unicast",
    "local",
    "broadcast",
    "multicast",
    "anycast",
    "unreachable",
    "prohibit",
    "blackhole",
    "throw",
})


@dataclass(frozen=True)
class RouteLine:
    """Fields of one route entry, independent of its source format."""

    destination: str
    gateway: str  # "" when on-link
    interface: str
    metric: int
    protocol: str

    @property
    def is_default(self) -> bool:
        return self.destination in DEFAULT_DESTINATIONS


def parse_json_records(output: str) -> list[dict[str, Any]]:
    """Parse JSON that is either an array of objects or a single object.

    PowerShell's ConvertTo-Json emits a bare object when there is only
    one result, so both shapes are accepted.

    Args:
        output: Raw command output

    Returns:
        List of JSON objects (non-object array items are dropped).

    Raises:
        ParseError: Output is not a JSON array or object.
    """
    if not output.strip():
        return []

    try:
        data = json.loads(output)
    except json.JSONDecodeError as e:
        raise ParseError("Output is not valid JSON", cause=e) from e

    if isinstance(data, dict):
        return [data]
    if isinstance(data, list):
        return [item for item in data if isinstance(item, dict)]

    raise ParseError(f"Expected JSON array or object, got {type(data).__name__}")


def to_int(value: Any) -> int:
    """Coerce a JSON/text metric to int (0 when absent or malformed)."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return 0


def to_str(value: Any) -> str:
    """JSON string field or "" for missing/non-string values."""
    return value if isinstance(value, str) else ""


def find_token_value(parts: list[str], keyword: str) -> str:
    """Return the token following keyword, or "" if absent.

    Example:
        ["default", "via", "192.168.1.1", "dev", "wlan0"], "dev" → "wlan0"
    """
    for i, part in enumerate(parts):
        if part == keyword and i + 1 < len(parts):
            return parts[i + 1]
    return ""


def parse_route_text_line(line: str, default_protocol: str = "static") -> RouteLine | None:
    """Parse one line of "ip route show" output.

    Format:
        "default via 192.168.1.1 dev wlan0 proto dhcp metric 600"
        "192.168.1.0/24 dev wlan0 proto kernel scope link src 192.168.1.5"

    Args:
        line: Output line
        default_protocol: Protocol when no "proto" token is present

    Returns:
        RouteLine or None for blank/short lines.
    """
    parts = line.split()
    if len(parts) < 2:
        return None

    if parts[0] in ROUTE_TYPE_KEYWORDS:
        parts = parts[1:]

    return RouteLine(
        destination=parts[0],
        gateway=find_token_value(parts, "via"),
        interface=find_token_value(parts, "dev"),
        metric=to_int(find_token_value(parts, "metric")),
        protocol=find_token_value(parts, "proto") or default_protocol,
    )


def parse_route_text(output: str, default_protocol: str = "static") -> list[RouteLine]:
    """Parse full "ip route show" output, folding multipath continuations.

    A multipath route is printed as a header plus indented next hops:
        "default proto static metric 100"
        "        nexthop via 10.0.0.1 dev eth0 weight 1"
        "        nexthop via 10.0.0.2 dev eth1 weight 1"

    The first next hop supplies the gateway and interface of the route
    above it. Later next hops are dropped.

    Args:
        output: Command output
        default_protocol: Protocol when no "proto" token is present

    Returns:
        List of RouteLine in output order.
    """
    routes: list[RouteLine] = []
    for line in output.splitlines():
        parts = line.split()
        if parts and parts[0] == NEXTHOP_KEYWORD:
            if routes and not routes[-1].gateway and not routes[-1].interface:
                routes[-1] = replace(
                    routes[-1],
                    gateway=find_token_value(parts, "via"),
                    interface=find_token_value(parts, "dev"),
                )
            continue

        route = parse_route_text_line(line.strip(), default_protocol)
        if route is not None:
            routes.append(route)
    return routes


def first_nexthop(route: dict[str, Any]) -> dict[str, Any]:
    """Route object itself, or its first "nexthops" entry for multipath routes.

    "ip -j route" puts gateway and dev inside "nexthops" when a route has
    several paths.
    """
    if route.get("gateway") or route.get("dev"):
        return route
    nexthops = route.get("nexthops")
    if isinstance(nexthops, list) and nexthops and isinstance(nexthops[0], dict):
        return nexthops[0]
    return route


def read_table(path: str | Path) -> str:
    """Read a raw kernel table file.

    Raises:
        ConfigReadError: File missing or unreadable.
    """
    try:
        return Path(path).read_text()
    except OSError as e:
        raise ConfigReadError(f"Cannot read {path}", cause=e) from e


def _hex_le_to_ipv4(value: str) -> str:
    """Convert little-endian hex (as in /proc/net/route) to dotted quad."""
    return socket.inet_ntoa(struct.pack("<L", int(value, 16)))


def parse_proc_net_route(content: str) -> list[RouteLine]:
    """Parse /proc/net/route (IPv4).

    Format (tab separated, header first):
        Iface  Destination  Gateway   Flags  RefCnt  Use  Metric  Mask ...
        eth0   00000000     0101A8C0  0003   0       0    100     00000000

    Addresses are little-endian hex. Only routes with RTF_UP are kept.

    Args:
        content: File content

    Returns:
        List of RouteLine with CIDR destinations (bare address for /32).

    Raises:
        ParseError: A data line has malformed hex fields.
    """
    routes = []
    for line in content.splitlines()[1:]:
        fields = line.split()
        if len(fields) < 8:
            continue

        iface, dest_hex, gw_hex, flags_hex, _, _, metric, mask_hex = fields[:8]
        try:
            flags = int(flags_hex, 16)
            if not flags & RTF_UP:
                continue
            destination = _hex_le_to_ipv4(dest_hex)
            mask = _hex_le_to_ipv4(mask_hex)
            gateway = _hex_le_to_ipv4(gw_hex)
            prefix_len = ipaddress.IPv4Network(f"{destination}/{mask}", strict=False).prefixlen
        except (ValueError, struct.error) as e:
            raise ParseError(f"Malformed /proc/net/route line: {line!r}", cause=e) from e

        if prefix_len != 32:
            destination = f"{destination}/{prefix_len}"

        routes.append(
            RouteLine(
                destination=destination,
                gateway=gateway if flags & RTF_GATEWAY and gateway != IPV4_ANY else "",
                interface=iface,
                metric=to_int(metric),
                protocol="kernel",
            )
        )
    return routes


def parse_proc_net_ipv6_route(content: str) -> list[RouteLine]:
    """Parse /proc/net/ipv6_route.

    Format (space separated, no header):
        dest(32 hex) dest_len(hex) src(32 hex) src_len(hex) next_hop(32 hex)
        metric(hex) refcnt use flags(hex) device

    Loopback and reject routes are skipped (local table entries).

    Args:
        content: File content

    Returns:
        List of RouteLine with CIDR destinations (bare address for /128).

    Raises:
        ParseError: A line has malformed hex fields.
    """
    routes = []
    for line in content.splitlines():
        fields = line.split()
        if len(fields) < 10:
            continue

        dest_hex, len_hex, _, _, hop_hex, metric_hex, _, _, flags_hex, iface = fields[:10]
        if iface == "lo":
            continue
        try:
            flags = int(flags_hex, 16)
            if not flags & RTF_UP or flags & RTF_REJECT:
                continue
            destination = str(ipaddress.IPv6Address(bytes.fromhex(dest_hex)))
            prefix_len = int(len_hex, 16)
            next_hop = str(ipaddress.IPv6Address(bytes.fromhex(hop_hex)))
            metric = int(metric_hex, 16)
        except ValueError as e:
            raise ParseError(f"Malformed /proc/net/ipv6_route line: {line!r}", cause=e) from e

        if prefix_len != 128:
            destination = f"{destination}/{prefix_len}"

        routes.append(
            RouteLine(
                destination=destination,
                gateway="" if next_hop == IPV6_ANY else next_hop,
                interface=iface,
                metric=metric,
                protocol="kernel",
            )
        )
    return routes


def read_kernel_tables(ipv4_path: str | Path, ipv6_path: str | Path) -> tuple[str, str]:
    """Read the IPv4 and IPv6 kernel route tables.

    The IPv4 table is required; the IPv6 table is optional (absent when
    IPv6 is disabled).
    """
    ipv4 = read_table(ipv4_path)
    try:
        ipv6 = read_table(ipv6_path)
    except ConfigReadError:
        ipv6 = ""
    return (ipv4, ipv6)


def parse_kernel_tables(tables: tuple[str, str]) -> list[RouteLine]:
    """Parse the (ipv4, ipv6) table contents from read_kernel_tables()."""
    ipv4, ipv6 = tables
    return parse_proc_net_route(ipv4) + parse_proc_net_ipv6_route(ipv6)
