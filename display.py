"""Table output formatting and display.

Formats canonical records as color-coded tables. This module never sees
raw command output; sorting and truncation happen here only.
Uses rule-based pattern for color selection (maintainable, extensible).
"""

import sys
from collections.abc import Callable, Sequence
from typing import TextIO

import config
from colors import Color, colorize
from enums import InterfaceStatus, LatencyBand, LossBand, RouteType
from models import (
    ConnectionBatch,
    ConnectionRecord,
    ConnectivityStep,
    DNSConfig,
    DNSResolution,
    GatewayConfig,
    InterfaceRecord,
    IPLocation,
    IPRecord,
    ListeningPort,
    PingAssessment,
    PingRecord,
    RouteRecord,
    RouteSummary,
)
from utils import format_ms, format_percent, get_user_friendly_message, join_or_marker, shorten_text

Columns = tuple[tuple[str, int], ...]

# Type alias for color selection predicate
ColorPredicate = Callable[[ConnectionRecord], bool]


def _out(file: TextIO | None) -> TextIO:
    return file if file is not None else sys.stdout


def _table_width(columns: Columns) -> int:
    return sum(width for _, width in columns) + len(config.COLUMN_SEPARATOR) * (len(columns) - 1)


def print_table(
    title: str,
    columns: Columns,
    rows: Sequence[Sequence[object]],
    row_colors: Sequence[str] | None = None,
    file: TextIO | None = None,
) -> None:
    """Print a titled table.

    Process:
        1. Print header and column names
        2. Truncate and pad each cell to its column width
        3. Print each row, colored when a color is given

    Args:
        title: Table title
        columns: (name, width) pairs
        rows: Cell values per row (converted with str())
        row_colors: Optional color per row ("" for none)
        file: Optional file handle (default: sys.stdout)
    """
    file = _out(file)
    width = _table_width(columns)

    print("=" * width, file=file)
    print(colorize(title, Color.HEADER), file=file)
    print("=" * width, file=file)
    print(config.COLUMN_SEPARATOR.join(name.ljust(w) for name, w in columns), file=file)
    print("-" * width, file=file)

    for i, row in enumerate(rows):
        parts = [
            shorten_text(str(value), w).ljust(w) for (_, w), value in zip(columns, row)
        ]
        line = config.COLUMN_SEPARATOR.join(parts).rstrip()
        color = row_colors[i] if row_colors else ""
        print(colorize(line, color), file=file)

    print("=" * width, file=file)


def print_summary(title: str, items: Sequence[tuple[str, object]], file: TextIO | None = None) -> None:
    """Print a bulleted key/value summary."""
    file = _out(file)
    print(f"\n{title}:", file=file)
    for label, value in items:
        print(f"  • {label}: {value}", file=file)


def print_error(error: BaseException, file: TextIO | None = None) -> None:
    """Print the user-facing message for an error (never the raw text)."""
    file = file if file is not None else sys.stderr
    print(colorize(f"Error: {get_user_friendly_message(error)}", Color.ERROR), file=file)


def print_warning(message: str, file: TextIO | None = None) -> None:
    print(colorize(message, Color.WARN), file=_out(file))


def format_interfaces(interfaces: Sequence[InterfaceRecord], file: TextIO | None = None) -> None:
    """Interface table: UP rows green, DOWN rows red."""
    if not interfaces:
        print_warning("No network interfaces found", file)
        return

    rows = [
        (
            iface.name,
            iface.index,
            iface.mtu,
            iface.status.value,
            iface.hardware_addr or "--",
            join_or_marker(iface.addresses),
        )
        for iface in interfaces
    ]
    colors = [Color.OK if i.status == InterfaceStatus.UP else Color.ERROR for i in interfaces]
    print_table("Network Interfaces", config.INTERFACE_COLUMNS, rows, colors, file)

    up = sum(1 for iface in interfaces if iface.is_up)
    print_summary(
        "Interface Summary",
        [("Total interfaces", len(interfaces)), ("Up", up), ("Down", len(interfaces) - up)],
        file,
    )


def format_local_ips(
    records: Sequence[IPRecord],
    public_ip: str | None = None,
    location: IPLocation | None = None,
    file: TextIO | None = None,
) -> None:
    """Local address table plus optional public IP and location."""
    file = _out(file)
    if records:
        rows = [(r.interface, r.ipv4 or "--", r.ipv6 or "--") for r in records]
        print_table("Local IP Addresses", config.IP_COLUMNS, rows, file=file)
    else:
        print_warning("No local IP addresses found", file)

    if public_ip:
        items: list[tuple[str, object]] = [("Public IP", public_ip)]
        if location is not None:
            items += [
                ("City", location.city),
                ("Region", location.region),
                ("Country", location.country),
                ("Organization", location.org),
                ("Timezone", location.timezone),
            ]
        print_summary("Public IP Information", items, file)


def format_dns(dns_config: DNSConfig, file: TextIO | None = None) -> None:
    """DNS servers per interface and the search list."""
    if not dns_config.records:
        print_warning("No DNS servers found", file)
        return

    rows = [
        (r.interface, join_or_marker(r.ipv4, "None"), join_or_marker(r.ipv6, "None"))
        for r in dns_config.records
    ]
    print_table("DNS Servers", config.DNS_COLUMNS, rows, file=file)

    print_summary(
        "DNS Information Summary",
        [
            ("Total interfaces", len(dns_config.records)),
            ("Total IPv4 DNS servers", dns_config.ipv4_count),
            ("Total IPv6 DNS servers", dns_config.ipv6_count),
            ("DNS search domains", join_or_marker(dns_config.search_domains)),
        ],
        file,
    )


def format_resolution(resolution: DNSResolution, file: TextIO | None = None) -> None:
    print_summary(
        f"Resolution of {resolution.hostname}",
        [
            ("IPv4 addresses", join_or_marker(resolution.ipv4)),
            ("IPv6 addresses", join_or_marker(resolution.ipv6)),
        ],
        file,
    )


def format_gateways(gateways: GatewayConfig, file: TextIO | None = None) -> None:
    """Gateway table; the per-family defaults are marked and colored."""
    rows = []
    colors = []
    for gw in gateways.gateways:
        is_default = gw is gateways.default_ipv4 or gw is gateways.default_ipv6
        label = f"Default {gw.family.value}" if is_default else gw.family.value
        rows.append((label, gw.interface, gw.gateway, gw.metric, gw.source))
        colors.append(Color.OK if is_default else "")

    print_table("Default Gateways", config.GATEWAY_COLUMNS, rows, colors, file)


def format_routes(
    routes: Sequence[RouteRecord],
    summary: RouteSummary,
    file: TextIO | None = None,
) -> None:
    """Routing table with default routes highlighted, then counts."""
    rows = [
        (
            r.destination,
            r.gateway or "on-link",
            r.interface or "--",
            r.metric,
            r.protocol or "--",
            r.route_type.value,
        )
        for r in routes
    ]
    colors = [Color.INFO if r.route_type == RouteType.DEFAULT else "" for r in routes]
    print_table("Routing Table", config.ROUTE_COLUMNS, rows, colors, file)

    items: list[tuple[str, object]] = [
        ("Total routes", summary.total),
        ("Default routes", summary.default_routes),
    ]
    items += [(f"{name} routes", count) for name, count in summary.by_type.items()]
    items += [(f"Protocol {name or '--'}", count) for name, count in summary.by_protocol.items()]
    print_summary("Route Summary", items, file)


def _connection_color(conn: ConnectionRecord) -> str:
    """Row color for a connection.

    Priority (first match wins):
        1. ESTABLISHED -> OK
        2. LISTEN -> INFO
        3. Anything else -> WARN
    """
    rules: list[tuple[ColorPredicate, str]] = [
        (lambda c: c.status == "ESTABLISHED", Color.OK),
        (lambda c: c.status == "LISTEN", Color.INFO),
    ]
    for predicate, color in rules:
        if predicate(conn):
            return color
    return Color.WARN


def format_connections(batch: ConnectionBatch, file: TextIO | None = None) -> None:
    """Connections sorted by status then local address, plus counters."""
    if not batch.connections:
        print_warning("No active connections found", file)
        return

    connections = sorted(batch.connections, key=lambda c: (c.status, c.local_addr))
    rows = [
        (
            c.transport.value.upper(),
            c.local_addr,
            c.remote_addr or "-",
            c.status or "-",
            c.pid or "-",
            c.process or "Unknown",
        )
        for c in connections
    ]
    colors = [_connection_color(c) for c in connections]
    print_table("Active Network Connections", config.CONNECTION_COLUMNS, rows, colors, file)

    print_summary(
        "Connection Summary",
        [
            ("Total connections", batch.total),
            ("TCP connections", batch.tcp),
            ("UDP connections", batch.udp),
            ("Listening connections", batch.listening),
            ("Established connections", batch.established),
        ],
        file,
    )


def format_listening(ports: Sequence[ListeningPort], file: TextIO | None = None) -> None:
    if not ports:
        print_warning("No listening ports found", file)
        return

    rows = [
        (
            p.port,
            p.transport.value.upper(),
            p.family.value if p.family else "--",
            p.service,
            p.pid or "-",
            p.process or "Unknown",
        )
        for p in ports
    ]
    colors = [Color.INFO if p.service != "Unknown" else "" for p in ports]
    print_table("Listening Ports", config.LISTENING_COLUMNS, rows, colors, file)


_LOSS_MESSAGES = {
    LossBand.NONE: (Color.OK, "No packet loss - Excellent connectivity"),
    LossBand.LOW: (Color.WARN, "{loss} packet loss - Good connectivity"),
    LossBand.HIGH: (Color.ERROR, "{loss} packet loss - Poor connectivity"),
}
_LATENCY_MESSAGES = {
    LatencyBand.LOW: (Color.OK, "Low latency - Excellent response time"),
    LatencyBand.MODERATE: (Color.INFO, "Moderate latency - Good response time"),
    LatencyBand.HIGH: (Color.WARN, "High latency ({avg}) - Consider network optimization"),
}


def format_ping(
    record: PingRecord,
    assessment: PingAssessment,
    file: TextIO | None = None,
) -> None:
    """Single ping result: statistics then assessment.

    Failed pings show the error and the raw output instead.
    """
    file = _out(file)
    if not record.success:
        print(colorize(f"Ping to {record.host} failed ({record.state.value})", Color.ERROR), file=file)
        if record.error:
            print(f"Error: {record.error}", file=file)
        if record.raw_output:
            print(f"\nRaw Output:\n{record.raw_output}", file=file)
        return

    print(colorize(f"Ping to {record.host} successful", Color.OK), file=file)
    print_summary(
        "Ping Statistics",
        [
            ("Packets Sent", record.packets_sent),
            ("Packets Received", record.packets_received),
            ("Packet Loss", format_percent(record.packet_loss)),
            ("Min RTT", format_ms(record.min_ms)),
            ("Avg RTT", format_ms(record.avg_ms)),
            ("Max RTT", format_ms(record.max_ms)),
        ],
        file,
    )

    print("\nPerformance Assessment:", file=file)
    color, message = _LOSS_MESSAGES[assessment.loss]
    print(colorize("  " + message.format(loss=format_percent(record.packet_loss)), color), file=file)
    color, message = _LATENCY_MESSAGES[assessment.latency]
    print(colorize("  " + message.format(avg=format_ms(record.avg_ms)), color), file=file)


def format_ping_results(records: Sequence[PingRecord], file: TextIO | None = None) -> None:
    """Multi-host ping table."""
    rows = [
        (
            r.host,
            "OK" if r.success else "FAILED",
            format_percent(r.packet_loss),
            format_ms(r.avg_ms),
            f"{r.packets_received}/{r.packets_sent}",
        )
        for r in records
    ]
    colors = [Color.OK if r.success else Color.ERROR for r in records]
    print_table("Multiple Host Ping Results", config.PING_COLUMNS, rows, colors, file)


def format_connectivity(steps: Sequence[ConnectivityStep], file: TextIO | None = None) -> None:
    """Numbered connectivity test steps with OK/FAILED markers."""
    file = _out(file)
    print(colorize("Comprehensive Connectivity Test", Color.HEADER), file=file)
    for number, step in enumerate(steps, start=1):
        status = colorize("OK", Color.OK) if step.ok else colorize("FAILED", Color.ERROR)
        detail = f" ({step.detail})" if step.detail else ""
        target = f" {step.target}" if step.target else ""
        print(f"{number}. {step.name}{target}: {status}{detail}", file=file)
