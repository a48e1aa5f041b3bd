"""Data models for network diagnostic records.

All models are frozen dataclasses: a record is built once per query and
never mutated afterwards. Sequences are tuples for the same reason.

Architecture: one record type per diagnostic domain, plus small container
types for values computed over a whole batch (defaults per family,
connection counters, route summaries).
"""

from dataclasses import dataclass, field

from enums import (
    InterfaceStatus,
    IPFamily,
    LatencyBand,
    LossBand,
    PingState,
    RouteType,
    TransportType,
)


@dataclass(frozen=True)
class InterfaceRecord:
    """A network interface as reported by the OS.

    Status is never stored: it is derived from the "up" flag.
    """

    name: str
    index: int
    mtu: int
    hardware_addr: str  # Empty for interfaces without a link-layer address
    flags: tuple[str, ...]
    addresses: tuple[str, ...]

    @property
    def status(self) -> InterfaceStatus:
        """UP if the interface carries the "up" flag, DOWN otherwise."""
        return InterfaceStatus.UP if "up" in self.flags else InterfaceStatus.DOWN

    @property
    def is_up(self) -> bool:
        return self.status == InterfaceStatus.UP


@dataclass(frozen=True)
class IPRecord:
    """Non-loopback local addresses of one interface."""

    interface: str
    ipv4: str  # First IPv4 address or ""
    ipv6: str  # First IPv6 address or ""
    local_ips: tuple[str, ...]


@dataclass(frozen=True)
class IPLocation:
    """Approximate location of a public IP address."""

    ip: str
    city: str
    region: str
    country: str
    org: str
    timezone: str


@dataclass(frozen=True)
class DNSRecord:
    """DNS servers configured for one interface (or "system")."""

    interface: str
    ipv4: tuple[str, ...]
    ipv6: tuple[str, ...]
    servers: tuple[str, ...]  # Every server, in source order


@dataclass(frozen=True)
class DNSConfig:
    """All DNS records plus the process-wide search domains."""

    records: tuple[DNSRecord, ...]
    search_domains: tuple[str, ...] = ()

    @property
    def ipv4_count(self) -> int:
        return sum(len(record.ipv4) for record in self.records)

    @property
    def ipv6_count(self) -> int:
        return sum(len(record.ipv6) for record in self.records)


@dataclass(frozen=True)
class DNSResolution:
    """Addresses a hostname resolved to."""

    hostname: str
    ipv4: tuple[str, ...]
    ipv6: tuple[str, ...]


@dataclass(frozen=True)
class GatewayRecord:
    """A default-route next hop.

    source is provenance only; it never influences ranking.
    """

    interface: str
    gateway: str
    family: IPFamily
    metric: int  # Lower is preferred
    source: str


@dataclass(frozen=True)
class GatewayConfig:
    """Gateways from one acquisition run.

    default_ipv4/default_ipv6 hold the first record seen for each family.
    """

    gateways: tuple[GatewayRecord, ...]
    default_ipv4: GatewayRecord | None = None
    default_ipv6: GatewayRecord | None = None


@dataclass(frozen=True)
class RouteRecord:
    """A routing table entry. An empty gateway means on-link."""

    destination: str
    gateway: str
    interface: str
    metric: int
    protocol: str
    source: str
    route_type: RouteType


@dataclass(frozen=True)
class RouteSummary:
    """Route counts grouped by type, protocol and interface."""

    total: int
    by_type: dict[str, int]
    by_protocol: dict[str, int]
    by_interface: dict[str, int]
    default_routes: int


@dataclass(frozen=True)
class ConnectionRecord:
    """A socket and (if resolvable) the name of its owning process.

    pid is a lookup key into the process table of the same batch; an
    unresolved pid leaves process empty.
    """

    family: IPFamily | None  # None for unix sockets
    transport: TransportType
    local_addr: str
    remote_addr: str  # Empty when not connected
    status: str
    pid: int  # 0 when the OS did not report one
    process: str

    @property
    def local_port(self) -> int | None:
        return _port_of(self.local_addr)

    @property
    def remote_port(self) -> int | None:
        return _port_of(self.remote_addr)


def _port_of(address: str) -> int | None:
    """Extract the port from an "ip:port" string (IPv6 safe)."""
    _, sep, port = address.rpartition(":")
    if not sep or not port.isdigit():
        return None
    return int(port)


@dataclass(frozen=True)
class ConnectionBatch:
    """Connections from one enumeration with counters over the whole batch."""

    connections: tuple[ConnectionRecord, ...]
    total: int = 0
    tcp: int = 0
    udp: int = 0
    listening: int = 0
    established: int = 0


@dataclass(frozen=True)
class ProcessConnections:
    """Connections owned by one process name."""

    process: str
    pid: int
    connections: tuple[ConnectionRecord, ...]
    tcp: int
    udp: int
    listening: int
    established: int


@dataclass(frozen=True)
class ListeningPort:
    """A listening socket with its well-known service name."""

    port: int
    transport: TransportType
    family: IPFamily | None
    service: str
    pid: int
    process: str


@dataclass(frozen=True)
class PingRecord:
    """Result of one ping run.

    Numeric fields stay at zero when the output carried no statistics.
    raw_output is kept for diagnostic display.
    """

    host: str
    success: bool
    state: PingState
    packet_loss: float = 0.0
    min_ms: float = 0.0
    avg_ms: float = 0.0
    max_ms: float = 0.0
    mdev_ms: float = 0.0
    packets_sent: int = 0
    packets_received: int = 0
    raw_output: str = ""
    error: str | None = None


@dataclass(frozen=True)
class PingAssessment:
    """Qualitative reading of a ping result (presentation only)."""

    loss: LossBand
    latency: LatencyBand


@dataclass(frozen=True)
class ConnectivityStep:
    """One step of the connectivity test."""

    name: str
    target: str
    ok: bool
    detail: str = ""


@dataclass(frozen=True)
class NetworkSnapshot:
    """Everything collected by one full export run.

    errors maps a domain name to the user-facing message of its failure.
    """

    interfaces: tuple[InterfaceRecord, ...] = ()
    local_ips: tuple[IPRecord, ...] = ()
    dns: DNSConfig | None = None
    gateways: GatewayConfig | None = None
    routes: tuple[RouteRecord, ...] = ()
    connections: ConnectionBatch | None = None
    errors: dict[str, str] = field(default_factory=dict)
