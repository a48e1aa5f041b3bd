"""Active socket enumeration and process correlation.

Uses psutil for both the socket table and the PID -> name table. The PID
table is built once per batch; a PID missing from it simply leaves the
process name empty.
"""

import socket
from collections.abc import Mapping, Sequence
from typing import Any

import psutil

import config
from enums import ErrorKind, IPFamily, TransportType
from logging_config import get_logger
from models import ConnectionBatch, ConnectionRecord, ListeningPort, ProcessConnections
from utils import CollectionError

logger = get_logger(__name__)

STATUS_LISTEN = "LISTEN"
STATUS_ESTABLISHED = "ESTABLISHED"

_TCP_TRANSPORTS = (TransportType.TCP, TransportType.TCP6)
_UDP_TRANSPORTS = (TransportType.UDP, TransportType.UDP6)

_TRANSPORTS: dict[tuple[int, int], TransportType] = {
    (socket.AF_INET, socket.SOCK_STREAM): TransportType.TCP,
    (socket.AF_INET, socket.SOCK_DGRAM): TransportType.UDP,
    (socket.AF_INET6, socket.SOCK_STREAM): TransportType.TCP6,
    (socket.AF_INET6, socket.SOCK_DGRAM): TransportType.UDP6,
}

# Remote addresses that mean "not connected"
_UNSPECIFIED_HOSTS = frozenset({"", "0.0.0.0", "::"})


def normalize_status(status: str) -> str:
    """Map an OS status string onto the fixed vocabulary.

    "LISTENING" (Windows) becomes "LISTEN"; everything else is upper-cased
    and passed through, so the function is idempotent.

    Args:
        status: Raw status from the OS

    Returns:
        Normalized status.
    """
    normalized = status.strip().upper()
    if normalized == "LISTENING":
        return STATUS_LISTEN
    return normalized


def transport_of(family: int, sock_type: int) -> TransportType:
    """Transport for a socket family/type pair."""
    if family == getattr(socket, "AF_UNIX", None):
        return TransportType.UNIX
    return _TRANSPORTS.get((family, sock_type), TransportType.UNKNOWN)


def _family_of(family: int) -> IPFamily | None:
    if family == socket.AF_INET:
        return IPFamily.IPV4
    if family == socket.AF_INET6:
        return IPFamily.IPV6
    return None


def format_address(address: Any, remote: bool = False) -> str:
    """Render a psutil address as "ip:port".

    Unix sockets report a path string, which is returned as is. Remote
    endpoints with an unspecified host render as "".

    Args:
        address: psutil addr namedtuple, path string or empty tuple
        remote: True for the remote endpoint

    Returns:
        Address string ("" when there is none).
    """
    if isinstance(address, str):
        return address
    if not address:
        return ""

    ip, port = address[0], address[1]
    if not ip or (remote and ip in _UNSPECIFIED_HOSTS):
        return ""
    return f"{ip}:{port}"


def build_process_table() -> dict[int, str]:
    """PID -> process name for every running process.

    Failures are absorbed: an unreadable process table only costs names.

    Returns:
        Mapping of pid to name (processes without a readable name omitted).
    """
    table: dict[int, str] = {}
    try:
        for proc in psutil.process_iter(["pid", "name"]):
            pid = proc.info.get("pid")
            name = proc.info.get("name")
            if pid is not None and name:
                table[pid] = name
    except psutil.Error as e:
        logger.debug("Process table unavailable: %s", e)
    return table


def to_connection_record(conn: Any, processes: Mapping[int, str]) -> ConnectionRecord | None:
    """Convert one psutil sconn into a ConnectionRecord.

    Args:
        conn: psutil sconn (fd, family, type, laddr, raddr, status, pid)
        processes: PID -> name table for this batch

    Returns:
        ConnectionRecord, or None when the local address is empty.
    """
    local_addr = format_address(conn.laddr)
    if not local_addr:
        return None

    pid = conn.pid or 0
    return ConnectionRecord(
        family=_family_of(conn.family),
        transport=transport_of(conn.family, conn.type),
        local_addr=local_addr,
        remote_addr=format_address(conn.raddr, remote=True),
        status=normalize_status(conn.status or ""),
        pid=pid,
        process=processes.get(pid, "") if pid else "",
    )


def count_connections(connections: Sequence[ConnectionRecord]) -> dict[str, int]:
    """Aggregate counters over a batch.

    tcp counts tcp and tcp6; udp counts udp and udp6.
    """
    return {
        "total": len(connections),
        "tcp": sum(1 for c in connections if c.transport in _TCP_TRANSPORTS),
        "udp": sum(1 for c in connections if c.transport in _UDP_TRANSPORTS),
        "listening": sum(1 for c in connections if c.status == STATUS_LISTEN),
        "established": sum(1 for c in connections if c.status == STATUS_ESTABLISHED),
    }


def build_batch(raw_connections: Sequence[Any], processes: Mapping[int, str]) -> ConnectionBatch:
    """Correlate raw sockets with process names and compute counters."""
    records = []
    for conn in raw_connections:
        record = to_connection_record(conn, processes)
        if record is not None:
            records.append(record)

    return ConnectionBatch(connections=tuple(records), **count_connections(records))


def get_connections(kind: str = "all") -> ConnectionBatch:
    """Enumerate active sockets with their owning process names.

    Args:
        kind: psutil connection kind ("all", "inet", "tcp", ...)

    Returns:
        ConnectionBatch with counters computed over the whole batch.

    Raises:
        CollectionError: Socket enumeration failed (kind PERMISSION when
            access was denied).
    """
    try:
        raw_connections = psutil.net_connections(kind=kind)
    except psutil.AccessDenied as e:
        raise CollectionError(
            "Access denied enumerating connections", cause=e, kind=ErrorKind.PERMISSION
        ) from e
    except (psutil.Error, OSError) as e:
        raise CollectionError("Failed to enumerate connections", cause=e) from e

    batch = build_batch(raw_connections, build_process_table())
    logger.debug(
        "Connections: %d total, %d tcp, %d udp, %d listening, %d established",
        batch.total,
        batch.tcp,
        batch.udp,
        batch.listening,
        batch.established,
    )
    return batch


def group_by_process(batch: ConnectionBatch) -> list[ProcessConnections]:
    """Group connections by process name (unresolved ones under "").

    Args:
        batch: Batch from get_connections()

    Returns:
        Groups ordered by descending connection count, then name.
    """
    groups: dict[str, list[ConnectionRecord]] = {}
    for conn in batch.connections:
        groups.setdefault(conn.process, []).append(conn)

    result = []
    for process, connections in groups.items():
        counters = count_connections(connections)
        result.append(
            ProcessConnections(
                process=process,
                pid=connections[0].pid,
                connections=tuple(connections),
                tcp=counters["tcp"],
                udp=counters["udp"],
                listening=counters["listening"],
                established=counters["established"],
            )
        )

    result.sort(key=lambda g: (-len(g.connections), g.process))
    return result


def get_service_name(port: int, ports: Mapping[int, str] = config.WELL_KNOWN_PORTS) -> str:
    """Well-known service for a port, "Unknown" otherwise."""
    return ports.get(port, "Unknown")


def get_listening_ports(
    batch: ConnectionBatch,
    ports: Mapping[int, str] = config.WELL_KNOWN_PORTS,
) -> list[ListeningPort]:
    """Listening TCP sockets and bound UDP sockets, one entry per socket.

    UDP has no LISTEN state; a UDP socket without a remote endpoint is
    treated as listening.

    Args:
        batch: Batch from get_connections()
        ports: Port -> service name table

    Returns:
        ListeningPort entries sorted by port then transport.
    """
    listening = []
    for conn in batch.connections:
        is_tcp_listener = conn.transport in _TCP_TRANSPORTS and conn.status == STATUS_LISTEN
        is_udp_bound = conn.transport in _UDP_TRANSPORTS and not conn.remote_addr
        if not (is_tcp_listener or is_udp_bound):
            continue

        port = conn.local_port
        if port is None:
            continue

        listening.append(
            ListeningPort(
                port=port,
                transport=conn.transport,
                family=conn.family,
                service=get_service_name(port, ports),
                pid=conn.pid,
                process=conn.process,
            )
        )

    listening.sort(key=lambda p: (p.port, p.transport.value))
    return listening


def get_connections_by_port(batch: ConnectionBatch, port: int) -> list[ConnectionRecord]:
    """Connections whose local or remote port equals port."""
    return [c for c in batch.connections if port in (c.local_port, c.remote_port)]
