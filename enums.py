"""Type-safe enumerations for netinfo.

All categorical values use enum types for type safety and consistency.
"""

from enum import Enum


class Platform(str, Enum):
    """Host platform families that select acquisition strategies."""

    WINDOWS = "windows"
    LINUX = "linux"
    DARWIN = "darwin"
    OTHER = "other"


class IPFamily(str, Enum):
    """IP address family."""

    IPV4 = "IPv4"
    IPV6 = "IPv6"


class InterfaceStatus(str, Enum):
    """Interface state, derived from the "up" flag."""

    UP = "UP"
    DOWN = "DOWN"


class RouteType(str, Enum):
    """Route classification derived from the destination string."""

    DEFAULT = "Default"
    NETWORK = "Network"
    HOST = "Host"


class TransportType(str, Enum):
    """Socket transport as reported for a connection."""

    TCP = "tcp"
    UDP = "udp"
    TCP6 = "tcp6"
    UDP6 = "udp6"
    UNIX = "unix"
    UNKNOWN = "unknown"


class PingState(str, Enum):
    """Ping lifecycle.

    RUNNING: Child process executing. Transient only: ping_host() blocks
        until a terminal state, so no returned PingRecord carries it.
    COMPLETED: Exit observed with status 0
    TIMED_OUT: Deadline elapsed, child killed
    FAILED: Non-zero exit or runner failure
    """

    RUNNING = "running"
    COMPLETED = "completed"
    TIMED_OUT = "timed_out"
    FAILED = "failed"


class LossBand(str, Enum):
    """Packet loss assessment: 0%, below 5%, 5% and above."""

    NONE = "none"
    LOW = "low"
    HIGH = "high"


class LatencyBand(str, Enum):
    """Average RTT assessment: below 50ms, below 200ms, 200ms and above."""

    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


class ErrorKind(str, Enum):
    """Error classification used for retry policy and user messages."""

    NETWORK = "network"
    TIMEOUT = "timeout"
    PERMISSION = "permission"
    COMMAND = "command"
    PARSE = "parse"
    VALIDATION = "validation"
    UNKNOWN = "unknown"


class DataSource(str, Enum):
    """Provenance tags recorded on gateway and route records."""

    POWERSHELL = "PowerShell"
    IP_JSON = "ip -j route"
    IP_TEXT = "ip route"
    PROC_NET = "/proc/net"
