"""Configuration constants for netinfo.

All configurable values stored here for easy customization.
Single source of truth for all constants and configuration.

Tables are immutable (tuples, frozensets, MappingProxyType). Adapters take
them as keyword arguments defaulting to these values, so tests can pass
their own.
"""

from enum import IntEnum
from types import MappingProxyType

# Command Timeouts (seconds)
COMMAND_TIMEOUT: float = 10.0
POWERSHELL_TIMEOUT: float = 15.0
ROUTE_COMMAND_TIMEOUT: float = 5.0

# Ping
PING_COUNT: int = 4
PING_TIMEOUT: float = 10.0
QUICK_PING_COUNT: int = 3
QUICK_PING_TIMEOUT: float = 5.0
PING_SETTLE_DELAY: float = 0.5  # Pause between hosts in a batch
PING_MAX_COUNT: int = 100

# HTTP
HTTP_TIMEOUT: float = 5.0  # Per request
PUBLIC_IP_DEADLINE: float = 10.0  # Whole endpoint loop

# Retry (linear backoff, only for timeout/network errors)
RETRY_ATTEMPTS: int = 3
RETRY_DELAY_SECONDS: float = 1.0
MAX_RETRY_DELAY_SECONDS: float = 10.0

# Public IP echo services, tried in order
PUBLIC_IP_ENDPOINTS: tuple[str, ...] = (
    "https://api.ipify.org",
    "https://ifconfig.me/ip",
    "https://icanhazip.com",
    "https://ident.me",
    "https://ipecho.net/plain",
)

# Geolocation lookup ({ip} is substituted)
IP_LOCATION_URL: str = "https://ipapi.co/{ip}/json/"

# Well-known public DNS resolvers
PUBLIC_DNS_SERVERS: frozenset[str] = frozenset({
    # Cloudflare
    "1.1.1.1",
    "1.0.0.1",
    "2606:4700:4700::1111",
    "2606:4700:4700::1001",
    # Google
    "8.8.8.8",
    "8.8.4.4",
    "2001:4860:4860::8888",
    "2001:4860:4860::8844",
    # Quad9
    "9.9.9.9",
    "149.112.112.112",
    "2620:fe::fe",
    "2620:fe::9",
    # OpenDNS
    "208.67.222.222",
    "208.67.220.220",
})

# Well-known port -> service name
WELL_KNOWN_PORTS: MappingProxyType[int, str] = MappingProxyType({
    22: "SSH",
    23: "Telnet",
    25: "SMTP",
    53: "DNS",
    80: "HTTP",
    110: "POP3",
    143: "IMAP",
    443: "HTTPS",
    993: "IMAPS",
    995: "POP3S",
    1433: "MSSQL",
    3306: "MySQL",
    3389: "RDP",
    5432: "PostgreSQL",
    5900: "VNC",
    6379: "Redis",
})

# Hosts used by the multi-host ping test
DEFAULT_PING_HOSTS: tuple[str, ...] = (
    "google.com",
    "cloudflare.com",
    "microsoft.com",
    "1.1.1.1",
    "8.8.8.8",
)

# Internet reachability probe for the connectivity test
INTERNET_PROBE_HOST: str = "8.8.8.8"
LOCALHOST_PROBE_HOST: str = "127.0.0.1"

# Filesystem sources
RESOLV_CONF_PATH: str = "/etc/resolv.conf"
PROC_NET_ROUTE_PATH: str = "/proc/net/route"
PROC_NET_IPV6_ROUTE_PATH: str = "/proc/net/ipv6_route"

# PowerShell queries (Windows)
WINDOWS_DNS_CMD: str = (
    "Get-DnsClientServerAddress -AddressFamily IPv4,IPv6 | "
    "Select-Object InterfaceAlias, ServerAddresses | ConvertTo-Json"
)
WINDOWS_GATEWAY_CMD: str = (
    'Get-NetRoute -DestinationPrefix "0.0.0.0/0" | '
    "Select-Object InterfaceAlias, NextHop, RouteMetric | ConvertTo-Json"
)
WINDOWS_GATEWAY_IPV6_CMD: str = (
    'Get-NetRoute -DestinationPrefix "::/0" | '
    "Select-Object InterfaceAlias, NextHop, RouteMetric | ConvertTo-Json"
)
WINDOWS_ROUTES_CMD: str = (
    "Get-NetRoute | Select-Object DestinationPrefix, NextHop, "
    "InterfaceAlias, RouteMetric, Protocol | ConvertTo-Json"
)

# Required System Commands (per CLI command)
PING_COMMANDS: frozenset[str] = frozenset({"ping", "ping-all", "connectivity"})
POWERSHELL_COMMANDS: frozenset[str] = frozenset({"dns", "gateway", "routes", "connectivity", "all"})

# Optional on POSIX: gateway and route lookups fall back to /proc/net
OPTIONAL_COMMANDS_POSIX: tuple[str, ...] = ("ip",)

# Install hints for missing commands
INSTALL_HINTS: MappingProxyType[str, str] = MappingProxyType({
    "ip": "sudo apt install iproute2",
    "ping": "sudo apt install iputils-ping",
    "powershell": "Install Windows PowerShell 5.1 or PowerShell 7",
})

# Table Configuration
INTERFACE_COLUMNS: tuple[tuple[str, int], ...] = (
    ("NAME", 16),
    ("INDEX", 6),
    ("MTU", 6),
    ("STATUS", 6),
    ("MAC", 18),
    ("ADDRESSES", 40),
)
IP_COLUMNS: tuple[tuple[str, int], ...] = (
    ("INTERFACE", 16),
    ("IPv4", 15),
    ("IPv6", 39),
)
DNS_COLUMNS: tuple[tuple[str, int], ...] = (
    ("INTERFACE", 20),
    ("IPv4", 32),
    ("IPv6", 45),
)
GATEWAY_COLUMNS: tuple[tuple[str, int], ...] = (
    ("TYPE", 12),
    ("INTERFACE", 16),
    ("GATEWAY", 39),
    ("METRIC", 8),
    ("SOURCE", 12),
)
ROUTE_COLUMNS: tuple[tuple[str, int], ...] = (
    ("DESTINATION", 43),
    ("GATEWAY", 39),
    ("INTERFACE", 16),
    ("METRIC", 8),
    ("PROTOCOL", 10),
    ("TYPE", 8),
)
CONNECTION_COLUMNS: tuple[tuple[str, int], ...] = (
    ("PROTO", 6),
    ("LOCAL", 45),
    ("REMOTE", 45),
    ("STATUS", 12),
    ("PID", 7),
    ("PROCESS", 20),
)
LISTENING_COLUMNS: tuple[tuple[str, int], ...] = (
    ("PORT", 6),
    ("PROTO", 6),
    ("FAMILY", 6),
    ("SERVICE", 12),
    ("PID", 7),
    ("PROCESS", 20),
)
PING_COLUMNS: tuple[tuple[str, int], ...] = (
    ("HOST", 24),
    ("STATUS", 8),
    ("LOSS", 8),
    ("AVG RTT", 10),
    ("PACKETS", 8),
)

COLUMN_SEPARATOR: str = "  "


# Exit Codes
class ExitCode(IntEnum):
    """Standard exit codes for the netinfo tool."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    MISSING_DEPENDENCIES = 2
    PERMISSION_DENIED = 3
    INVALID_ARGUMENTS = 4


# Tool Metadata
VERSION: str = "1.0.0"
TOOL_NAME: str = "netinfo"
