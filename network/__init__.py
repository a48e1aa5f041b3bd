"""Network diagnostic adapters for netinfo.

Provides interface and IP enumeration, DNS configuration, default
gateways, routing tables, active connections, ping and public IP lookup.
"""

from .connections import (
    get_connections,
    get_connections_by_port,
    get_listening_ports,
    get_service_name,
    group_by_process,
    normalize_status,
)
from .dns import (
    get_dns_config,
    get_dns_servers_by_interface,
    is_public_dns,
    resolve_hostname,
)
from .external_ip import get_ip_location, get_public_ip
from .gateway import get_default_gateway, get_gateways
from .interfaces import get_active_interfaces, get_interface_by_name, get_interfaces
from .ip import get_local_ips, get_primary_local_ip
from .ping import assess_ping, ping_host, ping_multiple_hosts, quick_ping
from .routes import (
    classify_route,
    get_default_routes,
    get_routes,
    get_routes_by_interface,
    summarize_routes,
)

__all__ = [
    # Interfaces and IP
    "get_interfaces",
    "get_interface_by_name",
    "get_active_interfaces",
    "get_local_ips",
    "get_primary_local_ip",
    # External IP
    "get_public_ip",
    "get_ip_location",
    # DNS
    "get_dns_config",
    "get_dns_servers_by_interface",
    "resolve_hostname",
    "is_public_dns",
    # Gateway
    "get_gateways",
    "get_default_gateway",
    # Routes
    "get_routes",
    "get_routes_by_interface",
    "get_default_routes",
    "classify_route",
    "summarize_routes",
    # Connections
    "get_connections",
    "group_by_process",
    "get_listening_ports",
    "get_connections_by_port",
    "get_service_name",
    "normalize_status",
    # Ping
    "ping_host",
    "quick_ping",
    "ping_multiple_hosts",
    "assess_ping",
]
