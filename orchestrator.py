"""Orchestrator for network data collection.

Coordinates the network adapters for the multi-domain commands: the
dependency check, the full snapshot used by "all" and JSON export, and the
step-by-step connectivity test.
"""

from collections.abc import Callable
from typing import Any

import config
from enums import IPFamily, Platform
from logging_config import get_logger
from models import ConnectivityStep, NetworkSnapshot
from network import (
    get_connections,
    get_default_gateway,
    get_dns_config,
    get_gateways,
    get_interfaces,
    get_local_ips,
    get_routes,
    quick_ping,
)
from utils import (
    NetinfoError,
    ValidationError,
    command_exists,
    detect_platform,
    format_ms,
    get_user_friendly_message,
    sanitize_for_log,
)

logger = get_logger(__name__)


def required_commands(command: str, platform: Platform) -> tuple[str, ...]:
    """System commands a CLI command cannot run without.

    Args:
        command: CLI command name
        platform: Host platform

    Returns:
        Tuple of executable names (may be empty).
    """
    needed = []
    if command in config.PING_COMMANDS:
        needed.append("ping")
    if platform == Platform.WINDOWS and command in config.POWERSHELL_COMMANDS:
        needed.append("powershell")
    return tuple(needed)


def check_dependencies(command: str, platform: Platform | None = None) -> bool:
    """Check all required system commands exist.

    Args:
        command: CLI command about to run
        platform: Host platform (default: detected)

    Returns:
        True if all dependencies present, False otherwise.

    Logs:
        ERROR for each missing command with install hint.
        DEBUG for missing optional commands (a fallback will be used).
    """
    platform = platform or detect_platform()
    missing = []

    for cmd in required_commands(command, platform):
        if not command_exists(cmd):
            missing.append(cmd)
            logger.error("Error: Missing required command: %s", cmd)
            hint = config.INSTALL_HINTS.get(cmd)
            if hint:
                logger.error("  Install: %s", hint)

    if platform != Platform.WINDOWS:
        for cmd in config.OPTIONAL_COMMANDS_POSIX:
            if not command_exists(cmd):
                logger.debug("Optional command %s not found, using /proc/net fallback", cmd)

    return len(missing) == 0


def _collect(domain: str, collector: Callable[[], Any], errors: dict[str, str]) -> Any:
    """Run one collector; record its failure instead of raising."""
    try:
        return collector()
    except NetinfoError as e:
        logger.warning("Failed to collect %s: %s", domain, sanitize_for_log(str(e)))
        errors[domain] = get_user_friendly_message(e)
        return None


def collect_snapshot() -> NetworkSnapshot:
    """Collect every domain into one snapshot.

    Process:
        1. Interfaces
        2. Local IPs
        3. DNS
        4. Gateways
        5. Routes
        6. Connections

    A failing domain is left empty and its user-facing message is stored
    in errors; the remaining domains are still collected.

    Returns:
        NetworkSnapshot.
    """
    errors: dict[str, str] = {}

    interfaces = _collect("interfaces", get_interfaces, errors)
    local_ips = _collect("ip", get_local_ips, errors)
    dns = _collect("dns", get_dns_config, errors)
    gateways = _collect("gateway", get_gateways, errors)
    routes = _collect("routes", get_routes, errors)
    connections = _collect("connections", get_connections, errors)

    logger.info("Snapshot collected (%d domains failed)", len(errors))
    return NetworkSnapshot(
        interfaces=tuple(interfaces or ()),
        local_ips=tuple(local_ips or ()),
        dns=dns,
        gateways=gateways,
        routes=tuple(routes or ()),
        connections=connections,
        errors=errors,
    )


def _ping_step(name: str, target: str, platform: Platform | None) -> ConnectivityStep:
    try:
        record = quick_ping(target, platform=platform)
    except ValidationError as e:
        return ConnectivityStep(name, target, False, get_user_friendly_message(e))
    if record.success:
        return ConnectivityStep(name, target, True, format_ms(record.avg_ms))
    return ConnectivityStep(name, target, False, record.state.value)


def run_connectivity_test(platform: Platform | None = None) -> list[ConnectivityStep]:
    """Step-by-step reachability check.

    Steps:
        1. Local (loopback)
        2. Default IPv4 gateway
        3. First IPv4 DNS server
        4. Internet (well-known public address)

    A step whose target cannot be determined is reported as failed with
    the reason; later steps still run.

    Args:
        platform: Host platform (default: detected)

    Returns:
        One ConnectivityStep per step, in order.
    """
    steps = [_ping_step("Local connectivity", config.LOCALHOST_PROBE_HOST, platform)]

    try:
        gateway = get_default_gateway(IPFamily.IPV4)
        steps.append(_ping_step("Gateway connectivity", gateway.gateway, platform))
    except NetinfoError as e:
        logger.debug("Gateway step skipped: %s", sanitize_for_log(str(e)))
        steps.append(ConnectivityStep("Gateway connectivity", "", False, "No gateway found"))

    try:
        dns_config = get_dns_config(platform)
        server = next((r.ipv4[0] for r in dns_config.records if r.ipv4), None)
    except NetinfoError as e:
        logger.debug("DNS step skipped: %s", sanitize_for_log(str(e)))
        server = None
    if server:
        steps.append(_ping_step("DNS server", server, platform))
    else:
        steps.append(ConnectivityStep("DNS server", "", False, "No IPv4 DNS server found"))

    steps.append(_ping_step("Internet connectivity", config.INTERNET_PROBE_HOST, platform))
    return steps
