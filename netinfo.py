#!/usr/bin/env python3
"""Netinfo - Network Diagnostics Tool.

Main entry point for the netinfo command-line tool.
"""

import argparse
import sys
import traceback
from collections.abc import Callable
from pathlib import Path
from typing import Any

import config
import display
from config import ExitCode
from enums import ErrorKind
from export import export_to_json
from logging_config import get_logger, setup_logging
from network import (
    assess_ping,
    get_connections,
    get_dns_config,
    get_gateways,
    get_interfaces,
    get_ip_location,
    get_listening_ports,
    get_local_ips,
    get_public_ip,
    get_routes,
    ping_host,
    ping_multiple_hosts,
    resolve_hostname,
    summarize_routes,
)
from orchestrator import check_dependencies, collect_snapshot, run_connectivity_test
from utils import NetinfoError, classify_error, sanitize_for_log

logger = get_logger(__name__)

COMMANDS = (
    "interfaces",
    "ip",
    "dns",
    "gateway",
    "routes",
    "connections",
    "listening",
    "ping",
    "ping-all",
    "connectivity",
    "all",
)
DEFAULT_PING_HOST = "google.com"


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed arguments namespace.

    Exits:
        Code 4 if invalid argument combinations.
    """
    parser = argparse.ArgumentParser(
        prog=config.TOOL_NAME,
        description="Cross-platform network diagnostics",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  netinfo interfaces               # Interface table
  netinfo ip --public              # Local and public IP addresses
  netinfo dns --host example.com   # DNS servers plus a resolution test
  netinfo ping --host 1.1.1.1 --count 10
  netinfo all --export json --output report.json
  netinfo -v --log-file debug.log routes

Exit codes:
  0 - Success
  1 - General error
  2 - Missing dependencies
  3 - Permission denied
  4 - Invalid arguments
        """,
    )

    parser.add_argument(
        "command",
        choices=COMMANDS,
        metavar="COMMAND",
        help="One of: " + ", ".join(COMMANDS),
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    parser.add_argument(
        "--log-file",
        type=Path,
        metavar="PATH",
        help="Write logs to file",
    )

    parser.add_argument(
        "--export",
        choices=["json"],
        metavar="FORMAT",
        help="Export format (json)",
    )

    parser.add_argument(
        "--output",
        type=Path,
        metavar="PATH",
        help="Export destination file (requires --export)",
    )

    parser.add_argument(
        "--host",
        metavar="HOST",
        help=f"Target for ping (default: {DEFAULT_PING_HOST}) or name to resolve with dns",
    )

    parser.add_argument(
        "--count",
        type=int,
        default=config.PING_COUNT,
        metavar="N",
        help=f"Ping packet count, 1-{config.PING_MAX_COUNT} (default: {config.PING_COUNT})",
    )

    parser.add_argument(
        "--public",
        action="store_true",
        help="Include public IP and location (ip command)",
    )

    args = parser.parse_args(argv)

    # Validation: --output requires --export
    if args.output and not args.export:
        print("Error: --output requires --export", file=sys.stderr)
        sys.exit(ExitCode.INVALID_ARGUMENTS)

    if not 1 <= args.count <= config.PING_MAX_COUNT:
        print(f"Error: --count must be between 1 and {config.PING_MAX_COUNT}", file=sys.stderr)
        sys.exit(ExitCode.INVALID_ARGUMENTS)

    return args


def run_interfaces(args: argparse.Namespace) -> Any:
    interfaces = get_interfaces()
    if not args.export:
        display.format_interfaces(interfaces)
    return interfaces


def run_ip(args: argparse.Namespace) -> Any:
    """Local addresses, plus public IP and location with --public.

    A failed location lookup only costs the location; a failed public IP
    lookup is an error.
    """
    local_ips = get_local_ips()
    public_ip = None
    location = None

    if args.public:
        public_ip = get_public_ip()
        try:
            location = get_ip_location(public_ip)
        except NetinfoError as e:
            logger.warning("Location lookup failed: %s", sanitize_for_log(str(e)))

    if not args.export:
        display.format_local_ips(local_ips, public_ip, location)
    return {"local_ips": local_ips, "public_ip": public_ip, "location": location}


def run_dns(args: argparse.Namespace) -> Any:
    dns_config = get_dns_config()
    resolution = resolve_hostname(args.host) if args.host else None

    if not args.export:
        display.format_dns(dns_config)
        if resolution is not None:
            display.format_resolution(resolution)
    return {"config": dns_config, "resolution": resolution}


def run_gateway(args: argparse.Namespace) -> Any:
    gateways = get_gateways()
    if not args.export:
        display.format_gateways(gateways)
    return gateways


def run_routes(args: argparse.Namespace) -> Any:
    routes = get_routes()
    summary = summarize_routes(routes)
    if not args.export:
        display.format_routes(routes, summary)
    return {"routes": routes, "summary": summary}


def run_connections(args: argparse.Namespace) -> Any:
    batch = get_connections()
    if not args.export:
        display.format_connections(batch)
    return batch


def run_listening(args: argparse.Namespace) -> Any:
    ports = get_listening_ports(get_connections())
    if not args.export:
        display.format_listening(ports)
    return ports


def run_ping(args: argparse.Namespace) -> Any:
    record = ping_host(args.host or DEFAULT_PING_HOST, count=args.count)
    assessment = assess_ping(record)
    if not args.export:
        display.format_ping(record, assessment)
    return {"result": record, "assessment": assessment if record.success else None}


def run_ping_all(args: argparse.Namespace) -> Any:
    records = ping_multiple_hosts()
    if not args.export:
        display.format_ping_results(records)
    return records


def run_connectivity(args: argparse.Namespace) -> Any:
    steps = run_connectivity_test()
    if not args.export:
        display.format_connectivity(steps)
    return steps


def run_all(args: argparse.Namespace) -> Any:
    """Every domain; failures are shown per domain and do not stop the run."""
    snapshot = collect_snapshot()
    if not args.export:
        display.format_interfaces(snapshot.interfaces)
        display.format_local_ips(snapshot.local_ips)
        if snapshot.dns is not None:
            display.format_dns(snapshot.dns)
        if snapshot.gateways is not None:
            display.format_gateways(snapshot.gateways)
        if snapshot.routes:
            display.format_routes(snapshot.routes, summarize_routes(snapshot.routes))
        if snapshot.connections is not None:
            display.format_connections(snapshot.connections)
        for domain, message in snapshot.errors.items():
            display.print_warning(f"{domain}: {message}")
    return snapshot


HANDLERS: dict[str, Callable[[argparse.Namespace], Any]] = {
    "interfaces": run_interfaces,
    "ip": run_ip,
    "dns": run_dns,
    "gateway": run_gateway,
    "routes": run_routes,
    "connections": run_connections,
    "listening": run_listening,
    "ping": run_ping,
    "ping-all": run_ping_all,
    "connectivity": run_connectivity,
    "all": run_all,
}


def exit_code_for(error: BaseException) -> ExitCode:
    """Map an error onto the tool's exit codes."""
    kind = classify_error(error)
    if kind == ErrorKind.PERMISSION:
        return ExitCode.PERMISSION_DENIED
    if kind == ErrorKind.VALIDATION:
        return ExitCode.INVALID_ARGUMENTS
    return ExitCode.GENERAL_ERROR


def main(argv: list[str] | None = None) -> None:
    """Main execution flow.

    Exit codes:
        0: Success
        1: General error
        2: Missing dependencies
        3: Permission denied
        4: Invalid arguments
    """
    args = parse_arguments(argv)

    # Setup logging (must be called before any logger usage)
    setup_logging(verbose=args.verbose, log_file=args.log_file)

    # Check dependencies
    if not check_dependencies(args.command):
        logger.error("Missing required dependencies - cannot continue")
        sys.exit(ExitCode.MISSING_DEPENDENCIES)

    try:
        logger.info("Running %s...", args.command)
        data = HANDLERS[args.command](args)

        # Output
        if args.export:
            json_data = export_to_json(args.command, data)
            if args.output:
                args.output.write_text(json_data)
                logger.info("Exported to %s", sanitize_for_log(str(args.output)))
            else:
                print(json_data)

        sys.exit(ExitCode.SUCCESS)

    except KeyboardInterrupt:
        logger.error("Interrupted by user")
        sys.exit(ExitCode.GENERAL_ERROR)
    except NetinfoError as e:
        logger.debug("Command %s failed: %s", args.command, sanitize_for_log(str(e)))
        display.print_error(e)
        if args.verbose:
            traceback.print_exc()
        sys.exit(exit_code_for(e))
    except OSError as e:
        logger.error("Error during execution: %s", sanitize_for_log(str(e)))
        display.print_error(e)
        if args.verbose:
            traceback.print_exc()
        sys.exit(exit_code_for(e))


if __name__ == "__main__":
    main()
