"""ICMP reachability via the system ping utility.

Lifecycle of one ping:
    RUNNING → COMPLETED   (exit status 0)
            → TIMED_OUT   (deadline elapsed, child killed)
            → FAILED      (non-zero exit, ping missing, invalid host)

RUNNING lasts only while run_command() blocks; callers always receive one
of the terminal states.

Statistics are extracted from the free-text summary. Lines that match no
pattern are ignored; missing statistics leave numeric fields at zero.
"""

import re
import time
from collections.abc import Sequence

import config
from enums import LatencyBand, LossBand, Platform, PingState
from logging_config import get_logger
from models import PingAssessment, PingRecord
from utils import (
    CommandFailed,
    CommandTimeout,
    NetinfoError,
    ValidationError,
    detect_platform,
    run_command,
    sanitize_for_log,
    validate_hostname,
)

logger = get_logger(__name__)

# Windows: "Packets: Sent = 4, Received = 4, Lost = 0 (0% loss),"
_WIN_LOSS = re.compile(r"\((\d+)% loss\)")
_WIN_PACKETS = re.compile(r"Sent = (\d+), Received = (\d+)")
_WIN_RTT = re.compile(r"Minimum = (\d+)ms, Maximum = (\d+)ms, Average = (\d+)ms")

# POSIX: "4 packets transmitted, 4 received, 0% packet loss, time 3004ms"
#        "rtt min/avg/max/mdev = 1.000/2.000/3.000/0.500 ms"  (Linux)
#        "round-trip min/avg/max/stddev = ..."                (BSD/macOS)
_POSIX_LOSS = re.compile(r"([\d.]+)% packet loss")
_POSIX_PACKETS = re.compile(r"(\d+) packets transmitted, (\d+) (?:packets )?received")
_POSIX_RTT = re.compile(
    r"(?:rtt|round-trip) min/avg/max/(?:mdev|stddev) = "
    r"([\d.]+)/([\d.]+)/([\d.]+)/([\d.]+) ms"
)

LOSS_LOW_THRESHOLD = 5.0
LATENCY_LOW_MS = 50.0
LATENCY_MODERATE_MS = 200.0


def parse_windows_ping(output: str, count: int) -> dict[str, float | int]:
    """Extract statistics from Windows ping output.

    Windows reports integer loss and whole-millisecond RTTs. When the
    "Sent = N, Received = M" phrase is absent, sent defaults to count and
    received is derived from the loss percentage.

    Args:
        output: Raw ping output
        count: Packets requested

    Returns:
        Dict of PingRecord numeric fields (mdev is always 0).
    """
    stats: dict[str, float | int] = {}
    sent = received = None

    for line in output.splitlines():
        line = line.strip()

        match = _WIN_LOSS.search(line)
        if match:
            stats["packet_loss"] = float(match.group(1))
        match = _WIN_PACKETS.search(line)
        if match:
            sent, received = int(match.group(1)), int(match.group(2))
        match = _WIN_RTT.search(line)
        if match:
            stats["min_ms"] = float(match.group(1))
            stats["max_ms"] = float(match.group(2))
            stats["avg_ms"] = float(match.group(3))

    if sent is None:
        sent = count
        loss = float(stats.get("packet_loss", 0.0))
        received = int(sent * (100 - loss) / 100)

    stats["packets_sent"] = sent
    stats["packets_received"] = received
    return stats


def parse_posix_ping(output: str) -> dict[str, float | int]:
    """Extract statistics from Linux/BSD ping output.

    Args:
        output: Raw ping output

    Returns:
        Dict of the PingRecord numeric fields that were found.
    """
    stats: dict[str, float | int] = {}

    for line in output.splitlines():
        line = line.strip()

        match = _POSIX_LOSS.search(line)
        if match:
            stats["packet_loss"] = float(match.group(1))
        match = _POSIX_PACKETS.search(line)
        if match:
            stats["packets_sent"] = int(match.group(1))
            stats["packets_received"] = int(match.group(2))
        match = _POSIX_RTT.search(line)
        if match:
            stats["min_ms"] = float(match.group(1))
            stats["avg_ms"] = float(match.group(2))
            stats["max_ms"] = float(match.group(3))
            stats["mdev_ms"] = float(match.group(4))

    return stats


def build_ping_command(host: str, count: int, timeout: float, platform: Platform) -> list[str]:
    """Ping argument list for a platform.

    Windows: ping -n <count> <host>
    POSIX:   ping -c <count> -W <timeout> <host>
    """
    if platform == Platform.WINDOWS:
        return ["ping", "-n", str(count), host]
    return ["ping", "-c", str(count), "-W", str(max(1, int(timeout))), host]


def ping_host(
    host: str,
    count: int = config.PING_COUNT,
    timeout: float = config.PING_TIMEOUT,
    platform: Platform | None = None,
) -> PingRecord:
    """Ping a host and parse the summary.

    Unreachable hosts are not exceptions: they come back as a record with
    success False and the error text set.

    Args:
        host: Hostname or IP address
        count: Packets to send (1..PING_MAX_COUNT)
        timeout: Deadline in seconds for the whole run
        platform: Host platform (default: detected)

    Returns:
        PingRecord in a terminal state.

    Raises:
        ValidationError: host is empty/malformed or count out of range.
    """
    host = host.strip()
    if not validate_hostname(host):
        raise ValidationError(f"Invalid host: {host!r}", host=host)
    if not 1 <= count <= config.PING_MAX_COUNT:
        raise ValidationError(
            f"Packet count must be between 1 and {config.PING_MAX_COUNT}", count=count
        )

    platform = platform or detect_platform()
    cmd = build_ping_command(host, count, timeout, platform)

    logger.debug("Pinging %s (%d packets)", sanitize_for_log(host), count)

    try:
        output = run_command(cmd, timeout=timeout)
    except CommandTimeout as e:
        logger.debug("Ping to %s timed out", sanitize_for_log(host))
        return PingRecord(host=host, success=False, state=PingState.TIMED_OUT, error=str(e))
    except CommandFailed as e:
        logger.debug("Ping to %s failed: %s", sanitize_for_log(host), sanitize_for_log(str(e)))
        return PingRecord(
            host=host,
            success=False,
            state=PingState.FAILED,
            raw_output=e.stdout,
            error=str(e),
        )

    if platform == Platform.WINDOWS:
        stats = parse_windows_ping(output, count)
    else:
        stats = parse_posix_ping(output)

    return PingRecord(
        host=host,
        success=True,
        state=PingState.COMPLETED,
        raw_output=output,
        **stats,
    )


def quick_ping(host: str, platform: Platform | None = None) -> PingRecord:
    """Short ping: 3 packets, 5 second deadline."""
    return ping_host(
        host,
        count=config.QUICK_PING_COUNT,
        timeout=config.QUICK_PING_TIMEOUT,
        platform=platform,
    )


def ping_multiple_hosts(
    hosts: Sequence[str] = config.DEFAULT_PING_HOSTS,
    delay: float = config.PING_SETTLE_DELAY,
    platform: Platform | None = None,
) -> list[PingRecord]:
    """Quick-ping hosts one after another.

    One child process at a time, with a settling delay between hosts.
    A failing host never aborts the batch.

    Args:
        hosts: Targets in order
        delay: Pause between hosts (seconds)
        platform: Host platform (default: detected)

    Returns:
        One PingRecord per host, in input order.
    """
    results = []
    for i, host in enumerate(hosts):
        try:
            result = quick_ping(host, platform=platform)
        except NetinfoError as e:
            logger.warning("Failed to ping %s: %s", sanitize_for_log(host), sanitize_for_log(str(e)))
            result = PingRecord(host=host, success=False, state=PingState.FAILED, error=str(e))
        results.append(result)

        if i < len(hosts) - 1:
            time.sleep(delay)

    return results


def assess_ping(record: PingRecord) -> PingAssessment:
    """Qualitative loss and latency bands.

    Loss:    0% → NONE, <5% → LOW, ≥5% → HIGH
    Latency: <50ms → LOW, <200ms → MODERATE, ≥200ms → HIGH
    """
    if record.packet_loss == 0:
        loss = LossBand.NONE
    elif record.packet_loss < LOSS_LOW_THRESHOLD:
        loss = LossBand.LOW
    else:
        loss = LossBand.HIGH

    if record.avg_ms < LATENCY_LOW_MS:
        latency = LatencyBand.LOW
    elif record.avg_ms < LATENCY_MODERATE_MS:
        latency = LatencyBand.MODERATE
    else:
        latency = LatencyBand.HIGH

    return PingAssessment(loss=loss, latency=latency)
