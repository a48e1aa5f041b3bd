"""Pytest configuration and shared fixtures.

Provides common test fixtures and configuration for the test suite.
"""

import socket
import sys
from collections.abc import Generator
from pathlib import Path
from unittest.mock import Mock

import pytest

# Add parent directory to path so imports work
# This allows: from enums import ... to find /project/enums.py
sys.path.insert(0, str(Path(__file__).parent.parent))

from enums import IPFamily, PingState, RouteType, TransportType
from logging_config import setup_logging
from models import (
    ConnectionBatch,
    ConnectionRecord,
    GatewayRecord,
    InterfaceRecord,
    PingRecord,
    RouteRecord,
)


# Configure logging once for entire test session
# This prevents logging handler MagicMock errors
@pytest.fixture(scope="session", autouse=True)
def configure_logging() -> Generator[None, None, None]:
    """Configure logging for all tests.

    Runs once before any tests (scope="session", autouse=True).
    """
    setup_logging(verbose=False)
    yield


# Captured command outputs

LINUX_PING_OUTPUT = """PING 8.8.8.8 (8.8.8.8) 56(84) bytes of data.
64 bytes from 8.8.8.8: icmp_seq=1 ttl=117 time=1.00 ms
64 bytes from 8.8.8.8: icmp_seq=2 ttl=117 time=2.00 ms
64 bytes from 8.8.8.8: icmp_seq=3 ttl=117 time=3.00 ms
64 bytes from 8.8.8.8: icmp_seq=4 ttl=117 time=2.00 ms

--- 8.8.8.8 ping statistics ---
4 packets transmitted, 4 received, 0% packet loss, time 3004ms
rtt min/avg/max/mdev = 1.000/2.000/3.000/0.500 ms
"""

WINDOWS_PING_OUTPUT = """
Pinging 8.8.8.8 with 32 bytes of data:
Reply from 8.8.8.8: bytes=32 time=12ms TTL=117
Reply from 8.8.8.8: bytes=32 time=14ms TTL=117
Request timed out.
Reply from 8.8.8.8: bytes=32 time=13ms TTL=117

Ping statistics for 8.8.8.8:
    Packets: Sent = 4, Received = 3, Lost = 1 (25% loss),
Approximate round trip times in milli-seconds:
    Minimum = 12ms, Maximum = 14ms, Average = 13ms
"""

IP_JSON_DEFAULT_ROUTES = """[
  {"dst": "default", "gateway": "192.168.1.1", "dev": "wlan0", "protocol": "dhcp", "metric": 600, "flags": []},
  {"dst": "default", "gateway": "10.0.0.1", "dev": "eth0", "protocol": "dhcp", "metric": 100, "flags": []}
]"""

IP_TEXT_ROUTES = """default via 192.168.1.1 dev wlan0 proto dhcp metric 600
10.8.0.0/24 dev tun0 proto kernel scope link src 10.8.0.2
192.168.1.0/24 dev wlan0 proto kernel scope link src 192.168.1.5 metric 600
203.0.113.9 via 192.168.1.1 dev wlan0
"""

# Little-endian hex: 0101A8C0 = 192.168.1.1, 0001A8C0 = 192.168.1.0, 00FFFFFF = 255.255.255.0
PROC_NET_ROUTE = (
    "Iface\tDestination\tGateway \tFlags\tRefCnt\tUse\tMetric\tMask\t\tMTU\tWindow\tIRTT\n"
    "eth0\t00000000\t0101A8C0\t0003\t0\t0\t100\t00000000\t0\t0\t0\n"
    "eth0\t0001A8C0\t00000000\t0001\t0\t0\t100\t00FFFFFF\t0\t0\t0\n"
)

PROC_NET_IPV6_ROUTE = (
    "00000000000000000000000000000000 00 00000000000000000000000000000000 00 "
    "fe800000000000000000000000000001 00000400 00000001 00000000 00000003 eth0\n"
    "20010db8000000000000000000000000 40 00000000000000000000000000000000 00 "
    "00000000000000000000000000000000 00000100 00000001 00000000 00000001 eth0\n"
    "00000000000000000000000000000001 80 00000000000000000000000000000000 00 "
    "00000000000000000000000000000000 00000000 00000002 00000000 80200001 lo\n"
)


@pytest.fixture
def sample_interface() -> InterfaceRecord:
    """An UP ethernet interface with one IPv4 and one IPv6 address."""
    return InterfaceRecord(
        name="eth0",
        index=2,
        mtu=1500,
        hardware_addr="aa:bb:cc:dd:ee:ff",
        flags=("up", "broadcast", "running", "multicast"),
        addresses=("192.168.1.5/24", "fe80::1/64"),
    )


@pytest.fixture
def sample_gateway() -> GatewayRecord:
    return GatewayRecord(
        interface="wlan0",
        gateway="192.168.1.1",
        family=IPFamily.IPV4,
        metric=600,
        source="ip -j route",
    )


@pytest.fixture
def sample_routes() -> list[RouteRecord]:
    """A default, a network and a host route."""
    return [
        RouteRecord("default", "192.168.1.1", "wlan0", 600, "dhcp", "ip route", RouteType.DEFAULT),
        RouteRecord("192.168.1.0/24", "", "wlan0", 600, "kernel", "ip route", RouteType.NETWORK),
        RouteRecord("203.0.113.9", "192.168.1.1", "wlan0", 0, "static", "ip route", RouteType.HOST),
    ]


@pytest.fixture
def sample_connections() -> ConnectionBatch:
    """Listening SSH, an established HTTPS client and a bound DNS socket."""
    connections = (
        ConnectionRecord(IPFamily.IPV4, TransportType.TCP, "0.0.0.0:22", "", "LISTEN", 812, "sshd"),
        ConnectionRecord(
            IPFamily.IPV6,
            TransportType.TCP6,
            "2001:db8::5:51234",
            "2001:db8::1:443",
            "ESTABLISHED",
            2001,
            "firefox",
        ),
        ConnectionRecord(IPFamily.IPV4, TransportType.UDP, "127.0.0.53:53", "", "NONE", 0, ""),
    )
    return ConnectionBatch(
        connections=connections, total=3, tcp=2, udp=1, listening=1, established=1
    )


@pytest.fixture
def successful_ping() -> PingRecord:
    return PingRecord(
        host="8.8.8.8",
        success=True,
        state=PingState.COMPLETED,
        packet_loss=0.0,
        min_ms=1.0,
        avg_ms=2.0,
        max_ms=3.0,
        mdev_ms=0.5,
        packets_sent=4,
        packets_received=4,
        raw_output=LINUX_PING_OUTPUT,
    )


def make_sconn(
    laddr=("192.168.1.5", 51234),
    raddr=("93.184.216.34", 443),
    status="ESTABLISHED",
    pid=1234,
    family=socket.AF_INET,
    sock_type=socket.SOCK_STREAM,
) -> Mock:
    """Fake psutil sconn namedtuple."""
    return Mock(fd=3, family=family, type=sock_type, laddr=laddr, raddr=raddr, status=status, pid=pid)
