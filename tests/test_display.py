"""Tests for display.py.

Tests table formatting and display output.
"""

from io import StringIO

from colors import Color
from display import (
    _connection_color,
    format_connections,
    format_connectivity,
    format_dns,
    format_gateways,
    format_interfaces,
    format_listening,
    format_local_ips,
    format_ping,
    format_ping_results,
    format_routes,
    print_error,
    print_table,
)
from enums import IPFamily, LatencyBand, LossBand, PingState, TransportType
from models import (
    ConnectionBatch,
    ConnectionRecord,
    ConnectivityStep,
    DNSConfig,
    DNSRecord,
    GatewayConfig,
    GatewayRecord,
    IPLocation,
    IPRecord,
    ListeningPort,
    PingAssessment,
    PingRecord,
)
from network.routes import summarize_routes
from utils import CommandTimeout


def render(func, *args) -> str:
    out = StringIO()
    func(*args, file=out)
    return out.getvalue()


class TestPrintTable:
    """Tests for print_table function."""

    def test_layout(self) -> None:
        """Test rules, header and padded rows."""
        out = StringIO()
        print_table("Title", (("A", 4), ("B", 6)), [("x", "yy")], file=out)
        lines = out.getvalue().splitlines()

        assert lines[0] == "=" * 12
        assert "Title" in lines[1]
        assert lines[3] == "A     B     "
        assert lines[4] == "-" * 12
        assert lines[5] == "x     yy"
        assert lines[6] == "=" * 12

    def test_truncates_cells(self) -> None:
        out = StringIO()
        print_table("T", (("NAME", 8),), [("verylonginterfacename",)], file=out)
        assert "veryl..." in out.getvalue()

    def test_row_color(self) -> None:
        out = StringIO()
        print_table("T", (("A", 4),), [("x",)], [Color.ERROR], file=out)
        assert f"{Color.ERROR}x{Color.RESET}" in out.getvalue()


class TestPrintError:
    """Tests for print_error function."""

    def test_user_friendly(self) -> None:
        """Test the raw error text is not shown."""
        output = render(print_error, CommandTimeout("ping -c 4 host timed out"))
        assert "Error:" in output
        assert "ping -c 4" not in output


class TestFormatInterfaces:
    """Tests for format_interfaces function."""

    def test_table_and_summary(self, sample_interface) -> None:
        output = render(format_interfaces, [sample_interface])
        assert "eth0" in output
        assert "aa:bb:cc:dd:ee:ff" in output
        assert "192.168.1.5/24, fe80::1/64" in output
        assert "Total interfaces: 1" in output
        assert "Up: 1" in output

    def test_empty(self) -> None:
        assert "No network interfaces found" in render(format_interfaces, [])


class TestFormatLocalIps:
    """Tests for format_local_ips function."""

    def test_public_ip_and_location(self) -> None:
        records = [IPRecord("eth0", "192.168.1.5", "", ("192.168.1.5",))]
        location = IPLocation("203.0.113.7", "Berlin", "Berlin", "Germany", "Example ISP", "Europe/Berlin")
        output = render(format_local_ips, records, "203.0.113.7", location)
        assert "192.168.1.5" in output
        assert "Public IP: 203.0.113.7" in output
        assert "Country: Germany" in output

    def test_no_public_ip(self) -> None:
        output = render(format_local_ips, [])
        assert "No local IP addresses found" in output
        assert "Public IP" not in output


class TestFormatDns:
    """Tests for format_dns function."""

    def test_records(self) -> None:
        dns_config = DNSConfig(
            records=(DNSRecord("system", ("192.168.1.1",), (), ("192.168.1.1",)),),
            search_domains=("lan",),
        )
        output = render(format_dns, dns_config)
        assert "system" in output
        assert "None" in output
        assert "Total IPv4 DNS servers: 1" in output
        assert "DNS search domains: lan" in output

    def test_empty(self) -> None:
        assert "No DNS servers found" in render(format_dns, DNSConfig(records=()))


class TestFormatGateways:
    """Tests for format_gateways function."""

    def test_default_marked(self, sample_gateway) -> None:
        other = GatewayRecord("eth0", "10.0.0.1", IPFamily.IPV4, 100, "ip -j route")
        gateways = GatewayConfig((sample_gateway, other), default_ipv4=sample_gateway)
        output = render(format_gateways, gateways)
        assert output.count("Default IPv4") == 1
        assert "10.0.0.1" in output


class TestFormatRoutes:
    """Tests for format_routes function."""

    def test_routes(self, sample_routes) -> None:
        output = render(format_routes, sample_routes, summarize_routes(sample_routes))
        assert "on-link" in output
        assert "Total routes: 3" in output
        assert "Default routes: 1" in output
        assert f"{Color.INFO}default" in output


class TestFormatConnections:
    """Tests for format_connections and its colors."""

    def test_colors(self, sample_connections) -> None:
        ssh, https, dns = sample_connections.connections
        assert _connection_color(https) == Color.OK
        assert _connection_color(ssh) == Color.INFO
        assert _connection_color(dns) == Color.WARN

    def test_table(self, sample_connections) -> None:
        output = render(format_connections, sample_connections)
        assert "sshd" in output
        assert "Unknown" in output
        assert "TCP6" in output
        assert "Total connections: 3" in output
        assert "Listening connections: 1" in output

    def test_empty(self) -> None:
        output = render(format_connections, ConnectionBatch(connections=()))
        assert "No active connections found" in output

    def test_sorted_by_status(self) -> None:
        batch = ConnectionBatch(
            connections=(
                ConnectionRecord(IPFamily.IPV4, TransportType.TCP, "0.0.0.0:80", "", "LISTEN", 1, "nginx"),
                ConnectionRecord(
                    IPFamily.IPV4, TransportType.TCP, "10.0.0.2:5000", "10.0.0.9:443", "ESTABLISHED", 2, "curl"
                ),
            ),
            total=2,
        )
        output = render(format_connections, batch)
        assert output.index("curl") < output.index("nginx")


class TestFormatListening:
    """Tests for format_listening function."""

    def test_ports(self) -> None:
        ports = [ListeningPort(22, TransportType.TCP, IPFamily.IPV4, "SSH", 812, "sshd")]
        output = render(format_listening, ports)
        assert "SSH" in output
        assert "IPv4" in output

    def test_empty(self) -> None:
        assert "No listening ports found" in render(format_listening, [])


class TestFormatPing:
    """Tests for format_ping and format_ping_results."""

    def test_success(self, successful_ping) -> None:
        output = render(format_ping, successful_ping, PingAssessment(LossBand.NONE, LatencyBand.LOW))
        assert "Ping to 8.8.8.8 successful" in output
        assert "Packets Sent: 4" in output
        assert "Avg RTT: 2.0ms" in output
        assert "No packet loss" in output
        assert "Low latency" in output

    def test_high_latency_message(self, successful_ping) -> None:
        output = render(format_ping, successful_ping, PingAssessment(LossBand.HIGH, LatencyBand.HIGH))
        assert "Poor connectivity" in output
        assert "High latency (2.0ms)" in output

    def test_failure_shows_raw_output(self) -> None:
        record = PingRecord(
            "192.0.2.1", False, PingState.FAILED, raw_output="100% packet loss", error="exit 1"
        )
        output = render(format_ping, record, PingAssessment(LossBand.NONE, LatencyBand.LOW))
        assert "failed (failed)" in output
        assert "Error: exit 1" in output
        assert "Raw Output:" in output

    def test_results_table(self, successful_ping) -> None:
        failed = PingRecord("10.255.255.1", False, PingState.TIMED_OUT)
        output = render(format_ping_results, [successful_ping, failed])
        assert "4/4" in output
        assert "FAILED" in output


class TestFormatConnectivity:
    """Tests for format_connectivity function."""

    def test_steps(self) -> None:
        steps = [
            ConnectivityStep("Local connectivity", "127.0.0.1", True, "0.1ms"),
            ConnectivityStep("Gateway connectivity", "", False, "No gateway found"),
        ]
        output = render(format_connectivity, steps)
        assert "1. Local connectivity 127.0.0.1:" in output
        assert "(0.1ms)" in output
        assert "2. Gateway connectivity:" in output
        assert "No gateway found" in output
