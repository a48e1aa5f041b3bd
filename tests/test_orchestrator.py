"""Tests for orchestrator.py.

Tests dependency checking, snapshot collection and the connectivity test.
Uses extensive mocking for the network adapters.
"""

from unittest.mock import patch

from enums import IPFamily, Platform, PingState
from models import DNSConfig, DNSRecord, PingRecord
from orchestrator import (
    check_dependencies,
    collect_snapshot,
    required_commands,
    run_connectivity_test,
)
from utils import CollectionError, ConfigReadError, NoGatewayFound, NoRoutesFound


def _ok(host: str) -> PingRecord:
    return PingRecord(host, True, PingState.COMPLETED, avg_ms=12.0, packets_sent=3, packets_received=3)


class TestRequiredCommands:
    """Tests for required_commands function."""

    def test_posix(self) -> None:
        assert required_commands("ping", Platform.LINUX) == ("ping",)
        assert required_commands("routes", Platform.LINUX) == ()
        assert required_commands("interfaces", Platform.DARWIN) == ()

    def test_windows(self) -> None:
        assert required_commands("connectivity", Platform.WINDOWS) == ("ping", "powershell")
        assert required_commands("dns", Platform.WINDOWS) == ("powershell",)
        assert required_commands("connections", Platform.WINDOWS) == ()


class TestCheckDependencies:
    """Tests for check_dependencies function."""

    @patch("orchestrator.command_exists")
    def test_all_dependencies_present(self, mock_exists) -> None:
        mock_exists.return_value = True
        assert check_dependencies("ping", Platform.LINUX) is True

    @patch("orchestrator.command_exists")
    def test_missing_required(self, mock_exists) -> None:
        """Test a missing command is reported with its install hint."""
        mock_exists.return_value = False
        with patch("orchestrator.logger") as mock_logger:
            assert check_dependencies("ping", Platform.LINUX) is False
        messages = [c.args[0] % c.args[1:] for c in mock_logger.error.call_args_list]
        assert "Error: Missing required command: ping" in messages
        assert "  Install: sudo apt install iputils-ping" in messages

    @patch("orchestrator.command_exists")
    def test_missing_ip_is_optional(self, mock_exists) -> None:
        """Test routes still run without ip (kernel table fallback)."""
        mock_exists.return_value = False
        assert check_dependencies("routes", Platform.LINUX) is True

    @patch("orchestrator.command_exists")
    def test_windows_powershell(self, mock_exists) -> None:
        mock_exists.side_effect = lambda cmd: cmd != "powershell"
        assert check_dependencies("gateway", Platform.WINDOWS) is False
        assert check_dependencies("interfaces", Platform.WINDOWS) is True


class TestCollectSnapshot:
    """Tests for collect_snapshot function."""

    @patch("orchestrator.get_connections")
    @patch("orchestrator.get_routes")
    @patch("orchestrator.get_gateways")
    @patch("orchestrator.get_dns_config")
    @patch("orchestrator.get_local_ips")
    @patch("orchestrator.get_interfaces")
    def test_partial_failure(
        self,
        mock_interfaces,
        mock_ips,
        mock_dns,
        mock_gateways,
        mock_routes,
        mock_connections,
        sample_interface,
        sample_connections,
    ) -> None:
        """Test a failing domain does not stop the others."""
        mock_interfaces.return_value = [sample_interface]
        mock_ips.return_value = []
        mock_dns.side_effect = ConfigReadError("Cannot read /etc/resolv.conf")
        mock_gateways.side_effect = NoGatewayFound("No default gateway found")
        mock_routes.side_effect = NoRoutesFound("No routing information available")
        mock_connections.return_value = sample_connections

        snapshot = collect_snapshot()

        assert snapshot.interfaces == (sample_interface,)
        assert snapshot.dns is None
        assert snapshot.gateways is None
        assert snapshot.routes == ()
        assert snapshot.connections is sample_connections
        assert set(snapshot.errors) == {"dns", "gateway", "routes"}

    @patch("orchestrator.get_connections")
    @patch("orchestrator.get_routes")
    @patch("orchestrator.get_gateways")
    @patch("orchestrator.get_dns_config")
    @patch("orchestrator.get_local_ips")
    @patch("orchestrator.get_interfaces")
    def test_error_messages_user_facing(
        self, mock_interfaces, mock_ips, mock_dns, mock_gateways, mock_routes, mock_connections
    ) -> None:
        for mock in (mock_interfaces, mock_ips, mock_dns, mock_gateways, mock_routes):
            mock.return_value = []
        mock_connections.side_effect = CollectionError("psutil exploded")

        snapshot = collect_snapshot()
        assert "psutil" not in snapshot.errors["connections"]


class TestRunConnectivityTest:
    """Tests for run_connectivity_test function."""

    @patch("orchestrator.quick_ping")
    @patch("orchestrator.get_dns_config")
    @patch("orchestrator.get_default_gateway")
    def test_all_steps_pass(self, mock_gateway, mock_dns, mock_ping, sample_gateway) -> None:
        mock_gateway.return_value = sample_gateway
        mock_dns.return_value = DNSConfig(
            records=(
                DNSRecord("eth0", (), ("fe80::1",), ("fe80::1",)),
                DNSRecord("wlan0", ("192.168.1.53",), (), ("192.168.1.53",)),
            )
        )
        mock_ping.side_effect = lambda host, platform=None: _ok(host)

        steps = run_connectivity_test(Platform.LINUX)

        assert [s.name for s in steps] == [
            "Local connectivity",
            "Gateway connectivity",
            "DNS server",
            "Internet connectivity",
        ]
        assert [s.target for s in steps] == ["127.0.0.1", "192.168.1.1", "192.168.1.53", "8.8.8.8"]
        assert all(s.ok for s in steps)
        assert steps[0].detail == "12.0ms"
        mock_gateway.assert_called_once_with(IPFamily.IPV4)

    @patch("orchestrator.quick_ping")
    @patch("orchestrator.get_dns_config")
    @patch("orchestrator.get_default_gateway")
    def test_missing_targets(self, mock_gateway, mock_dns, mock_ping) -> None:
        """Test undeterminable targets fail their step and later steps still run."""
        mock_gateway.side_effect = NoGatewayFound("No default gateway found")
        mock_dns.return_value = DNSConfig(records=())
        mock_ping.side_effect = lambda host, platform=None: PingRecord(host, False, PingState.TIMED_OUT)

        steps = run_connectivity_test(Platform.LINUX)

        assert len(steps) == 4
        assert steps[1].ok is False
        assert steps[1].detail == "No gateway found"
        assert steps[2].detail == "No IPv4 DNS server found"
        assert steps[3].ok is False
        assert steps[3].detail == "timed_out"
        assert mock_ping.call_count == 2
