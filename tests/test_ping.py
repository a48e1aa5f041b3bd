"""Tests for network/ping.py.

Tests output parsing, the ping lifecycle and multi-host runs with the
ping command mocked out.
"""

from unittest.mock import patch

import pytest

from conftest import LINUX_PING_OUTPUT, WINDOWS_PING_OUTPUT
from enums import LatencyBand, LossBand, Platform, PingState
from models import PingRecord
from network.ping import (
    assess_ping,
    build_ping_command,
    parse_posix_ping,
    parse_windows_ping,
    ping_host,
    ping_multiple_hosts,
    quick_ping,
)
from utils import CommandFailed, CommandTimeout, ValidationError

MACOS_PING_OUTPUT = """--- 1.1.1.1 ping statistics ---
3 packets transmitted, 3 packets received, 0.0% packet loss
round-trip min/avg/max/stddev = 10.100/11.200/12.300/0.900 ms
"""


class TestParsePosixPing:
    """Tests for parse_posix_ping function."""

    def test_linux_output(self) -> None:
        stats = parse_posix_ping(LINUX_PING_OUTPUT)
        assert stats == {
            "packet_loss": 0.0,
            "packets_sent": 4,
            "packets_received": 4,
            "min_ms": 1.0,
            "avg_ms": 2.0,
            "max_ms": 3.0,
            "mdev_ms": 0.5,
        }

    def test_bsd_output(self) -> None:
        stats = parse_posix_ping(MACOS_PING_OUTPUT)
        assert stats["packets_received"] == 3
        assert stats["avg_ms"] == 11.2
        assert stats["mdev_ms"] == 0.9

    def test_partial_loss_without_rtt(self) -> None:
        """Test missing statistics are simply absent."""
        output = "2 packets transmitted, 0 received, 100% packet loss, time 1001ms"
        stats = parse_posix_ping(output)
        assert stats == {"packet_loss": 100.0, "packets_sent": 2, "packets_received": 0}

    def test_garbage(self) -> None:
        assert parse_posix_ping("ping: unknown host") == {}


class TestParseWindowsPing:
    """Tests for parse_windows_ping function."""

    def test_full_output(self) -> None:
        stats = parse_windows_ping(WINDOWS_PING_OUTPUT, count=4)
        assert stats["packet_loss"] == 25.0
        assert stats["packets_sent"] == 4
        assert stats["packets_received"] == 3
        assert stats["min_ms"] == 12.0
        assert stats["max_ms"] == 14.0
        assert stats["avg_ms"] == 13.0

    def test_derived_counts(self) -> None:
        """Test received is derived from loss when Sent/Received is absent."""
        stats = parse_windows_ping("    Lost = 2 (50% loss),", count=4)
        assert stats["packets_sent"] == 4
        assert stats["packets_received"] == 2

    def test_no_statistics(self) -> None:
        stats = parse_windows_ping("", count=3)
        assert stats == {"packets_sent": 3, "packets_received": 3}


class TestBuildPingCommand:
    """Tests for build_ping_command function."""

    def test_windows(self) -> None:
        assert build_ping_command("8.8.8.8", 4, 10, Platform.WINDOWS) == [
            "ping",
            "-n",
            "4",
            "8.8.8.8",
        ]

    def test_posix(self) -> None:
        assert build_ping_command("8.8.8.8", 3, 5.0, Platform.LINUX) == [
            "ping",
            "-c",
            "3",
            "-W",
            "5",
            "8.8.8.8",
        ]

    def test_posix_minimum_wait(self) -> None:
        assert build_ping_command("h", 1, 0.2, Platform.DARWIN)[4] == "1"


class TestPingHost:
    """Tests for ping_host function."""

    @patch("network.ping.run_command")
    def test_completed(self, mock_run) -> None:
        mock_run.return_value = LINUX_PING_OUTPUT
        record = ping_host("8.8.8.8", platform=Platform.LINUX)

        assert record.success is True
        assert record.state == PingState.COMPLETED
        assert record.avg_ms == 2.0
        assert record.packets_sent == 4
        assert record.error is None
        assert mock_run.call_args.kwargs["timeout"] == 10

    @patch("network.ping.run_command")
    def test_windows_completed(self, mock_run) -> None:
        mock_run.return_value = WINDOWS_PING_OUTPUT
        record = ping_host("8.8.8.8", platform=Platform.WINDOWS)
        assert record.packet_loss == 25.0
        assert record.packets_received == 3
        assert record.mdev_ms == 0.0

    @patch("network.ping.run_command")
    def test_timed_out(self, mock_run) -> None:
        mock_run.side_effect = CommandTimeout("Command timed out after 10s: ping")
        record = ping_host("10.255.255.1", platform=Platform.LINUX)
        assert record.success is False
        assert record.state == PingState.TIMED_OUT
        assert "timed out" in record.error

    @patch("network.ping.run_command")
    def test_failed_keeps_output(self, mock_run) -> None:
        """Test a non-zero exit keeps the output for diagnostics only."""
        output = "2 packets transmitted, 0 received, 100% packet loss"
        mock_run.side_effect = CommandFailed(
            "Command exited with status 1: ping", returncode=1, stdout=output
        )
        record = ping_host("192.0.2.1", platform=Platform.LINUX)
        assert record.state == PingState.FAILED
        assert record.raw_output == output
        assert record.packets_sent == 0
        assert record.packet_loss == 0.0

    @pytest.mark.parametrize(
        "outcome",
        [
            LINUX_PING_OUTPUT,
            CommandTimeout("Command timed out after 10s: ping"),
            CommandFailed("Command exited with status 2: ping", returncode=2),
        ],
    )
    @patch("network.ping.run_command")
    def test_state_always_terminal(self, mock_run, outcome) -> None:
        """Test RUNNING never escapes ping_host."""
        mock_run.side_effect = [outcome]
        record = ping_host("8.8.8.8", platform=Platform.LINUX)
        assert record.state != PingState.RUNNING
        assert record.state in (PingState.COMPLETED, PingState.TIMED_OUT, PingState.FAILED)

    @patch("network.ping.run_command")
    def test_host_stripped(self, mock_run) -> None:
        mock_run.return_value = LINUX_PING_OUTPUT
        record = ping_host("  8.8.8.8  ", platform=Platform.LINUX)
        assert record.host == "8.8.8.8"
        assert mock_run.call_args.args[0][-1] == "8.8.8.8"

    @pytest.mark.parametrize("host", ["", "   ", "-f", "bad host"])
    def test_invalid_host(self, host) -> None:
        with pytest.raises(ValidationError):
            ping_host(host, platform=Platform.LINUX)

    @pytest.mark.parametrize("count", [0, -1, 101])
    def test_invalid_count(self, count) -> None:
        with pytest.raises(ValidationError):
            ping_host("8.8.8.8", count=count, platform=Platform.LINUX)

    @patch("network.ping.run_command")
    def test_quick_ping(self, mock_run) -> None:
        mock_run.return_value = LINUX_PING_OUTPUT
        quick_ping("8.8.8.8", platform=Platform.LINUX)
        assert mock_run.call_args.args[0][:3] == ["ping", "-c", "3"]
        assert mock_run.call_args.kwargs["timeout"] == 5.0


class TestPingMultipleHosts:
    """Tests for ping_multiple_hosts function."""

    @patch("network.ping.time.sleep")
    @patch("network.ping.run_command")
    def test_order_and_delay(self, mock_run, mock_sleep) -> None:
        """Test one result per host and a pause only between hosts."""
        mock_run.side_effect = [
            LINUX_PING_OUTPUT,
            CommandTimeout("Command timed out after 5s: ping"),
            LINUX_PING_OUTPUT,
        ]
        results = ping_multiple_hosts(["a.example", "b.example", "c.example"], platform=Platform.LINUX)

        assert [r.host for r in results] == ["a.example", "b.example", "c.example"]
        assert [r.state for r in results] == [
            PingState.COMPLETED,
            PingState.TIMED_OUT,
            PingState.COMPLETED,
        ]
        assert mock_sleep.call_count == 2
        mock_sleep.assert_called_with(0.5)

    @patch("network.ping.time.sleep")
    @patch("network.ping.run_command")
    def test_invalid_host_does_not_abort(self, mock_run, mock_sleep) -> None:
        mock_run.return_value = LINUX_PING_OUTPUT
        results = ping_multiple_hosts(["-bad", "8.8.8.8"], delay=0, platform=Platform.LINUX)
        assert results[0].state == PingState.FAILED
        assert results[0].error
        assert results[1].success is True
        mock_run.assert_called_once()


class TestAssessPing:
    """Tests for assess_ping function."""

    def test_bands(self, successful_ping) -> None:
        assessment = assess_ping(successful_ping)
        assert assessment.loss == LossBand.NONE
        assert assessment.latency == LatencyBand.LOW

    @pytest.mark.parametrize(
        "loss, avg, expected_loss, expected_latency",
        [
            (4.9, 49.9, LossBand.LOW, LatencyBand.LOW),
            (5.0, 50.0, LossBand.HIGH, LatencyBand.MODERATE),
            (25.0, 199.9, LossBand.HIGH, LatencyBand.MODERATE),
            (100.0, 200.0, LossBand.HIGH, LatencyBand.HIGH),
        ],
    )
    def test_boundaries(self, loss, avg, expected_loss, expected_latency) -> None:
        record = PingRecord("h", True, PingState.COMPLETED, packet_loss=loss, avg_ms=avg)
        assessment = assess_ping(record)
        assert assessment.loss == expected_loss
        assert assessment.latency == expected_latency
