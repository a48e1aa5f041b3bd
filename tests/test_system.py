"""Tests for utils/system.py.

Tests system command execution and sanitization utilities.
"""

import shutil
import subprocess
import time
from unittest.mock import Mock, patch

import pytest

from enums import ErrorKind
from utils.errors import CommandFailed, CommandTimeout
from utils.system import command_exists, run_command, sanitize_for_log


class TestRunCommand:
    """Tests for run_command function."""

    @patch("subprocess.run")
    def test_successful_command(self, mock_run):
        """Test successful command execution."""
        mock_run.return_value = Mock(returncode=0, stdout="output\n", stderr="")
        result = run_command(["echo", "test"])
        assert result == "output"
        mock_run.assert_called_once()
        args, kwargs = mock_run.call_args
        assert args[0] == ["echo", "test"]
        assert kwargs["shell"] is False

    @patch("subprocess.run")
    def test_timeout_passed_through(self, mock_run):
        """Test the deadline reaches subprocess.run."""
        mock_run.return_value = Mock(returncode=0, stdout="", stderr="")
        run_command(["ip", "route"], timeout=2.5)
        assert mock_run.call_args.kwargs["timeout"] == 2.5

    @patch("subprocess.run")
    def test_command_failure_raises(self, mock_run):
        """Test non-zero exit raises CommandFailed with the output kept."""
        mock_run.return_value = Mock(returncode=1, stdout="partial\n", stderr="boom")
        with pytest.raises(CommandFailed) as exc_info:
            run_command(["ping", "-c", "1", "192.0.2.1"])

        assert exc_info.value.returncode == 1
        assert exc_info.value.stdout == "partial\n"
        assert exc_info.value.kind == ErrorKind.COMMAND

    @patch("subprocess.run")
    def test_command_timeout_raises(self, mock_run):
        """Test TimeoutExpired becomes CommandTimeout."""
        mock_run.side_effect = subprocess.TimeoutExpired("sleep", 10)
        with pytest.raises(CommandTimeout) as exc_info:
            run_command(["sleep", "100"], timeout=10)

        assert exc_info.value.kind == ErrorKind.TIMEOUT
        assert "10s" in str(exc_info.value)

    @pytest.mark.skipif(shutil.which("sleep") is None, reason="sleep binary not available")
    def test_real_child_killed_at_deadline(self):
        """Test a long-running child is killed when the deadline elapses."""
        started = time.monotonic()
        with pytest.raises(CommandTimeout) as exc_info:
            run_command(["sleep", "10"], timeout=1)
        elapsed = time.monotonic() - started

        assert exc_info.value.kind == ErrorKind.TIMEOUT
        assert elapsed < 2

    @patch("subprocess.run")
    def test_command_not_found(self, mock_run):
        """Test a missing binary raises CommandFailed."""
        mock_run.side_effect = FileNotFoundError()
        with pytest.raises(CommandFailed, match="Command not found: nonexistent"):
            run_command(["nonexistent"])

    @patch("subprocess.run")
    def test_permission_error(self, mock_run):
        """Test a non-executable binary is classified as a permission error."""
        mock_run.side_effect = PermissionError("denied")
        with pytest.raises(CommandFailed) as exc_info:
            run_command(["ping", "8.8.8.8"])
        assert exc_info.value.kind == ErrorKind.PERMISSION

    @patch("subprocess.run")
    def test_os_error(self, mock_run):
        """Test OSError raises CommandFailed."""
        mock_run.side_effect = OSError("error")
        with pytest.raises(CommandFailed):
            run_command(["test"])

    @patch("subprocess.run")
    def test_value_error(self, mock_run):
        """Test ValueError raises CommandFailed."""
        mock_run.side_effect = ValueError("embedded null byte")
        with pytest.raises(CommandFailed):
            run_command(["test"])

    @patch("subprocess.run")
    def test_shell_false_always(self, mock_run):
        """Test shell=False is always used (security)."""
        mock_run.return_value = Mock(returncode=0, stdout="test", stderr="")
        run_command(["test"])
        args, kwargs = mock_run.call_args
        assert kwargs["shell"] is False

    @patch("subprocess.run")
    def test_output_stripped(self, mock_run):
        """Test output is stripped of whitespace."""
        mock_run.return_value = Mock(returncode=0, stdout="  output  \n", stderr="")
        result = run_command(["test"])
        assert result == "output"


class TestCommandExists:
    """Tests for command_exists function."""

    @patch("shutil.which")
    def test_command_exists_true(self, mock_which):
        """Test existing command returns True."""
        mock_which.return_value = "/usr/bin/ping"
        assert command_exists("ping") is True

    @patch("shutil.which")
    def test_command_exists_false(self, mock_which):
        """Test non-existing command returns False."""
        mock_which.return_value = None
        assert command_exists("powershell") is False


class TestSanitizeForLog:
    """Tests for sanitize_for_log function."""

    def test_normal_string(self):
        """Test normal string is unchanged."""
        assert sanitize_for_log("normal text") == "normal text"

    def test_remove_newlines(self):
        """Test newlines are replaced with spaces."""
        assert sanitize_for_log("line1\nline2") == "line1 line2"
        assert sanitize_for_log("line1\r\nline2") == "line1  line2"

    def test_remove_ansi_escapes(self):
        """Test ANSI escape codes are removed."""
        assert sanitize_for_log("\x1b[91mred\x1b[0m") == "red"

    def test_remove_control_characters(self):
        """Test control characters are removed."""
        assert sanitize_for_log("test\x00null") == "testnull"

    def test_truncate_long_strings(self):
        """Test strings over 200 chars are truncated."""
        result = sanitize_for_log("a" * 250)
        assert len(result) == 200
        assert result.endswith("...")

    def test_non_string_input(self):
        """Test non-string input is converted to string."""
        assert sanitize_for_log(123) == "123"
        assert sanitize_for_log(None) == "None"

    def test_security_log_injection(self):
        """Test log injection attempts are sanitized."""
        malicious = "host.example\nERROR: forged entry"
        result = sanitize_for_log(malicious)
        assert "\n" not in result
        assert result == "host.example ERROR: forged entry"
