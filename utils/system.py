"""System command execution utilities.

Provides safe command execution with timeout protection.
Never uses shell=True to prevent command injection.
"""

import re
import shutil
import subprocess
from typing import Any

import config
from enums import ErrorKind

from .errors import CommandFailed, CommandTimeout


def run_command(cmd: list[str], timeout: float = config.COMMAND_TIMEOUT) -> str:
    """Execute system command safely.

    Security:
        - NEVER shell=True
        - Deadline enforced; on expiry the child is killed and reaped
        - Exactly one child process per call, no retry

    Args:
        cmd: Command as list (e.g., ["ip", "route", "show"])
        timeout: Deadline in seconds

    Returns:
        Command output (stripped).

    Raises:
        CommandTimeout: Deadline elapsed before the process exited
        CommandFailed: Non-zero exit, binary missing or not executable
    """
    program = cmd[0] if cmd else ""
    try:
        # subprocess.run kills and waits for the child on TimeoutExpired
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,  # Exit status handled below
            shell=False,  # CRITICAL: Never use shell=True
        )
    except subprocess.TimeoutExpired as e:
        raise CommandTimeout(
            f"Command timed out after {timeout:g}s: {program}", cause=e, command=cmd
        ) from e
    except FileNotFoundError as e:
        raise CommandFailed(f"Command not found: {program}", cause=e, command=cmd) from e
    except PermissionError as e:
        raise CommandFailed(
            f"Permission denied executing: {program}",
            cause=e,
            kind=ErrorKind.PERMISSION,
            command=cmd,
        ) from e
    except (OSError, ValueError) as e:
        raise CommandFailed(f"Command could not be started: {program}", cause=e, command=cmd) from e

    if result.returncode != 0:
        raise CommandFailed(
            f"Command exited with status {result.returncode}: {program}",
            returncode=result.returncode,
            stdout=result.stdout or "",
            command=cmd,
            stderr=(result.stderr or "").strip(),
        )

    return result.stdout.strip()


def command_exists(cmd: str) -> bool:
    """Check if command exists in PATH.

    Args:
        cmd: Command name (e.g., "ip", "ping")

    Returns:
        True if command is available, False otherwise.
    """
    return shutil.which(cmd) is not None


def sanitize_for_log(value: Any) -> str:
    """Sanitize values before logging to prevent log injection.

    Removes:
        - Newlines
        - ANSI escape codes
        - Control characters

    Max length: 200 characters

    Args:
        value: Value to sanitize (any type, will be converted to string)

    Returns:
        Sanitized string safe for logging.
    """
    text = str(value)

    # Remove newlines
    text = text.replace("\n", " ").replace("\r", " ")

    # Remove ANSI escape codes
    text = re.sub(r"\x1b\[[0-9;]*m", "", text)

    # Remove control characters
    text = "".join(c for c in text if c.isprintable() or c.isspace())

    # Truncate
    if len(text) > 200:
        text = text[:197] + "..."

    return text
