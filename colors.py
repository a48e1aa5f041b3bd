"""ANSI color codes for terminal output.

Provides the color palette and the active status colors.
All colors optimized for dark terminal backgrounds.
"""

from enum import StrEnum


class AllColors(StrEnum):
    """ANSI color palette for dark terminal backgrounds.

    Use these values to customize the Color enum below.
    """

    # Bright Colors (Best for dark backgrounds)
    BRIGHT_RED = "\033[91m"
    BRIGHT_GREEN = "\033[92m"
    BRIGHT_YELLOW = "\033[93m"
    BRIGHT_BLUE = "\033[94m"
    BRIGHT_MAGENTA = "\033[95m"
    BRIGHT_CYAN = "\033[96m"

    # Styles
    BOLD = "\033[1m"
    DIM = "\033[2m"

    # Special
    RESET = "\033[0m"


# Active Colors (Used in Table Display)
# CUSTOMIZE HERE: Change these to any color from AllColors above
class Color(StrEnum):
    """Status colors used by tables and messages.

    Example: OK = AllColors.BRIGHT_BLUE  # Use blue instead of green
    """

    OK = AllColors.BRIGHT_GREEN  # Up, reachable, established
    INFO = AllColors.BRIGHT_CYAN  # Listening, default routes
    WARN = AllColors.BRIGHT_YELLOW  # Degraded, other states
    ERROR = AllColors.BRIGHT_RED  # Down, unreachable, failures
    HEADER = AllColors.BOLD  # Titles
    RESET = AllColors.RESET  # Reset (don't change)


def colorize(text: str, color: str) -> str:
    """Wrap text in a color code (no-op for an empty color)."""
    if not color:
        return text
    return f"{color}{text}{Color.RESET}"
