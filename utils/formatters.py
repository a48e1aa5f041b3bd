"""Text formatting utilities for DISPLAY ONLY.

All functions work on display data, never on raw records.
"""


def shorten_text(text: str, max_length: int) -> str:
    """Truncate text to fit column width.

    Tries to break at word boundary.
    Adds "..." if truncated.

    Args:
        text: Text to truncate
        max_length: Maximum length (including "..." if truncated)

    Returns:
        Truncated text with "..." if needed.
    """
    if len(text) <= max_length:
        return text

    # Truncate with space for "..."
    truncated = text[: max_length - 3]

    # Try to break at word boundary
    last_space = truncated.rfind(" ")
    if last_space > max_length * 0.7:  # Good break point
        return truncated[:last_space] + "..."

    return truncated + "..."


def format_ms(milliseconds: float) -> str:
    """Format a round-trip time given in milliseconds.

    Examples:
        0.0004 → "0.4μs"
        0.25 → "250.0μs"
        12.345 → "12.3ms"
        1500.0 → "1.50s"

    Args:
        milliseconds: Duration in milliseconds

    Returns:
        Human-readable duration.
    """
    if milliseconds < 1:
        return f"{milliseconds * 1000:.1f}μs"
    if milliseconds < 1000:
        return f"{milliseconds:.1f}ms"
    return f"{milliseconds / 1000:.2f}s"


def format_percent(value: float) -> str:
    return f"{value:.1f}%"


def join_or_marker(values: tuple[str, ...] | list[str], marker: str = "--") -> str:
    """Comma-join values, or return marker when there are none."""
    return ", ".join(values) if values else marker
