"""Date and time formatting utilities."""

from typing import Any


def format_timestamp(value: Any) -> str:
    """
    Format a timestamp as local ``YYYY-MM-DD HH:MM:SS``.

    Args:
        value: datetime, None or anything printable

    Returns:
        Formatted timestamp string
    """
    if value is None:
        return "unknown"
    if hasattr(value, "astimezone") and getattr(value, "tzinfo", None) is not None:
        value = value.astimezone()
    if hasattr(value, "strftime"):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    return str(value)
