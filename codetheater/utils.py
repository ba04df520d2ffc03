"""
codetheater.utils - Shared utility functions.

Small formatting helpers used by prompts, rendering and sessions.
"""

from __future__ import annotations

from datetime import datetime

ROMAN_NUMERALS = ((10, "X"), (9, "IX"), (5, "V"), (4, "IV"), (1, "I"))


def time_of_day(date: datetime) -> str:
    """Screenplay time of day for a commit timestamp.

    Args:
        date: Commit datetime (its own local hour is used)

    Returns:
        "MORNING", "AFTERNOON", "EVENING" or "NIGHT"
    """
    hour = date.hour
    if 5 <= hour < 12:
        return "MORNING"
    elif 12 <= hour < 17:
        return "AFTERNOON"
    elif 17 <= hour < 21:
        return "EVENING"
    return "NIGHT"


def to_roman(num: int) -> str:
    """Convert a positive integer to Roman numerals (act numbers)."""
    result = ""
    remaining = num
    for value, numeral in ROMAN_NUMERALS:
        while remaining >= value:
            result += numeral
            remaining -= value
    return result


def format_date(date: datetime) -> str:
    return date.strftime("%Y-%m-%d")


def format_peak_hours(hour: int) -> str:
    """Format a two-hour window starting at ``hour``, e.g. "10-12 PM"."""
    period = "PM" if hour >= 12 else "AM"
    display = hour % 12 or 12
    next_display = ((hour + 2) % 24) % 12 or 12
    return f"{display}-{next_display} {period}"


def truncate(text: str, width: int) -> str:
    """Cut text to ``width`` characters, marking the cut with an ellipsis."""
    if len(text) <= width:
        return text
    return text[: max(width - 1, 0)] + "…"
