"""
Helper functions for formatting data into human-readable strings.
"""

import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from upnext_cli.models.entries import OutdatedEntry


def clean_number(value: float, precision: int = 2) -> str:
    """
    Formats a number without floating-point noise (e.g. 3.0 -> '3', 0.2 -> '0.2').

    The value is rounded half-up to `precision` decimals; whole results are
    shown without a decimal point and trailing zeros are dropped otherwise.
    """
    if not math.isfinite(value):
        return str(value)

    quantum = Decimal(1).scaleb(-precision)
    try:
        rounded = Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # More digits than the decimal context holds; no rounding noise left.
        return str(int(value)) if float(value).is_integer() else repr(float(value))

    if rounded == rounded.to_integral_value():
        return str(int(rounded))
    return format(rounded.normalize(), "f")


def format_chapter_progress(entry: OutdatedEntry) -> str:
    """Formats an entry's progress line, e.g. '5 / 10 (5 behind)'."""
    return (
        f"{clean_number(entry.chapters_read)} / {clean_number(entry.total_chapters)} "
        f"({clean_number(entry.chapters_left)} behind)"
    )


def format_duration(seconds: float) -> str:
    """
    Formats a duration in seconds into a human-readable string (e.g., '2h 34m 12s').
    """
    s = int(seconds)
    hours, remainder = divmod(s, 3600)
    minutes, secs = divmod(remainder, 60)
    parts = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if secs > 0 or not parts:
        parts.append(f"{secs}s")
    return " ".join(parts)
