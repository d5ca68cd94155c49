from __future__ import annotations

from datetime import datetime

"""Arrival check: did a file land on the current calendar day?

``now`` is always passed in. The scan pass captures it once, so every row of a
run that crosses midnight is judged against the same day.
"""

__all__ = [
    "arrived_today",
    "modified_at",
    "format_timestamp",
]


def arrived_today(timestamp: datetime, now: datetime) -> bool:
    """True when ``timestamp`` has the same (day, month, year) as ``now``.

    Both values are naive local datetimes.
    """
    return (
        timestamp.day == now.day
        and timestamp.month == now.month
        and timestamp.year == now.year
    )


def modified_at(st_mtime: float) -> datetime:
    """Local naive datetime for a ``stat`` modification time."""
    return datetime.fromtimestamp(st_mtime)


def format_timestamp(moment: datetime) -> str:
    """Registry timestamp format ``MM/DD/YYYY h:mm AM|PM`` (hour not padded)."""
    hour = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    return f"{moment:%m/%d/%Y} {hour}:{moment:%M} {meridiem}"
