from datetime import datetime
from typing import Any

import orjson as json


def datetime_to_age(created_at: datetime, compact: bool = True, now: datetime | None = None) -> str:
    """Convert a datetime to a human-readable age string.

    For datetimes less than 7 days old, returns relative time.
    For older datetimes, returns absolute date format (e.g., "2025 Aug 24 14:30").

    Args:
        created_at: The datetime to convert
        compact: If True, uses compact format (e.g., "2h", "3d14h").
                If False, uses verbose format (e.g., "2 hours", "3 days 14 hours").
        now: Reference point, defaults to the current local time
    """
    if now is None:
        now = datetime.now(created_at.tzinfo)
    time_diff = now - created_at

    if time_diff.days >= 7:
        return created_at.strftime("%Y %b %d %H:%M")

    if time_diff.days > 0:
        hours = time_diff.seconds // 3600
        if hours > 0:
            return f"{time_diff.days}d{hours}h" if compact else f"{time_diff.days} days {hours} hours"
        return f"{time_diff.days}d" if compact else f"{time_diff.days} days"
    if time_diff.seconds >= 3600:
        hours = time_diff.seconds // 3600
        return f"{hours}h" if compact else f"{hours} hours"
    if time_diff.seconds >= 60:
        minutes = time_diff.seconds // 60
        return f"{minutes}m" if compact else f"{minutes} minutes"
    return "1m" if compact else "1 minute"


def safe_render_value(v: Any) -> str:
    try:
        s = json.dumps(v).decode() if isinstance(v, (dict, list)) else str(v)
    except Exception:
        try:
            s = repr(v)
        except Exception:
            s = "<error rendering value>"
    return s


def format_datetime(v: datetime | None) -> str:
    if v is None:
        return "-"
    return datetime.strftime(v, "%Y-%m-%d %H:%M:%S")


def truncate(text: str, limit: int = 30) -> str:
    return f"{text[:limit]}..." if len(text) > limit else text
