"""
Timestamp and elapsed-time helpers.

Elapsed time is carried as a `timedelta` and only turned into a human
string ("4h ago", "1d 3h ago", "just now") at the edges. The strings the
LLM produces are parsed back into durations before any arithmetic.
"""
from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Optional

_JUST_NOW = {"just now", "now", "right now", "moments ago", "a moment ago"}

_UNIT_SECONDS = {
    "s": 1, "sec": 1, "secs": 1, "second": 1, "seconds": 1,
    "m": 60, "min": 60, "mins": 60, "minute": 60, "minutes": 60,
    "h": 3600, "hr": 3600, "hrs": 3600, "hour": 3600, "hours": 3600,
    "d": 86400, "day": 86400, "days": 86400,
    "w": 604800, "wk": 604800, "wks": 604800, "week": 604800, "weeks": 604800,
}

_TOKEN_RE = re.compile(r"(?:(\d+(?:\.\d+)?)\s*|(?<![a-z])an?\s+)([a-z]+)")


def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def parse_timestamp(value: object) -> Optional[datetime]:
    """Parse an ISO-8601 string (or datetime) into an aware UTC datetime.

    Naive values are read as UTC; SQLite hands back naive datetimes.
    Returns None when the value cannot be parsed.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_iso(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat()


def hours_between(earlier: datetime, later: datetime) -> float:
    """Unsigned gap in hours. Clock skew never yields a negative value."""
    return abs((later - earlier).total_seconds()) / 3600.0


def parse_elapsed(text: Optional[str]) -> Optional[timedelta]:
    """
    Turn "4h ago", "2d 3h ago", "30 minutes ago", "an hour ago" or
    "just now" into a duration. Returns None for "unknown" or anything
    without a recognisable amount and unit.
    """
    if not text:
        return None
    lower = text.strip().lower()
    if lower in _JUST_NOW:
        return timedelta(0)

    total = 0.0
    matched = False
    for amount, unit in _TOKEN_RE.findall(lower):
        seconds = _UNIT_SECONDS.get(unit)
        if seconds is None:
            continue
        # "a" / "an" leaves the numeric group empty
        quantity = float(amount) if amount else 1.0
        total += quantity * seconds
        matched = True
    return timedelta(seconds=total) if matched else None


def format_elapsed(delta: timedelta) -> str:
    """Render a duration as the largest two units, e.g. "1d 4h ago"."""
    minutes = int(abs(delta).total_seconds() // 60)
    if minutes < 1:
        return "just now"
    if minutes < 60:
        return f"{minutes}m ago"
    hours, minutes = divmod(minutes, 60)
    if hours < 24:
        return f"{hours}h {minutes}m ago" if minutes else f"{hours}h ago"
    days, hours = divmod(hours, 24)
    return f"{days}d {hours}h ago" if hours else f"{days}d ago"


def add_elapsed(previous: Optional[str], gap: timedelta) -> Optional[str]:
    """Age a previous elapsed string by `gap`. None if it cannot be parsed."""
    base = parse_elapsed(previous)
    if base is None:
        return None
    return format_elapsed(base + abs(gap))


def relative_time(timestamp: object, now: Optional[datetime] = None) -> str:
    """"5m ago" style label for a stored timestamp."""
    dt = parse_timestamp(timestamp)
    if dt is None:
        return "unknown time ago"
    return format_elapsed((now or utcnow()) - dt)
