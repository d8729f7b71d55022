"""UTC date-key helpers.

A date key is a ``YYYY-MM-DD`` string naming a calendar day in UTC, so every
user shares the same day boundary regardless of the client's timezone.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import List, Optional

DATE_KEY_FORMAT = "%Y-%m-%d"


def date_key(dt: Optional[datetime] = None) -> str:
    """Return the UTC date key for ``dt`` (now when omitted)."""
    if dt is None:
        dt = datetime.now(timezone.utc)
    elif dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).strftime(DATE_KEY_FORMAT)


def today_key() -> str:
    return date_key()


def parse_date_key(key: str) -> date:
    """Parse a ``YYYY-MM-DD`` key; raises ``ValueError`` on anything else."""
    if not isinstance(key, str) or len(key) != 10:
        raise ValueError(f"invalid date key: {key!r}")
    return datetime.strptime(key, DATE_KEY_FORMAT).date()


def is_date_key(key: str) -> bool:
    try:
        parse_date_key(key)
    except ValueError:
        return False
    return True


def diff_days(from_key: str, to_key: str) -> int:
    """Whole days from ``from_key`` to ``to_key`` (negative when going back)."""
    return (parse_date_key(to_key) - parse_date_key(from_key)).days


def last_n_days_keys(days: int, *, today: Optional[str] = None) -> List[str]:
    """Date keys for the last ``days`` days, today first."""
    start = parse_date_key(today) if today else datetime.now(timezone.utc).date()
    return [(start - timedelta(days=i)).strftime(DATE_KEY_FORMAT) for i in range(max(0, days))]
