"""Consecutive-day streak transition.

Pure function over ``StreakProfile``; persistence lives in the repository.
"""

from __future__ import annotations

from app.common.dates import diff_days, parse_date_key
from .schemas import StreakProfile


def apply_attempt(profile: StreakProfile, today: str) -> StreakProfile:
    """Return the profile after an attempt on ``today``.

    The same instance is returned when the attempt changes nothing: a repeat
    on the same day, or a ``today`` that is not after ``last_attempt_date``.
    """
    parse_date_key(today)
    last = profile.last_attempt_date

    if last == today:
        return profile

    current = profile.current_streak
    missed = profile.missed_days

    if last is None:
        current = 1
    else:
        gap = diff_days(last, today)
        if gap <= 0:
            return profile
        if gap == 1:
            current += 1
        else:
            missed += gap - 1
            current = 1

    return profile.model_copy(
        update={
            "current_streak": current,
            "longest_streak": max(profile.longest_streak, current),
            "missed_days": missed,
            "total_attempts": profile.total_attempts + 1,
            "last_attempt_date": today,
        }
    )
