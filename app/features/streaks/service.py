from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional, Tuple

from app.Core.config import get_settings
from app.common.dates import diff_days, today_key
from .repository import UserRowRepository, user_row_repository
from .schemas import StreakProfile, SubmissionCounters
from .tracker import apply_attempt

logger = logging.getLogger("streaks.service")

_STREAK_FIELDS = (
    "current_streak",
    "longest_streak",
    "last_attempt_date",
    "total_attempts",
    "missed_days",
)

# mutate(row) -> fields to write, or None to leave the row untouched
Mutation = Callable[[Optional[Dict[str, Any]]], Optional[Dict[str, Any]]]


class StreakConflictError(RuntimeError):
    """Concurrent writers kept winning; the update was not applied."""


class FutureAttemptError(ValueError):
    """Attempt dated after the current UTC day."""


def profile_from_row(uid: str, row: Optional[Dict[str, Any]]) -> StreakProfile:
    if not row:
        return StreakProfile.empty(uid)
    return StreakProfile(uid=uid, **{k: row.get(k) for k in _STREAK_FIELDS})


class StreakService:
    def __init__(self, repository: Optional[UserRowRepository] = None):
        self.settings = get_settings()
        self.repository = repository or user_row_repository

    async def update_user_row(self, uid: str, mutate: Mutation, op: str) -> Tuple[Optional[Dict[str, Any]], bool]:
        """Read-version-check-write loop on the user's row.

        Returns the row state the mutation was computed from merged with what
        was written, plus whether anything was written.
        """
        attempts = self.settings.streak_max_retries
        for attempt in range(1, attempts + 1):
            row, version = await self.repository.get(uid)
            fields = mutate(row)
            if fields is None:
                return row, False
            if row is None:
                written = await self.repository.insert(uid, fields)
            else:
                written = await self.repository.compare_and_set(uid, version or 0, fields)
            if written:
                return {**(row or {}), **fields}, True
            logger.info("%s conflict uid=%s attempt=%d/%d", op, uid, attempt, attempts)
        raise StreakConflictError(f"{op} for {uid} lost {attempts} write races")

    async def get_profile(self, uid: str) -> StreakProfile:
        row, _ = await self.repository.get(uid)
        return profile_from_row(uid, row)

    async def record_attempt(self, uid: str, date_key: Optional[str] = None) -> StreakProfile:
        """Apply one attempt for ``date_key`` (today, UTC, when omitted) atomically.

        Keys after today raise ``FutureAttemptError``.
        """
        today = today_key()
        day = date_key or today
        if diff_days(today, day) > 0:
            raise FutureAttemptError(f"date_key {day} is after today ({today})")

        def _mutate(row: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
            before = profile_from_row(uid, row)
            after = apply_attempt(before, day)
            if after is before:
                return None
            return after.model_dump(include=set(_STREAK_FIELDS))

        state, written = await self.update_user_row(uid, _mutate, op="streak.attempt")
        profile = profile_from_row(uid, state)
        if written:
            logger.info(
                "streak.updated uid=%s day=%s current=%d longest=%d missed=%d",
                uid,
                day,
                profile.current_streak,
                profile.longest_streak,
                profile.missed_days,
            )
        return profile

    async def increment_submissions(self, uid: str, accepted: bool) -> SubmissionCounters:
        def _mutate(row: Optional[Dict[str, Any]]) -> Dict[str, Any]:
            row = row or {}
            fields = {"total_submissions": int(row.get("total_submissions") or 0) + 1}
            if accepted:
                fields["accepted_submissions"] = int(row.get("accepted_submissions") or 0) + 1
            return fields

        state, _ = await self.update_user_row(uid, _mutate, op="submissions.count")
        state = state or {}
        return SubmissionCounters(
            total_submissions=int(state.get("total_submissions") or 0),
            accepted_submissions=int(state.get("accepted_submissions") or 0),
        )


streak_service = StreakService()
