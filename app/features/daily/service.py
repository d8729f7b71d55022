from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from app.common.dates import last_n_days_keys, today_key
from app.features.execution.languages import display_name
from app.features.streaks.service import StreakService, streak_service
from .repository import DailyRepository, daily_repository
from .schemas import (
    ActivityDay,
    AnalyticsResponse,
    AnswerSubmissionResponse,
    DailyAttempt,
    DailyQuestion,
    SolutionView,
)

logger = logging.getLogger("daily.service")


class QuestionNotFoundError(LookupError):
    pass


class AlreadySubmittedError(ValueError):
    pass


class SolutionLockedError(PermissionError):
    pass


def _question_from_row(date_key: str, row: Dict[str, Any]) -> DailyQuestion:
    return DailyQuestion(
        id=date_key,
        title=row.get("title") or "",
        description=row.get("description") or "",
        difficulty=row.get("difficulty") or "Easy",
        topic=row.get("topic") or "",
        created_at=row.get("created_at"),
    )


def _attempt_from_row(row: Dict[str, Any]) -> DailyAttempt:
    return DailyAttempt(
        date_key=row.get("date_key"),
        viewed_at=row.get("viewed_at"),
        submitted=bool(row.get("submitted")),
        submission_id=row.get("submission_id"),
        submitted_at=row.get("submitted_at"),
    )


class DailyService:
    def __init__(
        self,
        repository: Optional[DailyRepository] = None,
        streaks: Optional[StreakService] = None,
    ):
        self.repository = repository or daily_repository
        self.streaks = streaks or streak_service

    async def get_question(self, date_key: str) -> DailyQuestion:
        row = await self.repository.get_question(date_key)
        if not row:
            raise QuestionNotFoundError(f"No question for {date_key}")
        return _question_from_row(date_key, row)

    async def lock_after_view(self, uid: str, date_key: str) -> DailyAttempt:
        """Record the first view of the day's question; later views return that record."""
        existing = await self.repository.get_attempt(uid, date_key)
        if existing:
            return _attempt_from_row(existing)
        created = await self.repository.create_attempt(uid, date_key)
        if created:
            logger.info("daily.view_locked uid=%s day=%s", uid, date_key)
        row = await self.repository.get_attempt(uid, date_key)
        return _attempt_from_row(row or {"date_key": date_key})

    async def submit_answer(
        self,
        uid: str,
        date_key: str,
        question_id: str,
        answer: str,
        language: Optional[str] = None,
    ) -> AnswerSubmissionResponse:
        attempt = await self.repository.get_attempt(uid, date_key)
        if attempt and attempt.get("submitted"):
            raise AlreadySubmittedError("You've already submitted today.")

        body = answer.strip()
        if language:
            body = f"Language: {display_name(language)}\n\n{body}"

        # streak before mark_submitted: a failed streak write leaves the attempt open
        if date_key == today_key():
            streak = await self.streaks.record_attempt(uid, date_key)
        else:
            streak = await self.streaks.get_profile(uid)

        submission_id = await self.repository.insert_submission(uid, date_key, question_id, body)
        await self.repository.mark_submitted(uid, date_key, submission_id)
        logger.info("daily.submitted uid=%s day=%s submission_id=%s", uid, date_key, submission_id)
        return AnswerSubmissionResponse(submission_id=submission_id, streak=streak)

    async def get_solution(self, uid: str, date_key: str) -> SolutionView:
        attempt = await self.repository.get_attempt(uid, date_key)
        if not attempt or not attempt.get("submitted"):
            raise SolutionLockedError("Submit your answer to view the solution.")
        question = await self.get_question(date_key)
        solution = await self.repository.get_solution(date_key)
        return SolutionView(question=question, solution=(solution or {}).get("solution"))

    async def analytics(self, uid: str, days: int = 7, *, today: Optional[str] = None) -> AnalyticsResponse:
        profile = await self.streaks.get_profile(uid)
        attempts: List[DailyAttempt] = [_attempt_from_row(r) for r in await self.repository.list_attempts(uid)]
        by_day = {a.date_key: a for a in attempts}
        activity = [
            ActivityDay(
                date_key=key,
                viewed=key in by_day,
                submitted=bool(by_day[key].submitted) if key in by_day else False,
            )
            for key in last_n_days_keys(days, today=today)
        ]
        return AnalyticsResponse(profile=profile, attempts=attempts, activity=activity)


daily_service = DailyService()
