from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from postgrest.exceptions import APIError

from app.DB.repository import SupabaseRepository

_UNIQUE_VIOLATION = "23505"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class DailyRepository(SupabaseRepository):
    """Data access for daily questions, solutions, attempts and submissions."""

    _QUESTIONS = "daily_questions"
    _SOLUTIONS = "daily_solutions"
    _ATTEMPTS = "daily_attempts"
    _SUBMISSIONS = "submissions"

    async def get_question(self, date_key: str) -> Optional[Dict[str, Any]]:
        client = await self._client()
        resp = await self._exec(
            client.table(self._QUESTIONS).select("*").eq("date_key", date_key).limit(1).execute(),
            op="daily_questions.select",
        )
        return self._first(resp)

    async def get_solution(self, date_key: str) -> Optional[Dict[str, Any]]:
        client = await self._client()
        resp = await self._exec(
            client.table(self._SOLUTIONS).select("*").eq("date_key", date_key).limit(1).execute(),
            op="daily_solutions.select",
        )
        return self._first(resp)

    async def get_attempt(self, uid: str, date_key: str) -> Optional[Dict[str, Any]]:
        client = await self._client()
        resp = await self._exec(
            client.table(self._ATTEMPTS).select("*").eq("uid", uid).eq("date_key", date_key).limit(1).execute(),
            op="daily_attempts.select",
        )
        return self._first(resp)

    async def create_attempt(self, uid: str, date_key: str) -> bool:
        """Insert an unsubmitted attempt; ``False`` if one already exists."""
        client = await self._client()
        record = {
            "uid": uid,
            "date_key": date_key,
            "viewed_at": _now(),
            "submitted": False,
            "submission_id": None,
        }
        try:
            await self._exec(client.table(self._ATTEMPTS).insert(record).execute(), op="daily_attempts.insert")
        except APIError as exc:
            if getattr(exc, "code", None) == _UNIQUE_VIOLATION:
                return False
            raise
        return True

    async def mark_submitted(self, uid: str, date_key: str, submission_id: str) -> None:
        client = await self._client()
        record = {
            "uid": uid,
            "date_key": date_key,
            "submitted": True,
            "submission_id": submission_id,
            "submitted_at": _now(),
        }
        await self._exec(
            client.table(self._ATTEMPTS).upsert(record, on_conflict="uid,date_key").execute(),
            op="daily_attempts.upsert",
        )

    async def list_attempts(self, uid: str) -> List[Dict[str, Any]]:
        client = await self._client()
        resp = await self._exec(
            client.table(self._ATTEMPTS).select("*").eq("uid", uid).order("viewed_at", desc=True).execute(),
            op="daily_attempts.list",
        )
        return self._rows(resp)

    async def insert_submission(self, uid: str, date_key: str, question_id: str, answer: str) -> str:
        client = await self._client()
        submission_id = str(uuid.uuid4())
        record = {
            "id": submission_id,
            "uid": uid,
            "question_id": question_id,
            "date_key": date_key,
            "answer": answer,
            "submitted_at": _now(),
        }
        await self._exec(client.table(self._SUBMISSIONS).insert(record).execute(), op="submissions.insert")
        return submission_id


daily_repository = DailyRepository()

__all__ = ["daily_repository", "DailyRepository"]
