from datetime import datetime, timezone

import pytest

from app.common.dates import date_key, diff_days, is_date_key, last_n_days_keys, parse_date_key
from app.features.daily.repository import DailyRepository
from app.features.daily.service import (
    AlreadySubmittedError,
    DailyService,
    QuestionNotFoundError,
    SolutionLockedError,
)
from app.features.streaks.repository import UserRowRepository
from app.features.streaks.service import StreakConflictError, StreakService
from tests.fakesupabase import FakeSupabase, client_factory

pytestmark = pytest.mark.anyio("asyncio")


@pytest.fixture
def anyio_backend():
    return "asyncio"


QUESTION = {
    "date_key": "2024-05-10",
    "title": "Two Sum",
    "description": "Return indices of the two numbers adding up to target.",
    "difficulty": "Easy",
    "topic": "Arrays",
}
SOLUTION = {"date_key": "2024-05-10", "solution": "Use a hash map of seen values."}


def _service(fake):
    factory = client_factory(fake)
    streaks = StreakService(repository=UserRowRepository(client_factory=factory))
    return DailyService(repository=DailyRepository(client_factory=factory), streaks=streaks)


@pytest.fixture
def fake():
    return FakeSupabase({"daily_questions": [QUESTION], "daily_solutions": [SOLUTION]})


@pytest.fixture(autouse=True)
def _today(monkeypatch):
    monkeypatch.setattr("app.features.daily.service.today_key", lambda: "2024-05-10")


async def test_get_question_maps_row(fake):
    question = await _service(fake).get_question("2024-05-10")
    assert question.id == "2024-05-10"
    assert question.title == "Two Sum"
    assert question.difficulty == "Easy"


async def test_missing_question_raises(fake):
    with pytest.raises(QuestionNotFoundError):
        await _service(fake).get_question("2024-05-11")


async def test_lock_after_view_is_idempotent(fake):
    service = _service(fake)

    first = await service.lock_after_view("u1", "2024-05-10")
    second = await service.lock_after_view("u1", "2024-05-10")

    assert first.submitted is False
    assert first.viewed_at is not None
    assert second.viewed_at == first.viewed_at
    assert len(fake.tables["daily_attempts"]) == 1


async def test_lock_after_view_tolerates_concurrent_lock(fake):
    def other_tab_locks_first():
        fake.tables.setdefault("daily_attempts", []).append(
            {"uid": "u1", "date_key": "2024-05-10", "viewed_at": "2024-05-10T08:00:00+00:00", "submitted": False}
        )

    fake.before_execute[("daily_attempts", "insert")] = other_tab_locks_first

    attempt = await _service(fake).lock_after_view("u1", "2024-05-10")

    assert attempt.viewed_at == datetime(2024, 5, 10, 8, 0, tzinfo=timezone.utc)
    assert len(fake.tables["daily_attempts"]) == 1


async def test_submit_answer_stores_submission_and_advances_streak(fake):
    service = _service(fake)
    await service.lock_after_view("u1", "2024-05-10")

    response = await service.submit_answer("u1", "2024-05-10", "2024-05-10", "  return [i, j]\n", language="python")

    [submission] = fake.tables["submissions"]
    assert submission["id"] == response.submission_id
    assert submission["answer"] == "Language: Python\n\nreturn [i, j]"
    [attempt] = fake.tables["daily_attempts"]
    assert attempt["submitted"] is True
    assert attempt["submission_id"] == response.submission_id
    assert response.streak.current_streak == 1
    assert response.streak.last_attempt_date == "2024-05-10"


async def test_submit_answer_without_language_keeps_plain_answer(fake):
    await _service(fake).submit_answer("u1", "2024-05-10", "2024-05-10", "hash map")
    assert fake.tables["submissions"][0]["answer"] == "hash map"


async def test_second_submission_is_rejected(fake):
    service = _service(fake)
    await service.submit_answer("u1", "2024-05-10", "2024-05-10", "first")

    with pytest.raises(AlreadySubmittedError):
        await service.submit_answer("u1", "2024-05-10", "2024-05-10", "second")

    assert len(fake.tables["submissions"]) == 1


async def test_solution_locked_until_submitted(fake):
    service = _service(fake)
    await service.lock_after_view("u1", "2024-05-10")

    with pytest.raises(SolutionLockedError):
        await service.get_solution("u1", "2024-05-10")

    await service.submit_answer("u1", "2024-05-10", "2024-05-10", "answer")
    view = await service.get_solution("u1", "2024-05-10")

    assert view.question.title == "Two Sum"
    assert view.solution == "Use a hash map of seen values."


async def test_analytics_reports_recent_activity(fake):
    fake.tables["daily_attempts"] = [
        {"uid": "u1", "date_key": "2024-05-10", "viewed_at": "2024-05-10T09:00:00+00:00", "submitted": True},
        {"uid": "u1", "date_key": "2024-05-08", "viewed_at": "2024-05-08T09:00:00+00:00", "submitted": False},
        {"uid": "u2", "date_key": "2024-05-09", "viewed_at": "2024-05-09T09:00:00+00:00", "submitted": True},
    ]

    report = await _service(fake).analytics("u1", days=3, today="2024-05-10")

    assert [a.date_key for a in report.attempts] == ["2024-05-10", "2024-05-08"]
    assert [(d.date_key, d.viewed, d.submitted) for d in report.activity] == [
        ("2024-05-10", True, True),
        ("2024-05-09", False, False),
        ("2024-05-08", True, False),
    ]
    assert report.profile.current_streak == 0


async def test_streak_failure_leaves_submission_retryable(fake):
    service = _service(fake)
    real_record = service.streaks.record_attempt
    failures = {"left": 1}

    async def flaky_record(uid, date_key=None):
        if failures["left"]:
            failures["left"] -= 1
            raise StreakConflictError("streak.attempt for u1 lost 5 write races")
        return await real_record(uid, date_key)

    service.streaks.record_attempt = flaky_record

    with pytest.raises(StreakConflictError):
        await service.submit_answer("u1", "2024-05-10", "2024-05-10", "first try")

    assert fake.tables.get("submissions", []) == []
    assert not any(a.get("submitted") for a in fake.tables.get("daily_attempts", []))

    response = await service.submit_answer("u1", "2024-05-10", "2024-05-10", "second try")

    assert response.streak.last_attempt_date == "2024-05-10"
    assert len(fake.tables["submissions"]) == 1
    assert fake.tables["daily_attempts"][0]["submitted"] is True


async def test_past_day_submission_does_not_move_streak(fake):
    fake.tables["users"] = [
        {"uid": "u1", "current_streak": 2, "longest_streak": 2, "last_attempt_date": "2024-05-09", "total_attempts": 2, "version": 1}
    ]
    fake.tables["daily_questions"].append({**QUESTION, "date_key": "2024-05-01"})

    response = await _service(fake).submit_answer("u1", "2024-05-01", "2024-05-01", "late answer")

    assert response.streak.current_streak == 2
    assert response.streak.last_attempt_date == "2024-05-09"
    assert fake.tables["users"][0]["version"] == 1
    assert fake.tables["submissions"][0]["date_key"] == "2024-05-01"


def test_date_key_helpers():
    assert date_key(datetime(2024, 1, 31, 23, 59, tzinfo=timezone.utc)) == "2024-01-31"
    assert date_key(datetime(2024, 2, 29, 12, 0)) == "2024-02-29"
    assert parse_date_key("2024-02-29").day == 29
    assert is_date_key("2024-13-01") is False
    assert is_date_key("2024-1-1") is False
    assert diff_days("2023-12-31", "2024-01-01") == 1
    assert diff_days("2024-01-04", "2024-01-01") == -3
    assert last_n_days_keys(2, today="2024-03-01") == ["2024-03-01", "2024-02-29"]
    assert last_n_days_keys(0) == []
