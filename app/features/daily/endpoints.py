from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.DB.repository import StoreUnavailableError
from app.common.dates import is_date_key
from app.common.deps import CurrentUser, get_current_user
from app.features.streaks.service import StreakConflictError
from .schemas import (
    AnalyticsResponse,
    AnswerSubmission,
    AnswerSubmissionResponse,
    DailyAttempt,
    DailyQuestion,
    SolutionView,
)
from .service import (
    AlreadySubmittedError,
    QuestionNotFoundError,
    SolutionLockedError,
    daily_service,
)

router = APIRouter(prefix="/daily", tags=["daily"])
analytics_router = APIRouter(prefix="/analytics", tags=["analytics"])


def _require_date_key(date_key: str) -> str:
    if not is_date_key(date_key):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="date_key must be YYYY-MM-DD")
    return date_key


def _unavailable(exc: StoreUnavailableError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))


@router.get("/{date_key}", response_model=DailyQuestion)
async def read_daily_question(
    date_key: str,
    current_user: CurrentUser = Depends(get_current_user),
) -> DailyQuestion:
    _require_date_key(date_key)
    try:
        return await daily_service.get_question(date_key)
    except QuestionNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except StoreUnavailableError as exc:
        raise _unavailable(exc) from exc


@router.post("/{date_key}/view", response_model=DailyAttempt)
async def lock_daily_question(
    date_key: str,
    current_user: CurrentUser = Depends(get_current_user),
) -> DailyAttempt:
    """Authenticated user: mark the day's question as viewed (idempotent)."""
    _require_date_key(date_key)
    try:
        return await daily_service.lock_after_view(current_user.id, date_key)
    except StoreUnavailableError as exc:
        raise _unavailable(exc) from exc


@router.post("/{date_key}/submit", response_model=AnswerSubmissionResponse, status_code=status.HTTP_201_CREATED)
async def submit_daily_answer(
    date_key: str,
    payload: AnswerSubmission,
    current_user: CurrentUser = Depends(get_current_user),
) -> AnswerSubmissionResponse:
    """Authenticated user: store the day's answer and advance the streak."""
    _require_date_key(date_key)
    try:
        return await daily_service.submit_answer(
            current_user.id,
            date_key,
            payload.question_id,
            payload.answer,
            payload.language,
        )
    except AlreadySubmittedError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except StreakConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except StoreUnavailableError as exc:
        raise _unavailable(exc) from exc


@router.get("/{date_key}/solution", response_model=SolutionView)
async def read_daily_solution(
    date_key: str,
    current_user: CurrentUser = Depends(get_current_user),
) -> SolutionView:
    """Authenticated user: solution, unlocked once the day's answer is submitted."""
    _require_date_key(date_key)
    try:
        return await daily_service.get_solution(current_user.id, date_key)
    except SolutionLockedError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except QuestionNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except StoreUnavailableError as exc:
        raise _unavailable(exc) from exc


@analytics_router.get("", response_model=AnalyticsResponse)
async def read_analytics(
    days: int = Query(7, ge=1, le=365),
    current_user: CurrentUser = Depends(get_current_user),
) -> AnalyticsResponse:
    try:
        return await daily_service.analytics(current_user.id, days)
    except StoreUnavailableError as exc:
        raise _unavailable(exc) from exc
