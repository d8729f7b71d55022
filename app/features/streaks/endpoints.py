from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from app.DB.repository import StoreUnavailableError
from app.common.dates import today_key
from app.common.deps import CurrentUser, get_current_user
from .schemas import StreakAttemptRequest, StreakProfile
from .service import FutureAttemptError, StreakConflictError, streak_service

router = APIRouter(prefix="/streak", tags=["streak"])


@router.get("", response_model=StreakProfile)
async def read_streak(current_user: CurrentUser = Depends(get_current_user)) -> StreakProfile:
    """Authenticated user: current streak counters (zeroed if never attempted)."""
    try:
        return await streak_service.get_profile(current_user.id)
    except StoreUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc


@router.post("", response_model=StreakProfile)
async def record_streak_attempt(
    payload: Optional[StreakAttemptRequest] = None,
    current_user: CurrentUser = Depends(get_current_user),
) -> StreakProfile:
    """Authenticated user: count an attempt for today (UTC).

    ``date_key`` is optional; when sent it must equal today's UTC key.
    """
    today = today_key()
    date_key = payload.date_key if payload else None
    if date_key is not None and date_key != today:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"date_key must be today's UTC date ({today})",
        )
    try:
        return await streak_service.record_attempt(current_user.id, today)
    except FutureAttemptError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except StreakConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except StoreUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
