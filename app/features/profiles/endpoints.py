from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from app.DB.repository import StoreUnavailableError
from app.common.deps import CurrentUser, get_current_user
from app.features.streaks.service import StreakConflictError
from .schemas import ProfileCreate, UserProfile
from .service import ProfileNotFoundError, create_user_profile, get_user_profile, update_last_login

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=UserProfile)
async def read_profile(current_user: CurrentUser = Depends(get_current_user)) -> UserProfile:
    """Authenticated user: profile, submission counters and streak."""
    try:
        profile = await get_user_profile(current_user.id)
    except StoreUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return profile


@router.post("", response_model=UserProfile, status_code=status.HTTP_201_CREATED)
async def create_profile(
    payload: ProfileCreate,
    current_user: CurrentUser = Depends(get_current_user),
) -> UserProfile:
    try:
        return await create_user_profile(current_user.id, payload)
    except StreakConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except StoreUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc


@router.post("/login", response_model=UserProfile)
async def record_login(current_user: CurrentUser = Depends(get_current_user)) -> UserProfile:
    """Authenticated user: stamp ``last_login``."""
    try:
        return await update_last_login(current_user.id)
    except ProfileNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except StreakConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except StoreUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
