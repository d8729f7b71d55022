from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from app.features.streaks.service import profile_from_row, streak_service
from .schemas import ProfileCreate, UserProfile

logger = logging.getLogger("profiles.service")


class ProfileNotFoundError(LookupError):
    pass


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def profile_from_user_row(uid: str, row: Dict[str, Any]) -> UserProfile:
    return UserProfile(
        uid=uid,
        first_name=row.get("first_name"),
        email=row.get("email"),
        created_at=row.get("created_at"),
        last_login=row.get("last_login"),
        total_submissions=int(row.get("total_submissions") or 0),
        accepted_submissions=int(row.get("accepted_submissions") or 0),
        streak=profile_from_row(uid, row),
    )


async def create_user_profile(uid: str, data: ProfileCreate) -> UserProfile:
    """Create (or refresh the name/email of) the caller's row; counters and streak are kept."""
    now = _now()

    def _mutate(row: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        fields: Dict[str, Any] = {"first_name": data.first_name, "email": str(data.email), "last_login": now}
        if not row:
            fields.update(total_submissions=0, accepted_submissions=0)
        if not (row or {}).get("created_at"):
            fields["created_at"] = now
        return fields

    state, _ = await streak_service.update_user_row(uid, _mutate, op="profile.create")
    logger.info("profile.saved uid=%s", uid)
    return profile_from_user_row(uid, state or {})


async def update_last_login(uid: str) -> UserProfile:
    now = _now()

    def _mutate(row: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        if row is None:
            return None
        return {"last_login": now}

    state, written = await streak_service.update_user_row(uid, _mutate, op="profile.login")
    if not written:
        raise ProfileNotFoundError(f"No profile for {uid}")
    return profile_from_user_row(uid, state or {})


async def get_user_profile(uid: str) -> Optional[UserProfile]:
    row, _ = await streak_service.repository.get(uid)
    if row is None:
        return None
    return profile_from_user_row(uid, row)
