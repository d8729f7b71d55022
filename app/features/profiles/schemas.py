from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from app.features.streaks.schemas import StreakProfile


class ProfileCreate(BaseModel):
    first_name: str = Field(min_length=1, max_length=100)
    email: EmailStr


class UserProfile(BaseModel):
    uid: str
    first_name: Optional[str] = None
    email: Optional[str] = None
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None
    total_submissions: int = 0
    accepted_submissions: int = 0
    streak: StreakProfile
