from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from app.common.dates import parse_date_key


class StreakProfile(BaseModel):
    uid: str
    current_streak: int = Field(default=0, ge=0)
    longest_streak: int = Field(default=0, ge=0)
    last_attempt_date: Optional[str] = None
    total_attempts: int = Field(default=0, ge=0)
    missed_days: int = Field(default=0, ge=0)

    @field_validator("current_streak", "longest_streak", "total_attempts", "missed_days", mode="before")
    @classmethod
    def _none_as_zero(cls, value):
        return 0 if value is None else value

    @field_validator("last_attempt_date")
    @classmethod
    def _valid_date_key(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            parse_date_key(value)
        return value

    @classmethod
    def empty(cls, uid: str) -> "StreakProfile":
        return cls(uid=uid)


class StreakAttemptRequest(BaseModel):
    date_key: Optional[str] = None

    @field_validator("date_key")
    @classmethod
    def _valid_date_key(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            parse_date_key(value)
        return value


class SubmissionCounters(BaseModel):
    total_submissions: int = 0
    accepted_submissions: int = 0
