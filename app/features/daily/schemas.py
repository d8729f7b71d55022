from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from app.features.streaks.schemas import StreakProfile

Difficulty = Literal["Easy", "Medium", "Hard"]


class DailyQuestion(BaseModel):
    id: str  # date key
    title: str
    description: str
    difficulty: Difficulty
    topic: str
    created_at: Optional[datetime] = None


class DailySolution(BaseModel):
    id: str  # date key
    solution: str
    created_at: Optional[datetime] = None


class DailyAttempt(BaseModel):
    date_key: str
    viewed_at: Optional[datetime] = None
    submitted: bool = False
    submission_id: Optional[str] = None
    submitted_at: Optional[datetime] = None


class AnswerSubmission(BaseModel):
    question_id: str
    answer: str = Field(min_length=1)
    language: Optional[str] = None


class AnswerSubmissionResponse(BaseModel):
    submission_id: str
    streak: StreakProfile


class SolutionView(BaseModel):
    question: DailyQuestion
    solution: Optional[str] = None


class ActivityDay(BaseModel):
    date_key: str
    viewed: bool
    submitted: bool


class AnalyticsResponse(BaseModel):
    profile: StreakProfile
    attempts: List[DailyAttempt]
    activity: List[ActivityDay]
