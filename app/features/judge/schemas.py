from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Verdict(str, Enum):
    ACCEPTED = "Accepted"
    WRONG_ANSWER = "Wrong Answer"


class SubmissionStatus(str, Enum):
    ACCEPTED = "Accepted"
    WRONG_ANSWER = "Wrong Answer"
    COMPILATION_ERROR = "Compilation Error"
    RUNTIME_ERROR = "Runtime Error"
    ERROR = "Error"


class TestCase(BaseModel):
    """One (input, expected output) pair; ``output`` on the wire."""

    __test__ = False

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    input: str = ""
    expected_output: str = Field(default="", alias="output")

    @field_validator("input", "expected_output", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return "" if value is None else value


class JudgeRequest(BaseModel):
    code: Optional[str] = None
    language: Optional[str] = None
    testcases: List[TestCase] = Field(default_factory=list)


class CaseVerdict(BaseModel):
    input: str
    expected: str
    output: str
    verdict: Verdict
    error: str = ""


class RunResponse(BaseModel):
    results: List[CaseVerdict]


class FailedCase(BaseModel):
    index: int
    input: str


class SubmissionVerdict(BaseModel):
    success: bool
    status: SubmissionStatus
    output: str = ""
    error: Optional[str] = None
    expected_output: Optional[str] = Field(default=None, serialization_alias="expectedOutput")
    failed_case: Optional[FailedCase] = Field(default=None, serialization_alias="failedCase")
    execution_time_ms: Optional[int] = Field(default=None, exclude=True)

    @property
    def execution_time(self) -> Optional[str]:
        if self.execution_time_ms is None:
            return None
        return f"{self.execution_time_ms}ms"

    def to_payload(self) -> dict:
        """Wire shape consumed by the app (camelCase keys, unset fields dropped)."""
        payload = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        if self.execution_time is not None:
            payload["executionTime"] = self.execution_time
        return payload
