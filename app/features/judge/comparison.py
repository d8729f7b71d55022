from __future__ import annotations

from typing import Optional

from .schemas import Verdict


def normalise_output(value: Optional[str]) -> str:
    """Strip leading/trailing whitespace only; internal spacing and case are kept."""
    return (value or "").strip()


def outputs_match(actual: Optional[str], expected: Optional[str]) -> bool:
    return normalise_output(actual) == normalise_output(expected)


def verdict_for(actual: Optional[str], expected: Optional[str]) -> Verdict:
    return Verdict.ACCEPTED if outputs_match(actual, expected) else Verdict.WRONG_ANSWER
