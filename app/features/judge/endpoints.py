from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.common.deps import CurrentUser, get_optional_user
from app.features.execution.schemas import UnsupportedLanguageError
from app.features.streaks.service import streak_service
from .schemas import JudgeRequest, RunResponse, SubmissionStatus
from .service import JudgeValidationError, judge_service

logger = logging.getLogger("judge.endpoints")

router = APIRouter(tags=["judge"])


def _bad_request(exc: ValueError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"success": False, "error": str(exc)})


def _server_error(exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=500, content={"success": False, "error": str(exc) or "Server error"})


@router.post("/run", response_model=RunResponse)
async def run_samples(payload: JudgeRequest):
    """Run code against every sample case and report a verdict per case."""
    try:
        results = await judge_service.run_against_samples(payload.code, payload.language, payload.testcases)
    except (JudgeValidationError, UnsupportedLanguageError) as exc:
        return _bad_request(exc)
    except Exception as exc:
        logger.exception("run failed")
        return _server_error(exc)
    return RunResponse(results=results)


@router.post("/submit")
async def submit_solution(
    payload: JudgeRequest,
    current_user: Optional[CurrentUser] = Depends(get_optional_user),
):
    """Judge a submission, stopping at the first failing case."""
    try:
        verdict = await judge_service.submit_for_judging(payload.code, payload.language, payload.testcases)
    except (JudgeValidationError, UnsupportedLanguageError) as exc:
        return _bad_request(exc)
    except Exception as exc:
        logger.exception("submit failed")
        return _server_error(exc)

    if current_user is not None:
        try:
            await streak_service.increment_submissions(
                current_user.id,
                accepted=verdict.status is SubmissionStatus.ACCEPTED,
            )
        except Exception as exc:  # counters are best effort
            logger.warning("submission counter update failed uid=%s: %s", current_user.id, exc)

    return JSONResponse(status_code=200, content=verdict.to_payload())
