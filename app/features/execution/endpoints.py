from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from .languages import list_languages
from .schemas import (
    LanguageInfo,
    PistonRuntime,
    QuickExecuteRequest,
    QuickExecuteResponse,
    UnsupportedLanguageError,
)
from .service import piston_service

logger = logging.getLogger("execution.endpoints")

router = APIRouter(tags=["execution"])


@router.get("/languages", response_model=List[LanguageInfo])
async def get_supported_languages() -> List[LanguageInfo]:
    return list_languages()


@router.get("/runtimes", response_model=List[PistonRuntime])
async def get_runtimes() -> List[PistonRuntime]:
    """Runtimes advertised by the execution provider (empty if unreachable)."""
    return await piston_service.get_runtimes()


@router.post("/execute", response_model=QuickExecuteResponse)
async def execute_snippet(payload: QuickExecuteRequest):
    """Run code once with the given stdin (editor "Run" button)."""
    if not payload.code or not payload.language:
        return JSONResponse(status_code=400, content={"success": False, "error": "Missing code or language"})
    try:
        result = await piston_service.execute_code(payload.code, payload.language, payload.stdin)
    except UnsupportedLanguageError as exc:
        return JSONResponse(status_code=400, content={"success": False, "error": str(exc)})

    return QuickExecuteResponse(
        success=result.ok,
        status=result.status,
        output=result.output,
        error=None if result.ok else result.error,
        execution_time=f"{result.elapsed_ms}ms",
    )
