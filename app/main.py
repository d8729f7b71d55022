"""FastAPI entry point for the judge proxy and daily-question API."""

from __future__ import annotations

import logging
import os
import uuid
from time import perf_counter
from typing import Dict

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.Core.config import get_settings
from app.features.daily.endpoints import router as daily_router, analytics_router
from app.features.execution.endpoints import router as execution_router
from app.features.judge.endpoints import router as judge_router
from app.features.profiles.endpoints import router as profile_router
from app.features.streaks.endpoints import router as streak_router

_settings = get_settings()

logging.basicConfig(
    level=getattr(logging, _settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title=_settings.app_name)


# ------------------------
# CORS Setup
# ------------------------
def _split_env_csv(name: str, default: str = ""):
    raw = os.getenv(name, default)
    return [o.strip().rstrip("/") for o in raw.split(",") if o.strip()]


_FRONTEND_ORIGINS = _split_env_csv("ALLOW_ORIGINS", "*")

app.add_middleware(
    CORSMiddleware,
    allow_origins=_FRONTEND_ORIGINS,
    allow_credentials="*" not in _FRONTEND_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ------------------------
# Custom Middlewares
# ------------------------
@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    incoming = request.headers.get("X-Request-Id") or request.headers.get("X-Request-ID")
    req_id = incoming or str(uuid.uuid4())
    request.state.request_id = req_id
    logger = logging.getLogger("request")
    logger.info("request.start", extra={"request_id": req_id, "path": request.url.path, "method": request.method})
    t0 = perf_counter()
    response = await call_next(request)
    dt = int((perf_counter() - t0) * 1000)
    response.headers["X-Request-Id"] = req_id
    logger.info(
        "request.end %s %s %dms %s",
        request.method,
        request.url.path,
        dt,
        response.status_code,
        extra={"request_id": req_id, "path": request.url.path, "status_code": response.status_code},
    )
    return response


# ------------------------
# Routers
# ------------------------
app.include_router(execution_router)
app.include_router(judge_router)
app.include_router(streak_router)
app.include_router(profile_router)
app.include_router(daily_router)
app.include_router(analytics_router)


# ------------------------
# Meta endpoints
# ------------------------
@app.get("/", tags=["meta"], summary="API Root")
async def root() -> Dict[str, str]:
    return {"status": "ok", "message": "Judge server running"}


@app.get("/health", tags=["meta"], summary="Liveness probe")
async def health() -> Dict[str, str]:
    return {"status": "ok"}
