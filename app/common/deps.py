"""Shared FastAPI dependencies for resolving the caller's identity."""

from __future__ import annotations

import asyncio
import logging
import os
import time
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from app.DB.supabase import get_supabase


logger = logging.getLogger("auth.deps")
security = HTTPBearer(auto_error=True)
optional_security = HTTPBearer(auto_error=False)


class CurrentUser(BaseModel):
    """Opaque identity handed over by the identity provider."""
    id: str
    email: Optional[str] = None


async def _resolve_token(token: str) -> CurrentUser:
    try:
        client = await get_supabase()
        t0 = time.perf_counter()
        whoami_timeout = float(os.getenv("AUTH_WHOAMI_TIMEOUT", "5"))
        auth_user = await asyncio.wait_for(client.auth.get_user(token), timeout=whoami_timeout)
        ms = int((time.perf_counter() - t0) * 1000)
        if ms > 50:
            logger.info("auth.get_user_ms=%d", ms)
    except Exception as exc:  # noqa: BLE001
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid authentication credentials") from exc

    if not auth_user or not auth_user.user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid authentication credentials")

    sup_user = auth_user.user
    email = sup_user.email or (sup_user.user_metadata or {}).get("email")
    return CurrentUser(id=str(sup_user.id), email=email)


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> CurrentUser:
    """Validate the bearer token with Supabase Auth and return the caller."""
    current = await _resolve_token(credentials.credentials)
    request_id = getattr(request.state, "request_id", None)
    logger.info("auth_resolved uid=%s request_id=%s path=%s", current.id, request_id, request.url.path)
    return current


async def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security),
) -> Optional[CurrentUser]:
    """Like ``get_current_user`` but anonymous or unverifiable callers resolve to ``None``."""
    if credentials is None:
        return None
    try:
        return await get_current_user(request, credentials)
    except HTTPException as exc:
        logger.info("optional auth ignored: %s path=%s", exc.detail, request.url.path)
        return None
