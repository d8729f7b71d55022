from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Optional

from app.Core.config import get_settings
from app.DB.supabase import get_supabase

logger = logging.getLogger("db.repository")


class StoreUnavailableError(RuntimeError):
    """The document store did not answer in time."""


class SupabaseRepository:
    """Base for table adapters: bounded query time, slow-call logging."""

    def __init__(self, client_factory=None):
        self._client_factory = client_factory or get_supabase

    async def _client(self):
        return await self._client_factory()

    async def _exec(self, awaitable: Awaitable[Any], op: str) -> Any:
        timeout = get_settings().supabase_query_timeout_s
        t0 = time.perf_counter()
        try:
            resp = await asyncio.wait_for(awaitable, timeout=timeout)
        except asyncio.TimeoutError as exc:
            raise StoreUnavailableError(f"Supabase {op} timed out after {timeout}s") from exc
        ms = int((time.perf_counter() - t0) * 1000)
        if ms > 50:
            logger.info("supabase_%s_ms=%d", op, ms)
        return resp

    @staticmethod
    def _first(resp: Any) -> Optional[dict]:
        data = getattr(resp, "data", None)
        if not data:
            return None
        return data[0] if isinstance(data, list) else data

    @staticmethod
    def _rows(resp: Any) -> list:
        data = getattr(resp, "data", None)
        return list(data or [])
