"""Async Supabase client shared by the store adapters and the auth dependency.

Import using: from app.DB.supabase import get_supabase
"""
from __future__ import annotations

import asyncio
from typing import Optional

from supabase import AsyncClient, create_async_client

from app.Core.config import get_settings

_client: Optional[AsyncClient] = None
_lock = asyncio.Lock()


async def get_supabase() -> AsyncClient:
    """Return the cached client, creating it on first use."""
    global _client
    if _client is not None:
        return _client
    async with _lock:
        if _client is None:
            settings = get_settings()
            if not settings.supabase_url or not settings.supabase_key:
                raise RuntimeError("Supabase is not configured (SUPABASE_URL / SUPABASE_ANON_KEY).")
            try:
                _client = await create_async_client(settings.supabase_url, settings.supabase_key)
            except Exception as exc:  # pragma: no cover (network/init failure)
                raise RuntimeError("Could not create Supabase async client") from exc
    return _client


__all__ = ["get_supabase"]
