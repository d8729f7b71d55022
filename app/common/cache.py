"""Process-local TTL cache for static provider metadata (runtimes, languages)."""

from __future__ import annotations

import os
import time
from typing import Any, Optional

_DEFAULT_TTL = int(os.getenv("READ_CACHE_SECONDS", "60"))
_DISABLED = os.getenv("READ_CACHE_DISABLED", "false").lower() == "true"

_STORE: dict[str, tuple[Any, float]] = {}


def get(key: str) -> Any | None:
    if _DISABLED:
        return None
    item = _STORE.get(key)
    if item is None:
        return None
    value, expires_at = item
    if time.monotonic() < expires_at:
        return value
    _STORE.pop(key, None)
    return None


def set(key: str, value: Any, ttl: Optional[int] = None) -> None:
    if _DISABLED:
        return
    ttl_s = int(ttl if ttl is not None else _DEFAULT_TTL)
    _STORE[key] = (value, time.monotonic() + max(1, ttl_s))


def clear(prefix: Optional[str] = None) -> None:
    if prefix is None:
        _STORE.clear()
        return
    for key in [k for k in _STORE if k.startswith(prefix)]:
        _STORE.pop(key, None)
