from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from postgrest.exceptions import APIError

from app.DB.repository import SupabaseRepository

_UNIQUE_VIOLATION = "23505"


class UserRowRepository(SupabaseRepository):
    """Versioned access to the ``users`` table.

    Every write is conditional on the ``version`` read alongside the row, so a
    concurrent writer makes the write a no-op instead of overwriting it.
    """

    _TABLE = "users"

    async def get(self, uid: str) -> Tuple[Optional[Dict[str, Any]], Optional[int]]:
        client = await self._client()
        resp = await self._exec(
            client.table(self._TABLE).select("*").eq("uid", uid).limit(1).execute(),
            op="users.select",
        )
        row = self._first(resp)
        if row is None:
            return None, None
        return row, int(row.get("version") or 0)

    async def insert(self, uid: str, fields: Dict[str, Any]) -> bool:
        """Create the row at version 1; ``False`` if someone created it first."""
        client = await self._client()
        record = {
            **fields,
            "uid": uid,
            "version": 1,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        try:
            resp = await self._exec(client.table(self._TABLE).insert(record).execute(), op="users.insert")
        except APIError as exc:
            if getattr(exc, "code", None) == _UNIQUE_VIOLATION:
                return False
            raise
        return self._first(resp) is not None

    async def compare_and_set(self, uid: str, version: int, fields: Dict[str, Any]) -> bool:
        """Write ``fields`` only if the row is still at ``version``."""
        client = await self._client()
        payload = {
            **fields,
            "version": version + 1,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        resp = await self._exec(
            client.table(self._TABLE).update(payload).eq("uid", uid).eq("version", version).execute(),
            op="users.update",
        )
        return self._first(resp) is not None


user_row_repository = UserRowRepository()

__all__ = ["user_row_repository", "UserRowRepository"]
