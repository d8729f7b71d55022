import sys
import os

import pytest

# Ensure repo root on sys.path for imports like `app...`
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from app.common import cache  # noqa: E402
from app.features.execution.schemas import ExecutionSuccess  # noqa: E402


@pytest.fixture(autouse=True)
def _clear_cache():
    cache.clear()
    yield
    cache.clear()


class ScriptedExecutor:
    """Executor double: answers each request via ``respond(request)`` and records calls."""

    def __init__(self, respond=None):
        self.calls = []
        self._respond = respond or (lambda req: ExecutionSuccess(stdout="", elapsed_ms=3))

    async def execute(self, request):
        self.calls.append(request)
        return self._respond(request)

    async def execute_many(self, requests):
        return [await self.execute(req) for req in requests]


@pytest.fixture
def scripted_executor():
    return ScriptedExecutor
