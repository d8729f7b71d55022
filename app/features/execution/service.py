import asyncio
import logging
import time
from typing import Any, Dict, List, Optional

import httpx

from app.Core.config import get_settings
from app.common import cache as _cache
from .languages import resolve_language
from .schemas import (
    CompileFailure,
    ExecutionRequest,
    ExecutionResult,
    ExecutionSuccess,
    PistonExecuteRequest,
    PistonFile,
    PistonRuntime,
    PistonStage,
    ProviderFailure,
    RuntimeFailure,
    TransportFailure,
)

_RUNTIMES_CACHE_KEY = "piston:runtimes"


class PistonService:
    """Client for the Piston sandboxed execution API.

    Every public call resolves to exactly one ``ExecutionResult`` variant; the
    only exception that escapes is ``UnsupportedLanguageError``, raised before
    anything is sent.
    """

    def __init__(self):
        self.settings = get_settings()
        self.execute_url = self.settings.execute_url
        self.runtimes_url = self.settings.runtimes_url
        self.headers = {"Content-Type": "application/json"}
        self._cache = _cache
        self._logger = logging.getLogger(__name__)

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Perform one HTTP request against the provider (no retries)."""
        self._logger.debug("Piston request: %s %s", method, url)
        timeout = httpx.Timeout(
            connect=5.0,
            read=self.settings.piston_http_timeout_s,
            write=5.0,
            pool=5.0,
        )
        async with httpx.AsyncClient(timeout=timeout) as client:
            return await client.request(method, url, headers=self.headers, **kwargs)

    def build_payload(self, request: ExecutionRequest) -> Dict[str, Any]:
        cfg = resolve_language(request.language)
        body = PistonExecuteRequest(
            language=cfg.runtime,
            version=cfg.version,
            files=[PistonFile(name=cfg.file_name, content=request.source_code)],
            stdin=request.stdin or "",
            args=[],
            compile_timeout=request.compile_timeout_ms,
            run_timeout=request.run_timeout_ms,
        )
        return body.model_dump()

    async def execute(self, request: ExecutionRequest) -> ExecutionResult:
        payload = self.build_payload(request)
        started = time.perf_counter()
        try:
            response = await self._request("POST", self.execute_url, json=payload)
            data = response.json()
        except httpx.HTTPError as exc:
            elapsed_ms = self._elapsed_ms(started)
            self._logger.warning("Piston transport failure after %dms: %s", elapsed_ms, exc)
            return TransportFailure(message=str(exc) or type(exc).__name__, elapsed_ms=elapsed_ms)
        except ValueError as exc:
            elapsed_ms = self._elapsed_ms(started)
            self._logger.warning("Piston returned a non-JSON body: %s", exc)
            return TransportFailure(message=f"Invalid response from execution service: {exc}", elapsed_ms=elapsed_ms)
        elapsed_ms = self._elapsed_ms(started)
        result = self.normalize(data, elapsed_ms)
        self._logger.info(
            "piston_execute language=%s kind=%s elapsed_ms=%d http_status=%s",
            request.language,
            result.kind,
            elapsed_ms,
            response.status_code,
        )
        return result

    async def execute_code(self, code: str, language: str, stdin: str = "") -> ExecutionResult:
        return await self.execute(
            ExecutionRequest(
                source_code=code,
                language=language,
                stdin=stdin or "",
                compile_timeout_ms=self.settings.compile_timeout_ms,
                run_timeout_ms=self.settings.run_timeout_ms,
            )
        )

    @staticmethod
    def _elapsed_ms(started: float) -> int:
        return int((time.perf_counter() - started) * 1000)

    @staticmethod
    def _stage(payload: Dict[str, Any], name: str) -> Optional[PistonStage]:
        raw = payload.get(name)
        if not isinstance(raw, dict):
            return None
        return PistonStage(**{k: raw.get(k) for k in ("code", "output", "stdout", "stderr", "signal")})

    @staticmethod
    def normalize(payload: Any, elapsed_ms: int = 0) -> ExecutionResult:
        """Collapse a Piston response into a single result variant.

        Order: compile failure, then run phase (error or success), then a
        provider error carrying whatever ``message`` the body had.
        """
        if not isinstance(payload, dict):
            return ProviderFailure(message="Unknown error", elapsed_ms=elapsed_ms)

        compile_stage = PistonService._stage(payload, "compile")
        if compile_stage is not None and compile_stage.code != 0:
            return CompileFailure(
                raw_output=compile_stage.output or "",
                stderr=compile_stage.stderr or "",
                elapsed_ms=elapsed_ms,
            )

        run_stage = PistonService._stage(payload, "run")
        if run_stage is not None:
            stdout = run_stage.output if run_stage.stdout is None else run_stage.stdout
            stdout = stdout or ""
            stderr = run_stage.stderr or ""
            if run_stage.code != 0 or stderr:
                if not stderr and run_stage.signal:
                    stderr = f"Killed by signal {run_stage.signal}"
                return RuntimeFailure(
                    stdout=stdout,
                    stderr=stderr,
                    exit_code=run_stage.code,
                    elapsed_ms=elapsed_ms,
                )
            return ExecutionSuccess(stdout=stdout.strip(), elapsed_ms=elapsed_ms)

        message = payload.get("message") or "Unknown error"
        return ProviderFailure(message=str(message), elapsed_ms=elapsed_ms)

    async def get_runtimes(self) -> List[PistonRuntime]:
        cached = self._cache.get(_RUNTIMES_CACHE_KEY)
        if cached is not None:
            return cached
        try:
            resp = await self._request("GET", self.runtimes_url)
            resp.raise_for_status()
            value = [PistonRuntime(**item) for item in resp.json()]
        except (httpx.HTTPError, ValueError, TypeError) as exc:
            self._logger.error("Failed to fetch runtimes: %s", exc)
            return []
        self._cache.set(_RUNTIMES_CACHE_KEY, value, ttl=self.settings.runtimes_cache_seconds)
        return value

    async def execute_many(self, requests: List[ExecutionRequest]) -> List[ExecutionResult]:
        """Execute independent requests concurrently; output aligned to input order."""
        if not requests:
            return []
        semaphore = asyncio.Semaphore(min(len(requests), self.settings.run_concurrency))

        async def _runner(req: ExecutionRequest) -> ExecutionResult:
            async with semaphore:
                return await self.execute(req)

        return list(await asyncio.gather(*(_runner(req) for req in requests)))


piston_service = PistonService()
