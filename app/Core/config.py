from __future__ import annotations

import os
from functools import lru_cache
from dotenv import load_dotenv, find_dotenv

_env_path = find_dotenv(".env") or ".env"
load_dotenv(_env_path, override=True)


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


class Settings:
    """Central configuration (env driven)."""

    def __init__(self) -> None:
        # Supabase (document store + identity provider)
        raw_url = os.getenv("SUPABASE_URL", "")
        self.supabase_url: str = raw_url.rstrip("/")
        self.supabase_anon_key: str = os.getenv("SUPABASE_ANON_KEY") or os.getenv("SUPABASE_KEY", "")
        self.supabase_key: str = self.supabase_anon_key  # alias
        try:
            self.supabase_query_timeout_s: float = float(os.getenv("SUPABASE_QUERY_TIMEOUT", "5"))
        except ValueError:
            self.supabase_query_timeout_s = 5.0
        # Piston / code execution
        self.piston_api_url: str = os.getenv("PISTON_API_URL", "https://emkc.org/api/v2/piston").rstrip("/")
        try:
            self.piston_http_timeout_s: float = float(os.getenv("PISTON_HTTP_TIMEOUT", "30"))
        except ValueError:
            self.piston_http_timeout_s = 30.0
        self.compile_timeout_ms: int = _int_env("COMPILE_TIMEOUT_MS", 10000)
        self.run_timeout_ms: int = _int_env("RUN_TIMEOUT_MS", 5000)
        self.run_concurrency: int = max(1, _int_env("RUN_CONCURRENCY", 4))
        self.runtimes_cache_seconds: int = _int_env("RUNTIMES_CACHE_SECONDS", 3600)
        # Streaks
        self.streak_max_retries: int = max(1, _int_env("STREAK_MAX_RETRIES", 5))
        # App meta
        self.app_name: str = "Daily Code Backend"
        self.debug: bool = os.getenv("DEBUG", "False").lower() == "true"
        self.log_level: str = os.getenv("LOG_LEVEL", "DEBUG" if self.debug else "INFO").upper()

    @property
    def execute_url(self) -> str:
        return f"{self.piston_api_url}/execute"

    @property
    def runtimes_url(self) -> str:
        return f"{self.piston_api_url}/runtimes"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
