"""
Environment-driven settings.

Everything is read once at startup (see `api/main.py`) and passed around
explicitly; nothing here caches process-wide state.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit


DEFAULT_USER_AGENT = "Jokes App (https://github.com/jokes-aggregator)"
DEFAULT_CORS_ORIGINS = (
    "http://localhost:3000",
    "http://127.0.0.1:3000",
)


def _env_str(name: str, default: str) -> str:
    return os.environ.get(name, default).strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _sanitize_database_url(url: str) -> str:
    # asyncpg rejects libpq's `sslmode` query parameter.
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url() -> str:
    url = os.environ.get("DATABASE_URL", "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL is not set.")
    return _sanitize_database_url(url)


def cors_origins() -> tuple[str, ...]:
    raw = os.environ.get("CORS_ORIGINS", "").strip()
    if not raw:
        return DEFAULT_CORS_ORIGINS
    return tuple(origin.strip() for origin in raw.split(",") if origin.strip())


@dataclass(frozen=True)
class Settings:
    database_url: str
    db_pool_min_size: int = 1
    db_pool_max_size: int = 5
    db_command_timeout_s: float = 30.0
    provider_timeout_s: float = 10.0
    fetch_concurrency: int = 10
    jokes_one_api_key: str | None = None
    user_agent: str = DEFAULT_USER_AGENT
    log_level: str = "INFO"


def load_settings() -> Settings:
    """
    Build `Settings` from the environment.

    Malformed numbers fall back to their defaults; only DATABASE_URL is required.
    """
    concurrency = _env_int("JOKES_FETCH_CONCURRENCY", 10)
    if concurrency <= 0:
        concurrency = 10

    return Settings(
        database_url=database_url(),
        db_pool_min_size=max(1, _env_int("DB_POOL_MIN_SIZE", 1)),
        db_pool_max_size=max(1, _env_int("DB_POOL_MAX_SIZE", 5)),
        db_command_timeout_s=_env_float("DB_COMMAND_TIMEOUT_S", 30.0),
        provider_timeout_s=_env_float("PROVIDER_TIMEOUT_S", 10.0),
        fetch_concurrency=concurrency,
        jokes_one_api_key=os.environ.get("JOKES_ONE_API_KEY", "").strip() or None,
        user_agent=_env_str("JOKES_USER_AGENT", DEFAULT_USER_AGENT),
        log_level=_env_str("LOG_LEVEL", "INFO").upper(),
    )
