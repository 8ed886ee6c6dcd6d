"""
Async database access helpers (raw SQL) using asyncpg.

The pool is created once in the FastAPI lifespan (see `api/main.py`), kept on
`app.state.pool` and handed to repository functions explicitly.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import json
from functools import wraps
from typing import Any

import asyncpg
from fastapi import Request

from .config import Settings
from .errors import DatabaseError, NotFoundError


async def init_pool(settings: Settings) -> asyncpg.Pool:
    pool = await asyncpg.create_pool(
        dsn=settings.database_url,
        min_size=settings.db_pool_min_size,
        max_size=max(settings.db_pool_min_size, settings.db_pool_max_size),
        command_timeout=settings.db_command_timeout_s,
    )
    if pool is None:
        raise RuntimeError("Failed to create DB pool.")
    return pool


async def close_pool(pool: asyncpg.Pool | None) -> None:
    if pool is None:
        return None
    await pool.close()


def get_pool(request: Request) -> asyncpg.Pool:
    """
    FastAPI dependency: the pool created on startup.
    """
    pool = getattr(request.app.state, "pool", None)
    if pool is None:
        raise DatabaseError("DB pool is not initialized.")
    return pool


def asyncpg_error_handler(func):
    """
    Turn driver/connection failures into `DatabaseError`.

    `NotFoundError` is a normal outcome for read paths and passes through.
    """

    @wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except (DatabaseError, NotFoundError):
            raise
        except asyncpg.PostgresError as e:
            raise DatabaseError(f"Postgres error ({e.__class__.__name__})", e) from e
        except (OSError, asyncpg.InterfaceError) as e:
            raise DatabaseError("Database connection error", e) from e
        except Exception as e:
            raise DatabaseError("An unexpected database error occurred", e) from e

    return wrapper


def json_arg(value: dict[str, Any] | None) -> str | None:
    """
    asyncpg does not automatically encode Python dicts for json/jsonb parameters.
    We pass JSON as a string and cast to jsonb in SQL.
    """
    if value is None:
        return None
    return json.dumps(value, ensure_ascii=True)


def json_value(raw: Any) -> Any:
    """
    Decode a json/jsonb column. asyncpg returns these as text unless a codec is set.
    """
    if isinstance(raw, (str, bytes, bytearray)):
        return json.loads(raw)
    return raw


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


async def fetch_one(pool: asyncpg.Pool, sql: str, *args: Any) -> dict[str, Any] | None:
    """
    Run a query and return a single row as a dict (or None).
    """
    row = await pool.fetchrow(sql, *args)
    return _record_to_dict(row) if row is not None else None


async def fetch_all(pool: asyncpg.Pool, sql: str, *args: Any) -> list[dict[str, Any]]:
    """
    Run a query and return all rows as a list of dicts.
    """
    rows = await pool.fetch(sql, *args)
    return [_record_to_dict(r) for r in rows]
