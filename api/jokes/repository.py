"""
Jokes persistence.
This module is where jokes-related SQL lives.

Table layout comes from the dbmate migration in `db/migrations/`:
- jokes(id uuid, external_id, joke jsonb, category, type, safe, lang, provider,
        created_at, updated_at, UNIQUE (external_id, provider))
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

import asyncpg

from core import db
from core.db import asyncpg_error_handler
from core.errors import DatabaseError, NotFoundError
from providers.types import JokeContent, JokeWithSource

DEFAULT_LANG = "en"
COLUMNS_PER_ROW = 7
DEFAULT_LIST_LIMIT = 20
MAX_LIST_LIMIT = 100

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpsertedJoke:
    id: UUID
    category: str | None
    kind: str
    provider: str


@dataclass(frozen=True)
class StoredJoke:
    id: UUID
    external_id: str | None
    content: JokeContent
    category: str | None
    kind: str
    safe: bool
    lang: str
    provider: str


def dedupe_batch(entries: Iterable[JokeWithSource]) -> list[JokeWithSource]:
    """
    Collapse entries sharing (external_id, provider); the last one wins.

    Entries without an external_id are kept as-is: NULLs never collide in the
    unique constraint, so each of them is its own row.
    """
    out: list[JokeWithSource] = []
    positions: dict[tuple[str, str], int] = {}
    for entry in entries:
        source_id = entry.joke.source_id
        if source_id is None:
            out.append(entry)
            continue

        key = (source_id, entry.provider)
        if key in positions:
            out[positions[key]] = entry
        else:
            positions[key] = len(out)
            out.append(entry)
    return out


def _row_values(entry: JokeWithSource) -> tuple[Any, ...]:
    joke = entry.joke
    return (
        joke.source_id,
        db.json_arg(joke.content.to_dict()),
        joke.category.lower() if joke.category else None,
        joke.kind.value,
        joke.safe if joke.safe is not None else True,
        joke.lang or DEFAULT_LANG,
        entry.provider,
    )


def build_upsert_sql(row_count: int) -> str:
    """
    One multi-row INSERT ... ON CONFLICT DO UPDATE for `row_count` jokes.
    """
    if row_count <= 0:
        raise ValueError("row_count must be > 0")

    values: list[str] = []
    for i in range(row_count):
        base = i * COLUMNS_PER_ROW
        values.append(
            f"(${base + 1}, ${base + 2}::jsonb, ${base + 3}, ${base + 4}, "
            f"${base + 5}, ${base + 6}, ${base + 7})"
        )
    values_clause = ",\n          ".join(values)

    return f"""
        INSERT INTO jokes (external_id, joke, category, type, safe, lang, provider)
        VALUES
          {values_clause}
        ON CONFLICT (external_id, provider) DO UPDATE
        SET joke = EXCLUDED.joke,
            category = EXCLUDED.category,
            type = EXCLUDED.type,
            safe = EXCLUDED.safe,
            lang = EXCLUDED.lang,
            updated_at = now()
        RETURNING id, category, type, provider
        """


@asyncpg_error_handler
async def upsert_batch(pool: asyncpg.Pool, entries: Iterable[JokeWithSource]) -> list[UpsertedJoke]:
    """
    Persist a batch in a single transaction.

    Either every row is written or none is. An empty batch (after dedup)
    returns [] without touching the pool.
    """
    batch = dedupe_batch(entries)
    if not batch:
        return []

    sql = build_upsert_sql(len(batch))
    args = [value for entry in batch for value in _row_values(entry)]

    async with pool.acquire() as conn:  # type: asyncpg.Connection
        async with conn.transaction():
            rows = await conn.fetch(sql, *args)

    logger.info("jokes_upserted count=%s", len(rows))
    return [
        UpsertedJoke(
            id=row["id"],
            category=row["category"],
            kind=str(row["type"]),
            provider=str(row["provider"]),
        )
        for row in rows
    ]


@asyncpg_error_handler
async def fetch_random_joke(pool: asyncpg.Pool) -> StoredJoke:
    row = await db.fetch_one(
        pool,
        """
        SELECT id, external_id, joke, category, type, safe, lang, provider
        FROM jokes
        ORDER BY random()
        LIMIT 1
        """,
    )
    if row is None:
        raise NotFoundError("No jokes found in the database.")
    return _stored_joke(row)


def _stored_joke(row: dict[str, Any]) -> StoredJoke:
    try:
        content = JokeContent.from_dict(db.json_value(row["joke"]))
    except (ValueError, TypeError) as e:
        raise DatabaseError("Failed to parse joke content.", e) from e

    return StoredJoke(
        id=row["id"],
        external_id=row["external_id"],
        content=content,
        category=row["category"],
        kind=str(row["type"] or content.kind.value),
        safe=bool(row["safe"]),
        lang=str(row["lang"] or DEFAULT_LANG),
        provider=str(row["provider"]),
    )


LIST_JOKES_SQL = """
        SELECT id, external_id, joke, category, type, safe, lang, provider
        FROM jokes
        WHERE ($1::text IS NULL OR category = $1)
          AND ($2::text IS NULL OR type = $2)
          AND ($3::text IS NULL OR provider = $3)
          AND ($4::boolean IS NULL OR safe = $4)
        ORDER BY created_at DESC, id
        LIMIT $5 OFFSET $6
        """


@asyncpg_error_handler
async def list_jokes(
    pool: asyncpg.Pool,
    *,
    category: str | None = None,
    kind: str | None = None,
    provider: str | None = None,
    safe: bool | None = None,
    limit: int = DEFAULT_LIST_LIMIT,
    offset: int = 0,
) -> list[StoredJoke]:
    """
    Stored jokes, newest first. Unset filters match everything.
    """
    rows = await db.fetch_all(
        pool,
        LIST_JOKES_SQL,
        category.strip().lower() if category else None,
        kind,
        provider,
        safe,
        max(1, min(limit, MAX_LIST_LIMIT)),
        max(0, offset),
    )
    return [_stored_joke(row) for row in rows]


@asyncpg_error_handler
async def joke_stats(pool: asyncpg.Pool) -> dict[str, int]:
    row = await db.fetch_one(
        pool,
        """
        SELECT
          count(*) AS total_jokes,
          count(DISTINCT provider) AS total_providers,
          count(DISTINCT category) AS total_categories,
          count(*) FILTER (WHERE type = 'single') AS single_jokes,
          count(*) FILTER (WHERE type = 'twopart') AS twopart_jokes,
          count(*) FILTER (WHERE safe = true) AS safe_jokes,
          count(*) FILTER (WHERE safe = false) AS unsafe_jokes
        FROM jokes
        """,
    )
    return {key: int(value or 0) for key, value in (row or {}).items()}


@asyncpg_error_handler
async def joke_counts_by_provider(pool: asyncpg.Pool, provider: str | None = None) -> list[dict[str, Any]]:
    rows = await db.fetch_all(
        pool,
        """
        SELECT
          provider,
          count(*) AS joke_count,
          count(*) FILTER (WHERE type = 'single') AS single_count,
          count(*) FILTER (WHERE type = 'twopart') AS twopart_count,
          count(*) FILTER (WHERE safe = true) AS safe_count,
          count(*) FILTER (WHERE safe = false) AS unsafe_count,
          max(created_at) AS last_added
        FROM jokes
        WHERE ($1::text IS NULL OR provider = $1)
        GROUP BY provider
        ORDER BY joke_count DESC, provider ASC
        """,
        provider,
    )
    return [
        {
            "provider": str(row["provider"]),
            "joke_count": int(row["joke_count"]),
            "single_count": int(row["single_count"]),
            "twopart_count": int(row["twopart_count"]),
            "safe_count": int(row["safe_count"]),
            "unsafe_count": int(row["unsafe_count"]),
            "last_added": row["last_added"] if isinstance(row["last_added"], datetime) else None,
        }
        for row in rows
    ]


@asyncpg_error_handler
async def database_time(pool: asyncpg.Pool) -> datetime:
    row = await db.fetch_one(pool, "SELECT now() AS db_time")
    if row is None:
        raise DatabaseError("Database returned no time.")
    return row["db_time"]
