"""
Jokes "service layer".

This file contains logic that is independent of FastAPI's routing layer:
- clamp the requested batch size
- fetch a best-effort batch from live providers
- persist it through the repository
"""

from __future__ import annotations

import logging

import asyncpg

from providers.aggregator import JokeAggregator
from providers.types import JokeWithSource

from . import repository, schemas

DEFAULT_RETRIEVE_COUNT = 100
MAX_RETRIEVE_COUNT = 100

logger = logging.getLogger(__name__)


def clamp_count(count: int | None) -> int:
    """
    Requested batch size, clamped to [0, MAX_RETRIEVE_COUNT].
    """
    if count is None:
        return DEFAULT_RETRIEVE_COUNT
    return max(0, min(int(count), MAX_RETRIEVE_COUNT))


async def retrieve_jokes(
    aggregator: JokeAggregator,
    pool: asyncpg.Pool,
    *,
    count: int | None = None,
) -> schemas.RetrieveResponse:
    """
    Fetch up to `count` live jokes and upsert them in one transaction.
    """
    requested = clamp_count(count)
    jokes = await aggregator.get_multiple_jokes(requested)
    saved = await repository.upsert_batch(pool, jokes)

    logger.info(
        "jokes_retrieved requested=%s fetched=%s saved=%s",
        requested,
        len(jokes),
        len(saved),
    )
    summaries = [
        schemas.JokeSummary(
            id=row.id,
            category=row.category,
            type=row.kind,
            provider=row.provider,
        )
        for row in saved
    ]
    return schemas.RetrieveResponse(jokes=summaries, saved_count=len(summaries))


def _to_detail(stored: repository.StoredJoke) -> schemas.JokeDetail:
    return schemas.JokeDetail(
        id=stored.id,
        category=stored.category,
        type=stored.kind,
        content=schemas.JokeContentOut.from_content(stored.content),
        safe=stored.safe,
        lang=stored.lang,
        provider=stored.provider,
    )


async def random_stored_joke(pool: asyncpg.Pool) -> schemas.RandomJokeResponse:
    stored = await repository.fetch_random_joke(pool)
    return schemas.RandomJokeResponse(joke=_to_detail(stored))


async def list_stored_jokes(
    pool: asyncpg.Pool,
    *,
    category: str | None = None,
    kind: str | None = None,
    provider: str | None = None,
    safe: bool | None = None,
    limit: int = repository.DEFAULT_LIST_LIMIT,
    offset: int = 0,
) -> schemas.JokeListResponse:
    rows = await repository.list_jokes(
        pool,
        category=category,
        kind=kind,
        provider=provider,
        safe=safe,
        limit=limit,
        offset=offset,
    )
    return schemas.JokeListResponse(
        jokes=[_to_detail(row) for row in rows],
        count=len(rows),
        limit=limit,
        offset=offset,
    )


def to_live_response(item: JokeWithSource) -> schemas.LiveJokeResponse:
    joke = item.joke
    return schemas.LiveJokeResponse(
        joke=schemas.LiveJoke(
            external_id=joke.source_id,
            category=joke.category,
            type=joke.kind.value,
            content=schemas.JokeContentOut.from_content(joke.content),
            safe=joke.safe,
            lang=joke.lang,
            provider=item.provider,
        )
    )


async def live_random_joke(aggregator: JokeAggregator) -> schemas.LiveJokeResponse:
    return to_live_response(await aggregator.get_random_joke())


async def live_joke_by_category(aggregator: JokeAggregator, category: str) -> schemas.LiveJokeResponse:
    return to_live_response(await aggregator.get_joke_by_category(category))


async def live_joke_from_provider(aggregator: JokeAggregator, name: str) -> schemas.LiveJokeResponse:
    return to_live_response(await aggregator.get_joke_from_provider(name))
