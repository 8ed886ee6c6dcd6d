"""
FastAPI router for joke endpoints.
"""

from __future__ import annotations

import asyncpg
from fastapi import APIRouter, Depends, Query

from core.db import get_pool
from providers.aggregator import JokeAggregator
from providers.dependencies import get_aggregator
from providers.types import JokeKind

from . import repository, schemas, service

router = APIRouter(prefix="/jokes")

ERROR_RESPONSES = {
    404: {"model": schemas.ErrorResponse},
    500: {"model": schemas.ErrorResponse},
}


@router.get("/retrieve", response_model=schemas.RetrieveResponse, responses=ERROR_RESPONSES)
async def retrieve_jokes(
    count: int | None = Query(default=None, description="Jokes to fetch (default 100, clamped to 0..100)"),
    aggregator: JokeAggregator = Depends(get_aggregator),
    pool: asyncpg.Pool = Depends(get_pool),
) -> schemas.RetrieveResponse:
    """
    Fetch a best-effort batch from live providers and upsert it.

    `saved_count` can be lower than `count`: failed upstream calls are skipped
    and duplicates within the batch are collapsed.
    """
    return await service.retrieve_jokes(aggregator, pool, count=count)


@router.get("/random", response_model=schemas.RandomJokeResponse, responses=ERROR_RESPONSES)
async def random_joke(pool: asyncpg.Pool = Depends(get_pool)) -> schemas.RandomJokeResponse:
    """
    One stored joke, picked at random. Never calls providers.
    """
    return await service.random_stored_joke(pool)


@router.get("", response_model=schemas.JokeListResponse, responses=ERROR_RESPONSES)
async def list_jokes(
    category: str | None = Query(default=None, max_length=255),
    kind: JokeKind | None = Query(default=None, alias="type"),
    provider: str | None = Query(default=None, max_length=255),
    safe: bool | None = Query(default=None),
    limit: int = Query(default=repository.DEFAULT_LIST_LIMIT, ge=1, le=repository.MAX_LIST_LIMIT),
    offset: int = Query(default=0, ge=0),
    pool: asyncpg.Pool = Depends(get_pool),
) -> schemas.JokeListResponse:
    """
    Stored jokes, newest first, filtered by category, type, provider and safety.
    """
    return await service.list_stored_jokes(
        pool,
        category=category,
        kind=kind.value if kind is not None else None,
        provider=provider,
        safe=safe,
        limit=limit,
        offset=offset,
    )


@router.get("/stats")
async def stats(pool: asyncpg.Pool = Depends(get_pool)) -> dict:
    return await repository.joke_stats(pool)


@router.get("/stats/providers")
async def provider_stats(
    provider: str | None = Query(default=None, max_length=255),
    pool: asyncpg.Pool = Depends(get_pool),
) -> dict:
    rows = await repository.joke_counts_by_provider(pool, provider=provider)
    return {"providers": rows, "count": len(rows)}


@router.get("/live/random", response_model=schemas.LiveJokeResponse)
async def live_random(aggregator: JokeAggregator = Depends(get_aggregator)) -> schemas.LiveJokeResponse:
    return await service.live_random_joke(aggregator)


@router.get("/live/category/{category}", response_model=schemas.LiveJokeResponse)
async def live_by_category(
    category: str,
    aggregator: JokeAggregator = Depends(get_aggregator),
) -> schemas.LiveJokeResponse:
    """
    Unknown categories fall back to a random joke from any provider.
    """
    return await service.live_joke_by_category(aggregator, category)


@router.get("/live/provider/{name}", response_model=schemas.LiveJokeResponse, responses=ERROR_RESPONSES)
async def live_from_provider(
    name: str,
    aggregator: JokeAggregator = Depends(get_aggregator),
) -> schemas.LiveJokeResponse:
    return await service.live_joke_from_provider(aggregator, name)
