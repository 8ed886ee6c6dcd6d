"""
Test doubles: an in-memory stand-in for the asyncpg pool and fake providers.
"""

from __future__ import annotations

import asyncio
import copy
import itertools
import json
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import Any
from uuid import uuid4

from core.errors import ProviderError
from providers.base import JokeProvider
from providers.types import Joke

_EPOCH = datetime(2025, 1, 1, 12, 0, 0)


class FakeJokesTable:
    """
    Applies the repository's multi-row upsert to a dict keyed like the
    real unique constraint (NULL external_ids never collide).
    """

    def __init__(self) -> None:
        self.rows: dict[Any, dict[str, Any]] = {}
        self._clock = itertools.count(1)

    def _now(self) -> datetime:
        return _EPOCH + timedelta(seconds=next(self._clock))

    def upsert(self, args: tuple[Any, ...]) -> list[dict[str, Any]]:
        returned = []
        for i in range(0, len(args), 7):
            external_id, joke, category, kind, safe, lang, provider = args[i : i + 7]
            key = (external_id, provider) if external_id is not None else object()
            now = self._now()
            row = self.rows.get(key)
            if row is None:
                row = {
                    "id": uuid4(),
                    "external_id": external_id,
                    "provider": provider,
                    "created_at": now,
                }
                self.rows[key] = row
            row.update(
                {
                    "joke": joke,
                    "category": category,
                    "type": kind,
                    "safe": safe,
                    "lang": lang,
                    "updated_at": now,
                }
            )
            returned.append(dict(row))
        return returned

    def find(self, external_id: str, provider: str) -> dict[str, Any] | None:
        return self.rows.get((external_id, provider))


class FakeConnection:
    def __init__(self, pool: FakePool) -> None:
        self._pool = pool

    @asynccontextmanager
    async def transaction(self):
        snapshot = copy.deepcopy(self._pool.table.rows)
        self._pool.transactions += 1
        try:
            yield
        except BaseException:
            self._pool.table.rows = snapshot
            self._pool.rollbacks += 1
            raise
        self._pool.commits += 1

    async def fetch(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        self._pool.statements.append((sql, args))
        if self._pool.fail_with is not None:
            # Apply first so the rollback is observable.
            self._pool.table.upsert(args)
            raise self._pool.fail_with
        return self._pool.table.upsert(args)


class FakePool:
    def __init__(self, *, table: FakeJokesTable | None = None) -> None:
        self.table = table or FakeJokesTable()
        self.statements: list[tuple[str, tuple[Any, ...]]] = []
        self.acquired = 0
        self.transactions = 0
        self.commits = 0
        self.rollbacks = 0
        self.fail_with: BaseException | None = None
        # Canned results for pool-level fetchrow/fetch.
        self.fetchrow_result: dict[str, Any] | None = None
        self.fetch_result: list[dict[str, Any]] = []
        self.closed = False

    @asynccontextmanager
    async def acquire(self):
        self.acquired += 1
        yield FakeConnection(self)

    async def close(self) -> None:
        self.closed = True

    async def fetchrow(self, sql: str, *args: Any) -> dict[str, Any] | None:
        self.statements.append((sql, args))
        if self.fail_with is not None:
            raise self.fail_with
        return self.fetchrow_result

    async def fetch(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        self.statements.append((sql, args))
        if self.fail_with is not None:
            raise self.fail_with
        return self.fetch_result


def stored_row(**overrides: Any) -> dict[str, Any]:
    row = {
        "id": uuid4(),
        "external_id": "42",
        "joke": json.dumps({"content": "A stored joke.", "setup": None, "punchline": None}),
        "category": "pun",
        "type": "single",
        "safe": True,
        "lang": "en",
        "provider": "https://v2.jokeapi.dev",
    }
    row.update(overrides)
    return row


class FakeProvider(JokeProvider):
    def __init__(
        self,
        name: str,
        base_url: str,
        *,
        categories: tuple[str, ...] = (),
        fail: bool = False,
        delay: float = 0.0,
        id_cycle: int | None = None,
    ) -> None:
        super().__init__(client=None)
        self.name = name
        self.base_url = base_url
        self.categories = frozenset(categories)
        self.fail = fail
        self.delay = delay
        # Hand out ids modulo this to simulate upstream repeats.
        self.id_cycle = id_cycle
        self.calls = 0
        self.category_calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def fetch_random_joke(self) -> Joke:
        self.calls += 1
        n = self.calls
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if self.fail:
                raise ProviderError(f"{self.name} is down")
            source_id = n % self.id_cycle if self.id_cycle else n
            return Joke.single(f"joke {n} from {self.name}", source_id=str(source_id))
        finally:
            self.in_flight -= 1

    async def get_joke_by_category(self, category: str) -> Joke:
        self.category_calls.append(category)
        return await self.get_random_joke()
