"""
Provider selection and best-effort batch fetching.

Selection policy:
- random:   uniform over all providers
- named:    first provider whose name contains the fragment (case-insensitive)
- category: uniform over providers with a matching category, otherwise random
            over the whole pool (the category request is dropped)
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Iterable, Sequence

from core.errors import NoProvidersError, NotFoundError, ProviderError

from .base import JokeProvider
from .types import JokeWithSource, ProviderInfo

DEFAULT_CONCURRENCY = 10

logger = logging.getLogger(__name__)


class JokeAggregator:
    def __init__(
        self,
        providers: Iterable[JokeProvider],
        *,
        rng: random.Random | None = None,
        concurrency: int = DEFAULT_CONCURRENCY,
    ) -> None:
        self._providers: tuple[JokeProvider, ...] = tuple(providers)
        self._rng = rng or random.Random()
        self._concurrency = max(1, concurrency)

    @property
    def providers(self) -> tuple[JokeProvider, ...]:
        return self._providers

    def _choose(self, providers: Sequence[JokeProvider]) -> JokeProvider:
        return providers[self._rng.randrange(len(providers))]

    async def get_random_joke(self) -> JokeWithSource:
        if not self._providers:
            raise NoProvidersError("No providers available.")

        provider = self._choose(self._providers)
        joke = await provider.get_random_joke()
        return JokeWithSource(joke=joke, provider=provider.base_url)

    async def get_joke_from_provider(self, name_fragment: str) -> JokeWithSource:
        needle = (name_fragment or "").lower()
        provider = next((p for p in self._providers if needle in p.name.lower()), None)
        if provider is None:
            raise NotFoundError(f"Provider '{name_fragment}' not found.")

        joke = await provider.get_random_joke()
        return JokeWithSource(joke=joke, provider=provider.base_url)

    async def get_joke_by_category(self, category: str) -> JokeWithSource:
        needle = (category or "").lower()
        matching = [
            p
            for p in self._providers
            if any(needle in cat.lower() for cat in p.get_supported_categories())
        ]
        if not matching:
            logger.info("category_fallback category=%s", category)
            return await self.get_random_joke()

        provider = self._choose(matching)
        joke = await provider.get_joke_by_category(category)
        return JokeWithSource(joke=joke, provider=provider.base_url)

    async def get_multiple_jokes(self, count: int) -> list[JokeWithSource]:
        """
        Call `get_random_joke()` exactly `count` times and keep what succeeded.

        Per-item provider failures are logged and skipped; the result can be
        shorter than `count` (or empty). Cancellation still propagates.
        """
        if count <= 0:
            return []

        semaphore = asyncio.Semaphore(self._concurrency)

        async def fetch_one(index: int) -> JokeWithSource | None:
            async with semaphore:
                try:
                    return await self.get_random_joke()
                except (ProviderError, NoProvidersError) as e:
                    logger.warning("joke_fetch_failed index=%s error=%s", index, e.message)
                    return None

        results = await asyncio.gather(*(fetch_one(i) for i in range(count)))
        jokes = [r for r in results if r is not None]
        logger.info("joke_batch_fetched requested=%s fetched=%s", count, len(jokes))
        return jokes

    def get_providers(self) -> tuple[ProviderInfo, ...]:
        return tuple(p.info() for p in self._providers)

    def get_all_categories(self) -> list[str]:
        categories: set[str] = set()
        for provider in self._providers:
            categories.update(provider.get_supported_categories())
        return sorted(categories)
