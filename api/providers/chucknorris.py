"""
Chuck Norris facts (https://api.chucknorris.io).
"""

from __future__ import annotations

from typing import Any

from .base import JokeProvider, httpx_error_handler, require_dict
from .types import Joke


def _first_category(data: dict[str, Any], default: str) -> str:
    categories = data.get("categories")
    if isinstance(categories, list) and categories and isinstance(categories[0], str):
        return categories[0]
    return default


class ChuckNorrisProvider(JokeProvider):
    name = "Chuck Norris Jokes API"
    base_url = "https://api.chucknorris.io"
    categories = frozenset(
        {
            "animal",
            "career",
            "celebrity",
            "dev",
            "explicit",
            "fashion",
            "food",
            "history",
            "money",
            "movie",
            "music",
            "political",
            "religion",
            "science",
            "sport",
            "travel",
        }
    )

    @httpx_error_handler
    async def fetch_random_joke(self) -> Joke:
        data = require_dict(await self._get_json("/jokes/random"))
        return Joke.single(
            data.get("value"),
            source_id=data.get("id"),
            category=_first_category(data, "uncategorized"),
        )

    @httpx_error_handler
    async def get_joke_by_category(self, category: str) -> Joke:
        requested = (category or "").strip().lower()
        if not self.supports_category(requested):
            return await self.get_random_joke()

        data = require_dict(await self._get_json("/jokes/random", params={"category": requested}))
        return Joke.single(
            data.get("value"),
            source_id=data.get("id"),
            category=_first_category(data, requested),
        )
