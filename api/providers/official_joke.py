"""
Official Joke API (https://official-joke-api.appspot.com).

Always two-part: {"id": 42, "type": "general", "setup": "...", "punchline": "..."}.
The per-category endpoint returns a one-element array.
"""

from __future__ import annotations

from typing import Any

from .base import JokeProvider, httpx_error_handler, require_dict
from .types import Joke


def _parse(data: Any) -> Joke:
    data = require_dict(data)
    return Joke.twopart(
        data.get("setup"),
        data.get("punchline"),
        source_id=data.get("id"),
        category=data.get("type"),
    )


class OfficialJokeProvider(JokeProvider):
    name = "Official Joke API"
    base_url = "https://official-joke-api.appspot.com"
    categories = frozenset({"general", "programming", "knock-knock", "dad"})

    default_category = "general"

    @httpx_error_handler
    async def fetch_random_joke(self) -> Joke:
        return _parse(await self._get_json("/random_joke"))

    @httpx_error_handler
    async def get_joke_by_category(self, category: str) -> Joke:
        requested = (category or "").strip().lower()
        upstream = requested if self.supports_category(requested) else self.default_category

        data = await self._get_json(f"/jokes/{upstream}/random")
        if isinstance(data, list):
            data = data[0]
        return _parse(data)
