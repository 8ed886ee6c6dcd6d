"""
JokeAPI (https://v2.jokeapi.dev).

Payload:
- single:  {"type": "single", "joke": "...", "category": "Pun", "id": 12, "safe": true, "lang": "en"}
- twopart: {"type": "twopart", "setup": "...", "delivery": "...", ...}
- failure: {"error": true, "message": "..."}
"""

from __future__ import annotations

from typing import Any, ClassVar

from core.errors import ProviderError

from .base import JokeProvider, httpx_error_handler, require_dict
from .types import Joke


def parse_jokeapi_payload(data: Any) -> Joke:
    data = require_dict(data)
    if data.get("error") is True:
        raise ProviderError(f"JokeAPI error: {data.get('message') or 'no reason given'}")

    common = {
        "source_id": data.get("id"),
        "category": data.get("category"),
        "safe": data.get("safe"),
        "lang": data.get("lang"),
    }
    if data.get("type") == "single":
        return Joke.single(data.get("joke"), **common)
    return Joke.twopart(data.get("setup"), data.get("delivery"), **common)


class JokeApiProvider(JokeProvider):
    name = "JokesAPI (jokeapi.dev)"
    base_url = "https://v2.jokeapi.dev"
    categories = frozenset({"any", "miscellaneous", "programming", "dark", "pun", "spooky", "christmas"})

    default_category: ClassVar[str] = "Any"
    query: ClassVar[str] = "safe-mode"

    def _path(self, category: str) -> str:
        return f"/joke/{category}?{self.query}"

    @httpx_error_handler
    async def fetch_random_joke(self) -> Joke:
        data = await self._get_json(self._path(self.default_category))
        return parse_jokeapi_payload(data)

    @httpx_error_handler
    async def get_joke_by_category(self, category: str) -> Joke:
        # The API takes capitalized names ("Programming"); unknown ones become "Any".
        requested = (category or "").strip().lower()
        upstream = requested.capitalize() if self.supports_category(requested) else self.default_category
        data = await self._get_json(self._path(upstream))
        return parse_jokeapi_payload(data)
