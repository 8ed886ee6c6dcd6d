"""
Jokes One joke-of-the-day (https://api.jokes.one/jod).

The free tier is rate limited hard, so upstream failures degrade to a
built-in joke instead of failing the request.
"""

from __future__ import annotations

from typing import Any

import httpx

from .base import JokeProvider, httpx_error_handler, require_dict
from .types import Joke

API_KEY_HEADER = "X-JokesOne-Api-Secret"


def _first(value: Any) -> Any:
    if isinstance(value, list):
        return value[0] if value else None
    return value


def _extract_joke(data: dict[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
    """
    Returns (joke, envelope).

    Seen shapes:
    - {"joke": {...}} or {"joke": [{...}]}
    - {"contents": {"jokes": [{"category": "jod", "joke": {...}}]}}
    """
    direct = _first(data.get("joke"))
    if isinstance(direct, dict):
        return direct, {}

    contents = require_dict(data.get("contents"))
    envelope = require_dict(_first(contents.get("jokes")))
    return require_dict(envelope.get("joke")), envelope


class JokesOneProvider(JokeProvider):
    name = "Jokes One API"
    base_url = "https://api.jokes.one"
    categories = frozenset({"general", "dad", "programming", "science"})

    fallback_joke = Joke.single(
        "Why don't scientists trust atoms? Because they make up everything!",
        source_id="fallback",
        category="science",
    )

    def __init__(self, client: httpx.AsyncClient, api_key: str | None = None) -> None:
        super().__init__(client)
        self._api_key = api_key

    @httpx_error_handler
    async def fetch_random_joke(self) -> Joke:
        headers = {API_KEY_HEADER: self._api_key} if self._api_key else None
        data = require_dict(await self._get_json("/jod", headers=headers))

        joke, envelope = _extract_joke(data)
        return Joke.single(
            joke.get("text"),
            source_id=joke.get("id"),
            category=joke.get("category") or "general",
            lang=joke.get("lang") or envelope.get("language"),
        )
