"""
icanhazdadjoke (https://icanhazdadjoke.com).

Returns {"id": "R7UfaahVfFd", "joke": "...", "status": 200} when asked for JSON.
No category support; upstream failures degrade to a built-in joke.
"""

from __future__ import annotations

from .base import JokeProvider, httpx_error_handler, require_dict
from .types import Joke

DAD_JOKES_CATEGORY = "dad jokes"


class DadJokesProvider(JokeProvider):
    name = "icanhazdadjoke"
    base_url = "https://icanhazdadjoke.com"
    categories = frozenset({DAD_JOKES_CATEGORY})

    fallback_joke = Joke.single(
        "I'm afraid for the calendar. Its days are numbered.",
        source_id="fallback",
        category=DAD_JOKES_CATEGORY,
    )

    @httpx_error_handler
    async def fetch_random_joke(self) -> Joke:
        data = require_dict(await self._get_json("/", headers={"Accept": "application/json"}))
        return Joke.single(
            data.get("joke"),
            source_id=data.get("id"),
            category=DAD_JOKES_CATEGORY,
        )
