"""
Upstream joke providers and the aggregator that picks between them.
"""

from __future__ import annotations

import httpx

from .base import JokeProvider
from .chucknorris import ChuckNorrisProvider
from .dadjokes import DadJokesProvider
from .jokeapi import JokeApiProvider
from .jokes_one import JokesOneProvider
from .official_joke import OfficialJokeProvider
from .sv443 import Sv443JokeProvider

__all__ = (
    "ChuckNorrisProvider",
    "DadJokesProvider",
    "JokeApiProvider",
    "JokeProvider",
    "JokesOneProvider",
    "OfficialJokeProvider",
    "Sv443JokeProvider",
    "build_providers",
)


def build_providers(client: httpx.AsyncClient, *, jokes_one_api_key: str | None = None) -> tuple[JokeProvider, ...]:
    """
    The full provider set, in a fixed order. Built once at startup.
    """
    return (
        JokeApiProvider(client),
        DadJokesProvider(client),
        ChuckNorrisProvider(client),
        OfficialJokeProvider(client),
        Sv443JokeProvider(client),
        JokesOneProvider(client, api_key=jokes_one_api_key),
    )
