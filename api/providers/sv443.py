"""
Sv443 JokeAPI mirror. Same payload shape as jokeapi.dev, different host and
category list.
"""

from __future__ import annotations

from .jokeapi import JokeApiProvider


class Sv443JokeProvider(JokeApiProvider):
    name = "Sv443 JokeAPI"
    base_url = "https://sv443.net/jokeapi/v2"
    categories = frozenset({"programming", "miscellaneous", "dark", "pun", "spooky", "christmas"})

    query = "safe-mode&type=single,twopart"
