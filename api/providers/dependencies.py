"""
FastAPI dependencies for the provider aggregator.
"""

from __future__ import annotations

from fastapi import Request

from core.errors import NoProvidersError

from .aggregator import JokeAggregator


def get_aggregator(request: Request) -> JokeAggregator:
    aggregator = getattr(request.app.state, "aggregator", None)
    if aggregator is None:
        raise NoProvidersError("Joke aggregator is not initialized.")
    return aggregator
