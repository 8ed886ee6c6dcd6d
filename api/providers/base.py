"""
Provider adapter contract.

Each upstream joke API gets one `JokeProvider` subclass that owns the mapping
from its JSON shape to the canonical `Joke`. Subclasses implement
`fetch_random_joke()` and optionally override `get_joke_by_category()`.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from functools import wraps
from typing import Any, ClassVar

import httpx

from core.errors import ProviderError
from core.http import body_snippet

from .types import Joke, ProviderInfo

logger = logging.getLogger(__name__)


def httpx_error_handler(func):
    """
    Map every failure of an upstream call to `ProviderError`.
    """

    @wraps(func)
    async def wrapper(self: JokeProvider, *args, **kwargs):
        try:
            return await func(self, *args, **kwargs)
        # Propagate already handled exception
        except ProviderError:
            raise
        except httpx.TimeoutException as e:
            raise ProviderError(f"{self.name}: request timed out", e) from e
        except httpx.HTTPStatusError as e:
            logger.debug("provider_http_error provider=%s body=%s", self.name, body_snippet(e.response))
            raise ProviderError(
                f"{self.name}: request failed with status {e.response.status_code}",
                e,
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(f"{self.name}: connection error ({e.__class__.__name__})", e) from e
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ProviderError(f"{self.name}: unexpected response payload", e) from e
        except Exception as e:
            raise ProviderError(f"{self.name}: an unexpected error occurred", e) from e

    return wrapper


class JokeProvider(ABC):
    name: ClassVar[str]
    base_url: ClassVar[str]
    categories: ClassVar[frozenset[str]] = frozenset()

    # When set, upstream failures degrade to this joke instead of raising.
    fallback_joke: ClassVar[Joke | None] = None

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(base_url={self.base_url!r})"

    @abstractmethod
    async def fetch_random_joke(self) -> Joke:
        """One upstream call, mapped to a canonical joke."""

    async def get_random_joke(self) -> Joke:
        try:
            return await self.fetch_random_joke()
        except ProviderError as e:
            if self.fallback_joke is None:
                raise
            logger.warning("provider_fallback provider=%s error=%s", self.name, e.message)
            return self.fallback_joke

    async def get_joke_by_category(self, category: str) -> Joke:
        # Providers without category support ignore the request.
        return await self.get_random_joke()

    def get_supported_categories(self) -> frozenset[str]:
        return self.categories

    def supports_category(self, category: str) -> bool:
        return (category or "").strip().lower() in self.categories

    def info(self) -> ProviderInfo:
        return ProviderInfo(
            name=self.name,
            base_url=self.base_url,
            categories=self.get_supported_categories(),
        )

    async def _get_json(
        self,
        path: str,
        *,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        resp = await self._client.get(f"{self.base_url}{path}", params=params, headers=headers)
        resp.raise_for_status()
        return resp.json()


def require_dict(data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}.")
    return data
