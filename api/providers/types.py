"""
Canonical joke model shared by every provider.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from core.errors import ProviderError


class JokeKind(str, Enum):
    SINGLE = "single"
    TWOPART = "twopart"


def _clean(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True)
class JokeContent:
    """
    Either `text` (single) or `setup` + `punchline` (twopart), never both.

    Serialized as {"content", "setup", "punchline"}; `text` goes under "content".
    """

    text: str | None = None
    setup: str | None = None
    punchline: str | None = None

    @classmethod
    def single(cls, text: Any) -> JokeContent:
        cleaned = _clean(text)
        if cleaned is None:
            raise ProviderError("Single joke has no text.")
        return cls(text=cleaned)

    @classmethod
    def twopart(cls, setup: Any, punchline: Any) -> JokeContent:
        cleaned_setup = _clean(setup)
        cleaned_punchline = _clean(punchline)
        if cleaned_setup is None or cleaned_punchline is None:
            raise ProviderError("Two-part joke is missing its setup or punchline.")
        return cls(setup=cleaned_setup, punchline=cleaned_punchline)

    @classmethod
    def from_dict(cls, data: Any) -> JokeContent:
        if not isinstance(data, dict):
            raise ValueError("Joke content must be a JSON object.")
        for key in ("content", "setup", "punchline"):
            if not isinstance(data.get(key), (str, type(None))):
                raise ValueError(f"Joke content field '{key}' must be a string or null.")
        return cls(
            text=data.get("content"),
            setup=data.get("setup"),
            punchline=data.get("punchline"),
        )

    @property
    def kind(self) -> JokeKind:
        return JokeKind.SINGLE if self.text is not None else JokeKind.TWOPART

    def to_dict(self) -> dict[str, str | None]:
        return {
            "content": self.text,
            "setup": self.setup,
            "punchline": self.punchline,
        }


@dataclass(frozen=True)
class Joke:
    content: JokeContent
    kind: JokeKind
    source_id: str | None = None
    category: str | None = None
    safe: bool | None = None
    lang: str | None = None

    @classmethod
    def single(
        cls,
        text: Any,
        *,
        source_id: Any = None,
        category: Any = None,
        safe: Any = None,
        lang: Any = None,
    ) -> Joke:
        return cls(
            content=JokeContent.single(text),
            kind=JokeKind.SINGLE,
            source_id=normalize_source_id(source_id),
            category=normalize_category(category),
            safe=safe if isinstance(safe, bool) else None,
            lang=_clean(lang),
        )

    @classmethod
    def twopart(
        cls,
        setup: Any,
        punchline: Any,
        *,
        source_id: Any = None,
        category: Any = None,
        safe: Any = None,
        lang: Any = None,
    ) -> Joke:
        return cls(
            content=JokeContent.twopart(setup, punchline),
            kind=JokeKind.TWOPART,
            source_id=normalize_source_id(source_id),
            category=normalize_category(category),
            safe=safe if isinstance(safe, bool) else None,
            lang=_clean(lang),
        )


@dataclass(frozen=True)
class JokeWithSource:
    joke: Joke
    # Provider base URL.
    provider: str


@dataclass(frozen=True)
class ProviderInfo:
    name: str
    base_url: str
    categories: frozenset[str]


def normalize_category(value: Any) -> str | None:
    cleaned = _clean(value)
    return cleaned.lower() if cleaned is not None else None


def normalize_source_id(value: Any) -> str | None:
    # Upstream ids are ints or strings; bools are never ids.
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    return _clean(value)
