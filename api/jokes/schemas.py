"""
Jokes API schemas (response models).
"""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel

from providers.types import JokeContent


class JokeSummary(BaseModel):
    id: UUID
    category: str | None
    type: str
    provider: str


class RetrieveResponse(BaseModel):
    jokes: list[JokeSummary]
    saved_count: int


class JokeContentOut(BaseModel):
    content: str | None = None
    setup: str | None = None
    punchline: str | None = None

    @classmethod
    def from_content(cls, content: JokeContent) -> JokeContentOut:
        return cls(**content.to_dict())


class JokeDetail(BaseModel):
    id: UUID
    category: str | None
    type: str
    content: JokeContentOut
    safe: bool
    lang: str
    provider: str


class RandomJokeResponse(BaseModel):
    joke: JokeDetail


class JokeListResponse(BaseModel):
    jokes: list[JokeDetail]
    count: int
    limit: int
    offset: int


class LiveJoke(BaseModel):
    # Upstream id; live jokes have no database id yet.
    external_id: str | None
    category: str | None
    type: str
    content: JokeContentOut
    safe: bool | None
    lang: str | None
    provider: str


class LiveJokeResponse(BaseModel):
    joke: LiveJoke


class ErrorResponse(BaseModel):
    error: str
