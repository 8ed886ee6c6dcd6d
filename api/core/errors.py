"""
Error taxonomy shared by providers, the aggregator and persistence.

Each error keeps the original exception in `source` so handlers can log it
without leaking it into HTTP responses.
"""

from __future__ import annotations


class JokeServiceError(RuntimeError):
    def __init__(self, message: str, source: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.source = source


# Upstream network/HTTP/parse failure.
class ProviderError(JokeServiceError):
    pass


class NoProvidersError(JokeServiceError):
    pass


# No provider, category or stored row matched.
class NotFoundError(JokeServiceError):
    pass


# Connection, query or transaction failure.
class DatabaseError(JokeServiceError):
    pass
