"""Expiring cache for the CMS API auth token."""

import time
from typing import Callable


class TokenCache:
    """Holds one bearer token until its time-to-live runs out.

    Owned by a single client instance; nothing is shared between clients.

    Args:
        ttl: Seconds a stored token stays valid.
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(self, ttl: float = 600.0, clock: Callable[[], float] = time.monotonic):
        self._ttl = ttl
        self._clock = clock
        self._token: str | None = None
        self._expires_at = 0.0

    def get(self) -> str | None:
        """Return the cached token, or None once it has expired."""
        if self._token is None or self._clock() >= self._expires_at:
            return None
        return self._token

    def store(self, token: str) -> None:
        self._token = token
        self._expires_at = self._clock() + self._ttl

    def invalidate(self) -> None:
        self._token = None
        self._expires_at = 0.0
