"""Token storage backends: in-memory for tests/dev, Redis for the bot process."""

import logging
from typing import Protocol

import redis.asyncio as aioredis

logger = logging.getLogger(__name__)


class TokenStore(Protocol):
    async def save(self, token: str) -> None: ...

    async def get(self) -> str | None: ...

    async def clear(self) -> None: ...


class InMemoryTokenStore:
    """Keeps the token for the lifetime of the process."""

    def __init__(self) -> None:
        self._token: str | None = None

    async def save(self, token: str) -> None:
        self._token = token

    async def get(self) -> str | None:
        return self._token

    async def clear(self) -> None:
        self._token = None


class RedisTokenStore:
    """Stores the auth token under a single Redis key."""

    def __init__(self, redis: aioredis.Redis, key: str = "auth:token", ttl: int | None = None):
        self._redis = redis
        self._key = key
        self._ttl = ttl

    @classmethod
    def from_url(cls, url: str, key: str = "auth:token") -> "RedisTokenStore":
        return cls(aioredis.from_url(url, decode_responses=True), key=key)

    async def save(self, token: str) -> None:
        await self._redis.set(self._key, token, ex=self._ttl)
        logger.debug("Token saved under %s", self._key)

    async def get(self) -> str | None:
        return await self._redis.get(self._key)

    async def clear(self) -> None:
        await self._redis.delete(self._key)
