from __future__ import annotations

from typing import Optional

import redis.asyncio as redis

from packages.mis_session.repository import KeyedStore


class RedisKeyedStore(KeyedStore):
    """Redis-backed snapshot store (async client)."""

    def __init__(
        self,
        host: str = "localhost",
        port: int = 6379,
        ttl_sec: Optional[int] = None,
        client: Optional[redis.Redis] = None
    ):
        self.client = client or redis.Redis(host=host, port=port, decode_responses=True)
        self.ttl_sec = ttl_sec

    async def save(self, key: str, value: str) -> None:
        await self.client.set(key, value, ex=self.ttl_sec)

    async def load(self, key: str) -> Optional[str]:
        return await self.client.get(key)

    async def delete(self, key: str) -> None:
        await self.client.delete(key)

    async def close(self) -> None:
        await self.client.aclose()
