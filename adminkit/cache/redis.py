"""
Cache Redis (redis.asyncio).

Valores são serializados em JSON. Remoção por prefixo usa SCAN
(nunca KEYS) para não bloquear o servidor.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from adminkit.cache.base import CacheManager, DEFAULT_EXPIRATION
from adminkit.exceptions import MissingDependency

logger = logging.getLogger("adminkit.cache")


class RedisCache(CacheManager):
    """
    Exemplo:
        cache = RedisCache("redis://localhost:6379/0")
        await cache.set("k", {"a": 1}, ttl=60)
    """

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        *,
        max_connections: int = 10,
        socket_timeout: float = 5.0,
        client: Any = None,
        scan_count: int = 100,
    ) -> None:
        self._url = url
        self._max_connections = max_connections
        self._socket_timeout = socket_timeout
        self._client = client
        self._scan_count = scan_count

    @property
    def client(self) -> Any:
        if self._client is None:
            try:
                import redis.asyncio as aioredis  # type: ignore[import-untyped]
            except ImportError as e:
                raise MissingDependency("redis", "Redis cache backend") from e

            self._client = aioredis.from_url(
                self._url,
                max_connections=self._max_connections,
                socket_timeout=self._socket_timeout,
                decode_responses=True,
            )
            logger.info("Redis cache client created for %s", self._url)
        return self._client

    async def get(self, key: str) -> Any | None:
        raw = await self.client.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    async def set(self, key: str, value: Any, ttl: int = DEFAULT_EXPIRATION) -> None:
        payload = json.dumps(value, default=str)
        if ttl > 0:
            await self.client.set(key, payload, ex=ttl)
        else:
            await self.client.set(key, payload)

    async def delete(self, key: str) -> None:
        await self.client.delete(key)

    async def exists(self, key: str) -> bool:
        return bool(await self.client.exists(key))

    async def delete_by_prefix(self, prefix: str) -> int:
        deleted = 0
        batch: list[str] = []
        match = f"{escape_glob(prefix)}*"
        async for key in self.client.scan_iter(match=match, count=self._scan_count):
            batch.append(key)
            if len(batch) >= self._scan_count:
                deleted += await self.client.delete(*batch)
                batch = []
        if batch:
            deleted += await self.client.delete(*batch)
        return deleted

    async def flush(self) -> None:
        await self.client.flushdb()

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


# Metacaracteres do glob de MATCH/KEYS do Redis
GLOB_SPECIAL = frozenset("\\*?[]")


def escape_glob(value: str) -> str:
    """Escapa `value` para ser casado literalmente num padrão MATCH."""
    return "".join(f"\\{ch}" if ch in GLOB_SPECIAL else ch for ch in value)
