"""Cache em memória do processo, com TTL e protegido por lock."""

from __future__ import annotations

import copy
import threading
import time
from typing import Any

from adminkit.cache.base import CacheManager, DEFAULT_EXPIRATION


class MemoryCache(CacheManager):
    """
    Cache local (dev, testes, instância única).

    Seguro para acesso concorrente: todo acesso ao dict passa pelo lock.
    Valores são copiados na entrada e na saída, então mutar um valor
    retornado não altera o cache.
    """

    def __init__(self, clock: Any = time.monotonic) -> None:
        self._data: dict[str, tuple[Any, float | None]] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def _alive(self, key: str) -> tuple[Any, float | None] | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        _, expires_at = entry
        if expires_at is not None and expires_at <= self._clock():
            del self._data[key]
            return None
        return entry

    async def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._alive(key)
            if entry is None:
                return None
            return copy.deepcopy(entry[0])

    async def set(self, key: str, value: Any, ttl: int = DEFAULT_EXPIRATION) -> None:
        expires_at = self._clock() + ttl if ttl > 0 else None
        stored = copy.deepcopy(value)
        with self._lock:
            self._data[key] = (stored, expires_at)

    async def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    async def exists(self, key: str) -> bool:
        with self._lock:
            return self._alive(key) is not None

    async def delete_by_prefix(self, prefix: str) -> int:
        with self._lock:
            keys = [k for k in self._data if k.startswith(prefix)]
            for k in keys:
                del self._data[k]
            return len(keys)

    async def flush(self) -> None:
        with self._lock:
            self._data.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)
