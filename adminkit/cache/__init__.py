"""
Cache do adminkit.

    from adminkit.cache import create_cache_manager

    cache = create_cache_manager(settings)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from adminkit.cache.base import (
    CacheManager,
    DEFAULT_EXPIRATION,
    LONG_EXPIRATION,
    NEVER_EXPIRE,
    SHORT_EXPIRATION,
)
from adminkit.cache.memory import MemoryCache
from adminkit.cache.redis import RedisCache

if TYPE_CHECKING:
    from adminkit.config import Settings


def create_cache_manager(settings: "Settings") -> CacheManager:
    """Instancia o backend configurado em settings.cache_backend."""
    if settings.cache_backend == "redis":
        return RedisCache(
            settings.redis_url,
            max_connections=settings.redis_max_connections,
            socket_timeout=settings.redis_socket_timeout,
        )
    return MemoryCache()


__all__ = [
    "CacheManager",
    "MemoryCache",
    "RedisCache",
    "create_cache_manager",
    "DEFAULT_EXPIRATION",
    "SHORT_EXPIRATION",
    "LONG_EXPIRATION",
    "NEVER_EXPIRE",
]
