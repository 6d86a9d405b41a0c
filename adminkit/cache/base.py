"""
Interface de cache usada pelo ResourceService.

Todas as operações são async. Valores devem ser serializáveis em JSON
(dicts, listas, strings, números, bool, None).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

# TTLs em segundos
DEFAULT_EXPIRATION = 5 * 60
SHORT_EXPIRATION = 60
LONG_EXPIRATION = 30 * 60
NEVER_EXPIRE = 0


class CacheManager(ABC):
    """
    Backend de cache.

    delete_by_prefix() é opcional: backends que não suportam devem
    manter a implementação padrão (NotImplementedError) e o service
    recorre a flush().
    """

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Retorna o valor ou None se ausente/expirado."""
        ...

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: int = DEFAULT_EXPIRATION) -> None:
        """Grava o valor. ttl=0 (NEVER_EXPIRE) não expira."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        ...

    @abstractmethod
    async def exists(self, key: str) -> bool:
        ...

    @abstractmethod
    async def flush(self) -> None:
        """Remove todas as entradas."""
        ...

    async def delete_by_prefix(self, prefix: str) -> int:
        """Remove todas as chaves que começam com prefix. Retorna a quantidade."""
        raise NotImplementedError(f"{type(self).__name__} does not support prefix deletion")

    async def close(self) -> None:
        return None
