"""
Conexão com o banco de dados (SQLAlchemy async).

Database é criado explicitamente e injetado no repository; não há
engine global.

    db = Database.from_settings(settings)
    await db.create_tables(manager)       # dev/testes; em produção use migrations
    ...
    await db.dispose()
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

if TYPE_CHECKING:
    from adminkit.admin.manager import ResourceManager
    from adminkit.admin.resource import Resource
    from adminkit.config import Settings

logger = logging.getLogger("adminkit.database")

TIMESTAMP_COLUMNS = ("created_at", "updated_at", "deleted_at")

_COLUMN_TYPES: dict[str, type[sa.types.TypeEngine]] = {
    "number": sa.Integer,
    "boolean": sa.Boolean,
    "datetime": sa.DateTime,
    "date": sa.Date,
    "relationship": sa.Integer,
    "textarea": sa.Text,
}


class Database:
    """Engine + session factory."""

    def __init__(
        self,
        url: str,
        *,
        echo: bool = False,
        pool_size: int = 5,
        max_overflow: int = 10,
    ) -> None:
        """
        Args:
            url: URL de conexão async (ex: sqlite+aiosqlite:///./app.db)
            echo: Habilita logging de SQL
            pool_size: Tamanho do pool de conexões (ignorado em SQLite)
            max_overflow: Conexões extras além do pool (ignorado em SQLite)
        """
        self.url = url
        engine_kwargs: dict = {"echo": echo}
        if not url.startswith("sqlite"):
            engine_kwargs.update(pool_size=pool_size, max_overflow=max_overflow)

        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: "Settings") -> Database:
        return cls(
            settings.database_url,
            echo=settings.database_echo,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
        )

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        async with self.session_factory() as session:
            yield session

    async def create_tables(self, resources: "ResourceManager | Iterable[Resource]") -> None:
        """Cria as tabelas dos resources que ainda não existem."""
        metadata = build_metadata(resources)
        async with self.engine.begin() as conn:
            await conn.run_sync(metadata.create_all)

    async def drop_tables(self, resources: "ResourceManager | Iterable[Resource]") -> None:
        metadata = build_metadata(resources)
        async with self.engine.begin() as conn:
            await conn.run_sync(metadata.drop_all)

    async def dispose(self) -> None:
        """Fecha a conexão com o banco de dados."""
        await self.engine.dispose()


def build_metadata(resources: "ResourceManager | Iterable[Resource]") -> sa.MetaData:
    """
    Monta um MetaData com uma tabela por resource.

    Colunas: um campo = uma coluna, tipo derivado do Field.type, mais
    id (PK autoincrement) e created_at/updated_at/deleted_at.
    """
    if hasattr(resources, "get_resources"):
        resources = resources.get_resources()

    metadata = sa.MetaData()
    for resource in resources:
        columns: list[sa.Column] = [sa.Column("id", sa.Integer, primary_key=True, autoincrement=True)]
        for f in resource.get_fields():
            if f.name == "id" or f.name in TIMESTAMP_COLUMNS:
                continue
            column_type = _COLUMN_TYPES.get(f.type, sa.String)
            type_ = column_type(255) if column_type is sa.String else column_type()
            columns.append(sa.Column(f.name, type_, nullable=True))
        for name in TIMESTAMP_COLUMNS:
            columns.append(sa.Column(name, sa.DateTime, nullable=True, index=name == "deleted_at"))
        sa.Table(resource.slug, metadata, *columns)
        logger.debug("Built table metadata for %s", resource.slug)
    return metadata
