"""
ResourceRepository: SQL genérico sobre as tabelas dos resources.

O repository nunca recebe nome de tabela ou coluna como string solta:
toda operação recebe um TableSchema, um conjunto FECHADO de
identificadores montado a partir dos Fields do resource registrado.
Qualquer coluna fora desse conjunto levanta UnknownColumnError antes de
qualquer SQL ser gerado. Valores sempre vão como bind parameters.

Linhas entram e saem como dicts coluna -> valor.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Any, TYPE_CHECKING

import sqlalchemy as sa

from adminkit.admin.fields import is_safe_identifier
from adminkit.exceptions import UnknownColumnError, UnsafeIdentifierError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
    from adminkit.admin.resource import Resource

logger = logging.getLogger("adminkit.repository")

BASE_COLUMNS = frozenset({"id", "created_at", "updated_at", "deleted_at"})
TIMESTAMP_COLUMNS = frozenset({"created_at", "updated_at", "deleted_at"})

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"

# Chaves reservadas do mapa de filtros
TRASHED_KEY = "trashed"
CREATED_FROM_KEY = "created_at_from"
CREATED_TO_KEY = "created_at_to"
RESERVED_FILTER_KEYS = frozenset({TRASHED_KEY, CREATED_FROM_KEY, CREATED_TO_KEY})

TRASHED_ONLY = "only"
TRASHED_WITH = "with"
TRASHED_WITHOUT = "without"


def utcnow() -> datetime:
    """Agora em UTC, sem tzinfo (formato armazenado nas colunas de timestamp)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_datetime_bound(value: Any, *, end_of_day: bool = False) -> datetime:
    """
    Converte o valor de created_at_from/created_at_to em datetime.

    Aceita datetime, date ou string ISO-8601. Uma data sem hora vira
    00:00:00, ou 23:59:59.999999 quando end_of_day=True.

    Raises:
        ValueError: valor não interpretável como data.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.max if end_of_day else time.min)
    elif isinstance(value, str):
        text = value.strip()
        if len(text) == 10:
            day = date.fromisoformat(text)
            parsed = datetime.combine(day, time.max if end_of_day else time.min)
        else:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    else:
        raise ValueError(f"invalid date value: {value!r}")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _like_pattern(value: Any) -> str:
    text = str(value).replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{text}%"


def _to_db_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.strftime(DATETIME_FORMAT)
    if isinstance(value, date):
        return value.isoformat()
    return value


def _from_db_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.strftime(DATETIME_FORMAT)
    if isinstance(value, date):
        return value.isoformat()
    return value


@dataclass(frozen=True)
class TableSchema:
    """
    Conjunto fechado de identificadores de uma tabela.

    Construído a partir de um Resource registrado (from_resource); nome
    da tabela e colunas são validados como identificadores SQL simples.
    """

    name: str
    columns: frozenset[str]

    def __post_init__(self) -> None:
        if not is_safe_identifier(self.name):
            raise UnsafeIdentifierError(self.name)
        for column in self.columns:
            if not is_safe_identifier(column):
                raise UnsafeIdentifierError(column)
        missing = BASE_COLUMNS - self.columns
        if missing:
            object.__setattr__(self, "columns", self.columns | BASE_COLUMNS)

    @classmethod
    def from_resource(cls, resource: "Resource") -> TableSchema:
        return cls(resource.slug, frozenset(resource.get_field_names()) | BASE_COLUMNS)

    def require(self, column: str) -> str:
        if column not in self.columns:
            raise UnknownColumnError(self.name, column)
        return column

    def table(self) -> sa.TableClause:
        cols = [
            sa.column(name, sa.DateTime()) if name in TIMESTAMP_COLUMNS else sa.column(name)
            for name in sorted(self.columns)
        ]
        return sa.table(self.name, *cols)


class ResourceRepository:
    """
    Operações CRUD genéricas por TableSchema.

    Cada operação abre a própria sessão; escritas fazem commit ao final.
    Erros do banco propagam sem wrap e sem retry.

    Exemplo:
        repo = ResourceRepository(db.session_factory)
        schema = TableSchema.from_resource(resource)
        new_id = await repo.create(schema, {"name": "a"})
        rows, total = await repo.list_with_filters(schema, 1, 10, filters={"name": "a"})
    """

    def __init__(self, session_factory: "async_sessionmaker[AsyncSession]") -> None:
        self._session_factory = session_factory

    # =========================================================================
    # Escrita
    # =========================================================================

    async def create(self, schema: TableSchema, data: dict[str, Any]) -> Any:
        """
        Insere as chaves não-None de data mais created_at/updated_at.

        Returns:
            id do registro criado
        """
        values = self._prepare_values(schema, data)
        now = utcnow()
        values["created_at"] = now
        values["updated_at"] = now

        tbl = schema.table()
        stmt = sa.insert(tbl).values(**values)

        async with self._session_factory() as session:
            conn = await session.connection()
            if conn.dialect.insert_returning:
                result = await session.execute(stmt.returning(tbl.c.id))
                new_id = result.scalar_one()
            else:
                result = await session.execute(stmt)
                new_id = result.lastrowid
            await session.commit()

        logger.debug("Inserted %s id=%s", schema.name, new_id)
        return new_id

    async def update(self, schema: TableSchema, record_id: Any, data: dict[str, Any]) -> int:
        """UPDATE ... SET <campos>, updated_at WHERE id. Retorna linhas afetadas."""
        values = self._prepare_values(schema, data, keep_none=True)
        values.pop("id", None)
        values["updated_at"] = utcnow()

        tbl = schema.table()
        stmt = sa.update(tbl).where(tbl.c.id == record_id).values(**values)
        return await self._execute_write(stmt)

    async def delete(self, schema: TableSchema, record_id: Any) -> int:
        """Soft delete: marca deleted_at."""
        tbl = schema.table()
        stmt = sa.update(tbl).where(tbl.c.id == record_id).values(deleted_at=utcnow())
        return await self._execute_write(stmt)

    async def restore(self, schema: TableSchema, record_id: Any) -> int:
        tbl = schema.table()
        stmt = sa.update(tbl).where(tbl.c.id == record_id).values(deleted_at=None)
        return await self._execute_write(stmt)

    async def force_delete(self, schema: TableSchema, record_id: Any) -> int:
        """DELETE físico."""
        tbl = schema.table()
        stmt = sa.delete(tbl).where(tbl.c.id == record_id)
        return await self._execute_write(stmt)

    async def delete_batch(self, schema: TableSchema, ids: list[Any]) -> int:
        """Soft delete de vários ids. Retorna quantos foram marcados."""
        if not ids:
            return 0
        tbl = schema.table()
        stmt = sa.update(tbl).where(tbl.c.id.in_(list(ids))).values(deleted_at=utcnow())
        return await self._execute_write(stmt)

    # =========================================================================
    # Leitura
    # =========================================================================

    async def find_by_id(self, schema: TableSchema, record_id: Any) -> dict[str, Any] | None:
        async with self._session_factory() as session:
            return await self._find(session, schema, record_id)

    async def list(self, schema: TableSchema, page: int, page_size: int) -> tuple[list[dict[str, Any]], int]:
        """Listagem simples paginada (sem registros na lixeira), id DESC."""
        return await self.list_with_filters(schema, page, page_size)

    async def list_with_filters(
        self,
        schema: TableSchema,
        page: int,
        page_size: int,
        filters: dict[str, Any] | None = None,
        search: dict[str, Any] | None = None,
        order_by: str = "",
        order_dir: str = "",
    ) -> tuple[list[dict[str, Any]], int]:
        """
        Query central de listagem.

        1. `trashed` controla a lixeira: only / with / without (padrão).
        2. `created_at_from` / `created_at_to` viram >= / <=.
        3. Demais filtros viram `coluna = valor` (AND).
        4. Cada busca vira `coluna LIKE %valor%` (AND).
        5. order_by/order_dir só são usados se ambos preenchidos e
           order_dir for ASC ou DESC; senão `id DESC`.

        Returns:
            (linhas da página, total sem paginação)
        """
        tbl = schema.table()
        conditions = self._build_conditions(schema, tbl, filters or {}, search or {})
        order = self._build_order(schema, tbl, order_by, order_dir)

        page = max(page, 1)
        page_size = max(page_size, 1)

        count_stmt = sa.select(sa.func.count()).select_from(tbl).where(*conditions)
        rows_stmt = (
            sa.select(*tbl.c)
            .where(*conditions)
            .order_by(order)
            .limit(page_size)
            .offset((page - 1) * page_size)
        )

        async with self._session_factory() as session:
            total = (await session.execute(count_stmt)).scalar_one()
            result = await session.execute(rows_stmt)
            rows = [self._format_row(r) for r in result.mappings().all()]

        return rows, int(total)

    async def list_with_relationships(
        self,
        schema: TableSchema,
        page: int,
        page_size: int,
        relationships: dict[str, TableSchema],
    ) -> tuple[list[dict[str, Any]], int]:
        return await self.list_with_relationships_and_filters(schema, page, page_size, relationships)

    async def list_with_relationships_and_filters(
        self,
        schema: TableSchema,
        page: int,
        page_size: int,
        relationships: dict[str, TableSchema],
        filters: dict[str, Any] | None = None,
        search: dict[str, Any] | None = None,
        order_by: str = "",
        order_dir: str = "",
    ) -> tuple[list[dict[str, Any]], int]:
        """
        list_with_filters + registros relacionados em `<campo>_data`.

        Uma consulta por valor relacionado distinto (N+1 limitado a page_size).
        """
        rows, total = await self.list_with_filters(
            schema, page, page_size, filters, search, order_by, order_dir,
        )
        if rows and relationships:
            async with self._session_factory() as session:
                await self._attach_relationships(session, schema, rows, relationships)
        return rows, total

    async def find_by_id_with_relationships(
        self,
        schema: TableSchema,
        record_id: Any,
        relationships: dict[str, TableSchema],
    ) -> dict[str, Any] | None:
        async with self._session_factory() as session:
            row = await self._find(session, schema, record_id)
            if row is not None and relationships:
                await self._attach_relationships(session, schema, [row], relationships)
        return row

    async def quick_search(
        self,
        schema: TableSchema,
        fields: list[str],
        keyword: str,
        limit: int = 5,
    ) -> list[dict[str, Any]]:
        """Busca OR por LIKE nos campos dados, sempre fora da lixeira, id DESC."""
        if not fields or not keyword:
            return []

        tbl = schema.table()
        pattern = _like_pattern(keyword)
        matches = [tbl.c[schema.require(f)].like(pattern, escape="\\") for f in fields]

        stmt = (
            sa.select(*tbl.c)
            .where(tbl.c.deleted_at.is_(None), sa.or_(*matches))
            .order_by(tbl.c.id.desc())
            .limit(limit if limit > 0 else 5)
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [self._format_row(r) for r in result.mappings().all()]

    # =========================================================================
    # Internos
    # =========================================================================

    async def _execute_write(self, stmt: Any) -> int:
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            await session.commit()
            return result.rowcount

    async def _find(self, session: "AsyncSession", schema: TableSchema, record_id: Any) -> dict[str, Any] | None:
        tbl = schema.table()
        stmt = sa.select(*tbl.c).where(tbl.c.id == record_id)
        row = (await session.execute(stmt)).mappings().first()
        return self._format_row(row) if row is not None else None

    async def _attach_relationships(
        self,
        session: "AsyncSession",
        schema: TableSchema,
        rows: list[dict[str, Any]],
        relationships: dict[str, TableSchema],
    ) -> None:
        loaded: dict[tuple[str, Any], dict[str, Any] | None] = {}
        for field_name, related in relationships.items():
            schema.require(field_name)
            for row in rows:
                value = row.get(field_name)
                if value is None:
                    continue
                key = (related.name, value)
                if key not in loaded:
                    loaded[key] = await self._find(session, related, value)
                if loaded[key] is not None:
                    row[f"{field_name}_data"] = dict(loaded[key])

    def _prepare_values(
        self,
        schema: TableSchema,
        data: dict[str, Any],
        *,
        keep_none: bool = False,
    ) -> dict[str, Any]:
        values: dict[str, Any] = {}
        for key, value in data.items():
            schema.require(key)
            if key in TIMESTAMP_COLUMNS:
                continue
            if value is None and not keep_none:
                continue
            values[key] = _to_db_value(value)
        return values

    def _build_conditions(
        self,
        schema: TableSchema,
        tbl: sa.TableClause,
        filters: dict[str, Any],
        search: dict[str, Any],
    ) -> list[Any]:
        remaining = dict(filters)
        conditions: list[Any] = []

        trashed = str(remaining.pop(TRASHED_KEY, "") or "").lower()
        if trashed == TRASHED_ONLY:
            conditions.append(tbl.c.deleted_at.is_not(None))
        elif trashed != TRASHED_WITH:
            conditions.append(tbl.c.deleted_at.is_(None))

        created_from = remaining.pop(CREATED_FROM_KEY, None)
        if created_from not in (None, ""):
            conditions.append(tbl.c.created_at >= parse_datetime_bound(created_from))

        created_to = remaining.pop(CREATED_TO_KEY, None)
        if created_to not in (None, ""):
            conditions.append(tbl.c.created_at <= parse_datetime_bound(created_to, end_of_day=True))

        for key, value in remaining.items():
            column = tbl.c[schema.require(key)]
            if value is None:
                conditions.append(column.is_(None))
            else:
                conditions.append(column == _to_db_value(value))

        for key, value in search.items():
            if value in (None, ""):
                continue
            column = tbl.c[schema.require(key)]
            conditions.append(column.like(_like_pattern(value), escape="\\"))

        return conditions

    def _build_order(self, schema: TableSchema, tbl: sa.TableClause, order_by: str, order_dir: str) -> Any:
        direction = (order_dir or "").upper()
        if order_by and direction in ("ASC", "DESC"):
            column = tbl.c[schema.require(order_by)]
            return column.asc() if direction == "ASC" else column.desc()
        return tbl.c.id.desc()

    def _format_row(self, row: Any) -> dict[str, Any]:
        return {key: _from_db_value(value) for key, value in dict(row).items()}
