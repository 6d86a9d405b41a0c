"""
Bootstrap da aplicação admin.

Boot sequence:
1. Settings carregados e logging configurado
2. Database, cache, repository e service montados
3. Exception handlers
4. Routers CRUD e de introspecção
5. Startup: criação de tabelas (se auto_create_tables)
6. Shutdown: fecha cache e conexões

Exemplo:
    manager = ResourceManager()
    manager.register(ProductResource())

    app = create_app(manager)
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from contextlib import asynccontextmanager
from typing import Any

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from adminkit.admin.manager import ResourceManager
from adminkit.cache import CacheManager, create_cache_manager
from adminkit.config import Settings, configure_logging, get_settings, on_settings_loaded
from adminkit.database import Database
from adminkit.exceptions import AdminKitError, ValidationError
from adminkit.export import ExportService
from adminkit.repository import ResourceRepository
from adminkit.router import create_introspection_router, create_resource_router
from adminkit.service import ResourceService

app_logger = logging.getLogger("adminkit.app")


class AdminApp:
    """
    Aplicação FastAPI com o engine de resources montado.

    Componentes ficam expostos como atributos (settings, manager,
    database, cache, repository, service) e em app.state.

    Exemplo:
        admin = AdminApp(manager, settings=Settings(cache_backend="redis"))
        app = admin.app
    """

    def __init__(
        self,
        manager: ResourceManager,
        settings: Settings | None = None,
        *,
        database: Database | None = None,
        cache: CacheManager | None = None,
        title: str | None = None,
        routers: list[APIRouter] | None = None,
        on_startup: list[Callable] | None = None,
        on_shutdown: list[Callable] | None = None,
        **fastapi_kwargs: Any,
    ) -> None:
        # ── Step 1: Settings + logging ──
        self.settings = settings or get_settings()
        configure_logging(self.settings)
        on_settings_loaded(configure_logging)

        self._on_startup = on_startup or []
        self._on_shutdown = on_shutdown or []

        # ── Step 2: Componentes ──
        self.manager = manager
        self.database = database or Database.from_settings(self.settings)
        self.cache = cache or create_cache_manager(self.settings)
        self.repository = ResourceRepository(self.database.session_factory)
        self.service = ResourceService(
            manager,
            self.repository,
            self.cache,
            ExportService(),
            self.settings,
        )

        self.app = FastAPI(
            title=title or self.settings.app_name,
            debug=self.settings.debug,
            lifespan=self._lifespan,
            **fastapi_kwargs,
        )
        self.app.state.settings = self.settings
        self.app.state.resource_manager = manager
        self.app.state.resource_service = self.service

        # ── Step 3: Exception handlers ──
        self._setup_exception_handlers()

        # ── Step 4: Routers ──
        self.app.include_router(create_resource_router(self.service, self.settings))
        self.app.include_router(create_introspection_router(self.service, self.settings))
        for router in routers or []:
            self.app.include_router(router)

    @asynccontextmanager
    async def _lifespan(self, app: FastAPI):
        await self._startup()
        yield
        await self._shutdown()

    async def _startup(self) -> None:
        app_logger.info(
            "Starting %s (environment=%s, resources=%d)",
            self.settings.app_name,
            self.settings.environment,
            len(self.manager),
        )

        # ── Step 5: Tabelas ──
        if self.settings.auto_create_tables:
            await self.database.create_tables(self.manager)
            app_logger.info("Resource tables created")

        for callback in self._on_startup:
            result = callback()
            if hasattr(result, "__await__"):
                await result

    async def _shutdown(self) -> None:
        for callback in self._on_shutdown:
            result = callback()
            if hasattr(result, "__await__"):
                await result

        # ── Step 6: Recursos ──
        await self.cache.close()
        await self.database.dispose()
        app_logger.info("Shutdown complete")

    def _setup_exception_handlers(self) -> None:
        """Configura handlers de exceção."""

        @self.app.exception_handler(AdminKitError)
        async def adminkit_error_handler(
            request: Request,
            exc: AdminKitError,
        ) -> JSONResponse:
            content: dict[str, Any] = {
                "code": exc.status_code,
                "message": exc.message,
                "error": exc.code,
            }
            if isinstance(exc, ValidationError):
                content["errors"] = exc.errors
            elif exc.details:
                content["details"] = exc.details

            if exc.status_code >= 500:
                app_logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc)
            return JSONResponse(status_code=exc.status_code, content=content)

        @self.app.exception_handler(SQLAlchemyError)
        async def database_error_handler(
            request: Request,
            exc: SQLAlchemyError,
        ) -> JSONResponse:
            app_logger.exception("Database error on %s %s", request.method, request.url.path)
            content: dict[str, Any] = {
                "code": 500,
                "message": "database error",
                "error": "database_error",
            }
            if self.settings.debug:
                content["debug_info"] = str(exc)
            return JSONResponse(status_code=500, content=content)


def create_app(
    manager: ResourceManager,
    settings: Settings | None = None,
    **kwargs: Any,
) -> FastAPI:
    """Atalho para AdminApp(...).app."""
    return AdminApp(manager, settings, **kwargs).app
