"""
Configurações centralizadas do adminkit.

Uso:
    # settings.py do projeto
    from adminkit import Settings

    class AppSettings(Settings):
        stripe_api_key: str = ""

    settings = AppSettings()

Configuração via .env:
    DATABASE_URL=postgresql+asyncpg://localhost/admin
    CACHE_BACKEND=redis
    REDIS_URL=redis://localhost:6379/0

Ou via código (antes de criar a app):
    from adminkit import configure

    configure(cache_backend="redis", list_max_page_size=50)

Resolução de .env por ambiente:
    Precedência (maior para menor):
    1. Variáveis de ambiente do OS
    2. .env.{ENVIRONMENT} (ex: .env.production)
    3. .env (base)
    4. Defaults da classe Settings
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Literal

from pydantic import Field as PydanticField
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("adminkit.config")


# =========================================================================
# ENV FILE RESOLUTION
# =========================================================================

def _resolve_env_files() -> tuple[str, ...]:
    """
    Resolve .env files baseado na variável ENVIRONMENT.

    Returns:
        Tupla de paths de .env files para carregar
    """
    env = os.environ.get("ENVIRONMENT", "development")
    files: list[str] = []

    if Path(".env").is_file():
        files.append(".env")

    env_file = f".env.{env}"
    if Path(env_file).is_file():
        files.append(env_file)

    return tuple(files) if files else (".env",)


class Settings(BaseSettings):
    """
    Configurações do adminkit.

    Agrupa App, Database, Cache, API, Listagem/Export e Logging.

    Exemplo:
        class AppSettings(Settings):
            stripe_api_key: str = ""

        settings = AppSettings()
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # =========================================================================
    # Application
    # =========================================================================

    app_name: str = PydanticField(
        default="AdminKit",
        description="Nome da aplicação",
    )
    environment: Literal["development", "staging", "production", "testing"] = PydanticField(
        default="development",
        description="Ambiente de execução",
    )
    debug: bool = PydanticField(
        default=False,
        description="Modo debug (NUNCA use em produção)",
    )
    auto_create_tables: bool = PydanticField(
        default=False,
        description=(
            "Se True, cria as tabelas dos resources no startup. "
            "Use False em produção, prefira migrations."
        ),
    )

    # =========================================================================
    # Database
    # =========================================================================

    database_url: str = PydanticField(
        default="sqlite+aiosqlite:///./adminkit.db",
        description="URL de conexão do banco de dados (async)",
    )
    database_echo: bool = PydanticField(
        default=False,
        description="Habilita logging de SQL",
    )
    database_pool_size: int = PydanticField(
        default=5,
        description="Tamanho do pool de conexões (ignorado em SQLite)",
    )
    database_max_overflow: int = PydanticField(
        default=10,
        description="Conexões extras além do pool (ignorado em SQLite)",
    )

    # =========================================================================
    # Cache
    # =========================================================================

    cache_backend: Literal["memory", "redis"] = PydanticField(
        default="memory",
        description="Backend de cache: memory (processo local) ou redis",
    )
    cache_default_ttl: int = PydanticField(
        default=300,
        description="TTL padrão das entradas de cache, em segundos",
    )
    cache_key_prefix: str = PydanticField(
        default="resource",
        description="Prefixo das chaves de cache de resources",
    )
    redis_url: str = PydanticField(
        default="redis://localhost:6379/0",
        description="URL de conexão Redis",
    )
    redis_max_connections: int = PydanticField(
        default=10,
        description="Máximo de conexões no pool Redis",
    )
    redis_socket_timeout: float = PydanticField(
        default=5.0,
        description="Timeout de socket Redis em segundos",
    )

    # =========================================================================
    # API
    # =========================================================================

    resource_url_prefix: str = PydanticField(
        default="/resource-crud",
        description="Prefixo das rotas CRUD genéricas",
    )
    admin_api_prefix: str = PydanticField(
        default="/admin-api",
        description="Prefixo das rotas de introspecção (resources, busca global)",
    )

    # =========================================================================
    # Listagem / Export
    # =========================================================================

    list_default_page_size: int = PydanticField(
        default=10,
        description="Tamanho de página padrão nas listagens",
    )
    list_max_page_size: int = PydanticField(
        default=100,
        description="Tamanho máximo de página aceito do cliente",
    )
    export_max_rows: int = PydanticField(
        default=10000,
        description="Máximo de linhas por exportação",
    )
    quick_search_limit: int = PydanticField(
        default=5,
        description="Máximo de resultados por resource na busca rápida",
    )

    # =========================================================================
    # Logging
    # =========================================================================

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = PydanticField(
        default="INFO",
        description="Nível de log",
    )
    log_format: str = PydanticField(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Formato de log",
    )

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


def configure_logging(settings: Settings) -> None:
    """Aplica log_level/log_format ao logging raiz."""
    logging.basicConfig(level=settings.log_level, format=settings.log_format)
    logging.getLogger("adminkit").setLevel(settings.log_level)


# =========================================================================
# GLOBAL SETTINGS SINGLETON
# =========================================================================

_settings: Settings | None = None
_settings_class: type[Settings] = Settings

_on_settings_loaded: list[Any] = []


def get_settings() -> Settings:
    """Retorna o singleton de Settings, carregando-o na primeira chamada."""
    global _settings

    if _settings is None:
        _settings = _settings_class(_env_file=_resolve_env_files())
        for callback in _on_settings_loaded:
            callback(_settings)

    return _settings


def configure(
    settings_class: type[Settings] | None = None,
    **overrides: Any,
) -> Settings:
    """
    Configura o adminkit ANTES de criar a aplicação.

    Args:
        settings_class: Classe customizada de Settings (opcional)
        **overrides: Valores para sobrescrever

    Exemplo:
        configure(cache_backend="redis", redis_url="redis://cache:6379/1")
    """
    global _settings, _settings_class

    if settings_class is not None:
        _settings_class = settings_class

    if overrides:
        unknown = set(overrides) - set(_settings_class.model_fields)
        if unknown:
            logger.warning(
                "Unknown settings keys passed to configure(): %s",
                ", ".join(sorted(unknown)),
            )

    _settings = _settings_class(_env_file=_resolve_env_files(), **overrides)

    for callback in _on_settings_loaded:
        callback(_settings)

    return _settings


def on_settings_loaded(callback: Any) -> Any:
    """
    Registra callback executado após Settings ser carregado.

    Exemplo:
        @on_settings_loaded
        def setup_sentry(settings):
            ...
    """
    if callback not in _on_settings_loaded:
        _on_settings_loaded.append(callback)
    return callback


def is_configured() -> bool:
    """Verifica se o adminkit já foi configurado."""
    return _settings is not None


def reset_settings() -> None:
    """
    Reseta configurações. Útil para testes.

    Em produção emite um warning e não executa.
    """
    global _settings, _settings_class

    if _settings is not None and _settings.environment == "production":
        logger.warning(
            "reset_settings() called in production environment; ignored."
        )
        return

    _settings = None
    _settings_class = Settings
