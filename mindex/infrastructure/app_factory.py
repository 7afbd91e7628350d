import os
from asyncio import Event
from collections.abc import AsyncGenerator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Any, Dict, List, Optional

import anyio
import fastapi
from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.openapi.docs import get_redoc_html, get_swagger_ui_html
from fastapi.openapi.utils import get_openapi
from sqlalchemy.ext.asyncio import AsyncEngine

from ..modules.common.utils.error_handler import register_exception_handlers
from .config.settings import (
    DatabaseSettings,
    EnvironmentOption,
    EnvironmentSettings,
    Settings,
    get_settings,
)
from .database.migrations import run_migrations
from .database.session import engine as default_engine
from .logging import get_logger

logger = get_logger(__name__)


async def set_threadpool_tokens(number_of_tokens: int = 100) -> None:
    """Configure the number of threadpool tokens for anyio."""
    limiter = anyio.to_thread.current_default_thread_limiter()
    limiter.total_tokens = number_of_tokens


def ensure_database_directory(sqlite_uri: str) -> None:
    """Create the directory holding a file-backed SQLite catalog."""
    if not sqlite_uri or sqlite_uri.startswith(":memory:"):
        return

    directory = os.path.dirname(os.path.abspath(sqlite_uri))
    os.makedirs(directory, exist_ok=True)


def lifespan_factory(
    settings: Settings,
    run_migrations_on_startup: bool = True,
    engine: Optional[AsyncEngine] = None,
) -> Callable[[FastAPI], AbstractAsyncContextManager[None]]:
    """Factory to create a lifespan async context manager for a FastAPI app.

    Args:
        settings: Application settings
        run_migrations_on_startup: Whether to bring the catalog schema up to date on startup
        engine: Catalog engine to migrate; the application engine if None

    Returns:
        An async context manager for FastAPI's lifespan
    """
    catalog_engine = engine or default_engine

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        initialization_complete = Event()
        app.state.initialization_complete = initialization_complete

        await set_threadpool_tokens()

        try:
            if isinstance(settings, DatabaseSettings) and run_migrations_on_startup:
                ensure_database_directory(settings.SQLITE_URI)
                await run_migrations(catalog_engine)

            initialization_complete.set()
            logger.info(f"{getattr(settings, 'APP_NAME', 'mindex')} started")
            yield

        finally:
            await catalog_engine.dispose()

    return lifespan


def create_application(
    router: APIRouter,
    settings: Optional[Settings] = None,
    lifespan: Optional[Callable[[FastAPI], AbstractAsyncContextManager[None]]] = None,
    run_migrations_on_startup: Optional[bool] = None,
    enable_cors: Optional[bool] = None,
    cors_origins: Optional[List[str]] = None,
    enable_docs_in_production: Optional[bool] = None,
    enable_gzip: Optional[bool] = None,
    title: Optional[str] = None,
    summary: Optional[str] = None,
    description: Optional[str] = None,
    version: Optional[str] = None,
    **kwargs: Any,
) -> FastAPI:
    """Creates and configures a FastAPI application based on the provided settings.

    Args:
        router: The APIRouter containing the routes for the application
        settings: Application settings (uses get_settings() if None)
        lifespan: Optional lifespan function for the FastAPI app. If None, uses the default
            lifespan_factory which migrates the catalog.
        run_migrations_on_startup: Whether to migrate the catalog on startup.
            Defaults to settings.RUN_MIGRATIONS_ON_STARTUP if None.
        enable_cors: Whether to enable CORS middleware.
            Defaults to settings.CORS_ENABLED if None.
        cors_origins: List of allowed origins for CORS.
            Defaults to settings.CORS_ORIGINS if None.
        enable_docs_in_production: Whether to enable API docs in production.
            Defaults to settings.ENABLE_DOCS_IN_PRODUCTION if None.
        enable_gzip: Whether to enable GZip compression middleware.
        title: The title of the API.
        summary: A short summary of the API.
        description: A detailed description of the API (supports Markdown).
        version: The version of the API.
        **kwargs: Additional keyword arguments passed to FastAPI constructor

    Returns:
        A configured FastAPI application
    """

    if settings is None:
        settings = get_settings()

    _run_migrations_on_startup = True
    if run_migrations_on_startup is not None:
        _run_migrations_on_startup = run_migrations_on_startup
    elif hasattr(settings, "RUN_MIGRATIONS_ON_STARTUP"):
        _run_migrations_on_startup = settings.RUN_MIGRATIONS_ON_STARTUP

    _enable_cors = True
    if enable_cors is not None:
        _enable_cors = enable_cors
    elif hasattr(settings, "CORS_ENABLED"):
        _enable_cors = settings.CORS_ENABLED

    _cors_origins: List[str] = ["*"]
    if cors_origins is not None:
        _cors_origins = cors_origins
    elif hasattr(settings, "CORS_ORIGINS_LIST"):
        _cors_origins = settings.CORS_ORIGINS_LIST

    _enable_docs_in_production = False
    if enable_docs_in_production is not None:
        _enable_docs_in_production = enable_docs_in_production
    elif hasattr(settings, "ENABLE_DOCS_IN_PRODUCTION"):
        _enable_docs_in_production = settings.ENABLE_DOCS_IN_PRODUCTION

    _enable_gzip = True if enable_gzip is None else enable_gzip

    metadata: Dict[str, Any] = {
        "title": title or getattr(settings, "APP_NAME", "mindex"),
        "description": description or getattr(settings, "APP_DESCRIPTION", ""),
        "version": version or getattr(settings, "VERSION", "0.1.0"),
    }
    if summary is not None:
        metadata["summary"] = summary

    show_docs = isinstance(settings, EnvironmentSettings) and (
        settings.ENVIRONMENT != EnvironmentOption.PRODUCTION or _enable_docs_in_production
    )

    kwargs.update(metadata)
    kwargs.update({"docs_url": None, "redoc_url": None, "openapi_url": None})

    if lifespan is None:
        lifespan = lifespan_factory(settings, run_migrations_on_startup=_run_migrations_on_startup)

    application = FastAPI(lifespan=lifespan, **kwargs)

    application.include_router(router)
    register_exception_handlers(application)

    if _enable_cors:
        cors_settings_dict: Dict[str, Any] = {
            "allow_origins": _cors_origins,
            "allow_credentials": True,
            "allow_methods": ["*"],
            "allow_headers": ["*"],
        }

        if hasattr(settings, "CORS_ALLOW_CREDENTIALS"):
            cors_settings_dict["allow_credentials"] = settings.CORS_ALLOW_CREDENTIALS

        if hasattr(settings, "CORS_ALLOW_METHODS"):
            methods = settings.CORS_ALLOW_METHODS
            cors_settings_dict["allow_methods"] = methods.split(",") if isinstance(methods, str) else methods

        if hasattr(settings, "CORS_ALLOW_HEADERS"):
            headers = settings.CORS_ALLOW_HEADERS
            cors_settings_dict["allow_headers"] = headers.split(",") if isinstance(headers, str) else headers

        application.add_middleware(CORSMiddleware, **cors_settings_dict)

    if _enable_gzip:
        application.add_middleware(GZipMiddleware, minimum_size=1000)

    if show_docs:
        docs_url = getattr(settings, "DOCS_URL", "/docs")
        redoc_url = getattr(settings, "REDOC_URL", "/redoc")
        openapi_url = getattr(settings, "OPENAPI_URL", "/openapi.json")
        docs_router = APIRouter()

        @docs_router.get(docs_url, include_in_schema=False)
        async def get_swagger_documentation() -> fastapi.responses.HTMLResponse:
            return get_swagger_ui_html(openapi_url=openapi_url, title="docs")

        @docs_router.get(redoc_url, include_in_schema=False)
        async def get_redoc_documentation() -> fastapi.responses.HTMLResponse:
            return get_redoc_html(openapi_url=openapi_url, title="redoc")

        @docs_router.get(openapi_url, include_in_schema=False)
        async def openapi() -> Dict[str, Any]:
            return get_openapi(
                title=metadata["title"],
                version=metadata["version"],
                description=metadata["description"],
                routes=application.routes,
            )

        application.include_router(docs_router)

    return application
