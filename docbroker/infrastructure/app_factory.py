from collections.abc import AsyncGenerator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import anyio
from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.staticfiles import StaticFiles

from ..modules.auth.services import CredentialAuthority
from ..modules.common.utils.error_handler import register_exception_handlers
from ..modules.document.services import DocumentRegistry
from .config.settings import EnvironmentOption, Settings, get_settings
from .logging import (
    configure_logging,
    generate_correlation_id,
    get_logger,
    reset_correlation_id,
    set_correlation_id,
)
from .storage import UploadStorage

logger = get_logger(__name__)

CORRELATION_ID_HEADER = "X-Correlation-ID"


async def set_threadpool_tokens(number_of_tokens: int = 100) -> None:
    """Configure the number of threadpool tokens for anyio."""
    limiter = anyio.to_thread.current_default_thread_limiter()
    limiter.total_tokens = number_of_tokens


def lifespan_factory(settings: Settings) -> Callable[[FastAPI], AbstractAsyncContextManager[None]]:
    """Factory to create a lifespan async context manager for a FastAPI app.

    Args:
        settings: Application settings

    Returns:
        An async context manager for FastAPI's lifespan
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        await set_threadpool_tokens()
        app.state.upload_storage.ensure_directory()

        logger.info(
            f"{settings.APP_NAME} ready",
            extra={
                "upload_dir": str(app.state.upload_storage.directory),
                "public_base_url": settings.PUBLIC_BASE_URL or None,
            },
        )
        if not settings.PUBLIC_BASE_URL:
            logger.info(
                "PUBLIC_BASE_URL is not set; upload URLs are built from the request host. "
                "Set it (e.g. http://host.docker.internal:5174) when the Document Server runs in Docker."
            )
        yield

    return lifespan


def build_services(application: FastAPI, settings: Settings) -> None:
    """Create the per-application services handlers receive through dependencies.

    Raises:
        ConfigurationError: If a required secret is missing.
    """
    storage = UploadStorage(settings.UPLOAD_DIR)
    storage.ensure_directory()

    application.state.settings = settings
    application.state.upload_storage = storage
    application.state.registry = DocumentRegistry.from_settings(settings)
    application.state.credential_authority = CredentialAuthority.from_settings(settings)


def create_application(
    router: APIRouter,
    settings: Optional[Settings] = None,
    lifespan: Optional[Callable[[FastAPI], AbstractAsyncContextManager[None]]] = None,
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
        lifespan: Optional lifespan function. Defaults to lifespan_factory(settings).
        enable_cors: Whether to enable CORS middleware.
            Defaults to settings.CORS_ENABLED if None.
        cors_origins: List of allowed origins for CORS.
            Defaults to settings.CORS_ORIGINS if None.
        enable_docs_in_production: Whether to enable API docs in production.
            Defaults to settings.ENABLE_DOCS_IN_PRODUCTION if None.
        enable_gzip: Whether to enable GZip compression middleware.
            Defaults to settings.GZIP_ENABLED if None.
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

    configure_logging()

    _enable_cors = settings.CORS_ENABLED if enable_cors is None else enable_cors
    _cors_origins = settings.CORS_ORIGINS_LIST if cors_origins is None else cors_origins
    _enable_gzip = settings.GZIP_ENABLED if enable_gzip is None else enable_gzip
    _enable_docs_in_production = (
        settings.ENABLE_DOCS_IN_PRODUCTION if enable_docs_in_production is None else enable_docs_in_production
    )

    metadata: Dict[str, Any] = {
        "title": title or settings.API_TITLE or settings.APP_NAME,
        "description": description or settings.API_DESCRIPTION or settings.APP_DESCRIPTION,
        "version": version or settings.API_VERSION or settings.VERSION,
        "docs_url": settings.DOCS_URL,
        "redoc_url": settings.REDOC_URL,
        "openapi_url": settings.OPENAPI_URL,
    }
    if summary or settings.API_SUMMARY:
        metadata["summary"] = summary or settings.API_SUMMARY

    hide_docs = settings.ENVIRONMENT == EnvironmentOption.PRODUCTION and not _enable_docs_in_production
    if hide_docs:
        metadata.update({"docs_url": None, "redoc_url": None, "openapi_url": None})

    kwargs.update(metadata)

    if lifespan is None:
        lifespan = lifespan_factory(settings)

    application = FastAPI(lifespan=lifespan, **kwargs)

    build_services(application, settings)
    register_exception_handlers(application)

    application.include_router(router)

    @application.get(
        "/health",
        tags=["Health"],
        summary="Health Check",
        description="Liveness information for monitoring and container orchestration.",
    )
    async def health_check(request: Request) -> Dict[str, Any]:
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uploadDirExists": request.app.state.upload_storage.exists(),
            "publicBaseUrl": settings.PUBLIC_BASE_URL or None,
        }

    uploads_path = "/" + settings.UPLOADS_PATH.strip("/")
    application.mount(uploads_path, StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

    if settings.LOG_CORRELATION_ID:

        @application.middleware("http")
        async def correlation_id_middleware(request: Request, call_next):
            correlation_id = request.headers.get(CORRELATION_ID_HEADER) or generate_correlation_id()
            token = set_correlation_id(correlation_id)
            try:
                response = await call_next(request)
            finally:
                reset_correlation_id(token)
            response.headers[CORRELATION_ID_HEADER] = correlation_id
            return response

    if _enable_cors:
        cors_settings_dict: Dict[str, Any] = {
            "allow_origins": _cors_origins,
            "allow_credentials": settings.CORS_ALLOW_CREDENTIALS,
            "allow_methods": settings.CORS_ALLOW_METHODS.split(","),
            "allow_headers": settings.CORS_ALLOW_HEADERS.split(","),
            "expose_headers": [CORRELATION_ID_HEADER],
        }
        application.add_middleware(CORSMiddleware, **cors_settings_dict)

    if _enable_gzip:
        application.add_middleware(GZipMiddleware, minimum_size=settings.GZIP_MINIMUM_SIZE)

    return application
