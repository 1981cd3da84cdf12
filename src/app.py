"""MapRoulette Mapping API - FastAPI Application.

Главное приложение с инициализацией всех компонентов.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator
from redis.asyncio import Redis

from src.api import router as api_router
from src.config import settings
from src.core.constants import API_PREFIX, API_VERSION
from src.services.lock_coordinator import LockCoordinator
from src.services.mapping_service import MappingService
from src.services.task_store import create_task_store
from src.shared.errors import TraceContextMiddleware, setup_exception_handlers
from src.utils.logging import get_logger, setup_logging

# Setup logging
setup_logging()
logger = get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan context manager для startup/shutdown.

    Args:
        app: FastAPI application (сервисы кладутся в app.state)

    Yields:
        None

    """
    # =================================================================
    # Startup
    # =================================================================
    logger.info(
        "MapRoulette Mapping API запускается",
        env=settings.app_env,
        debug=settings.debug,
        log_level=settings.log_level,
    )

    redis_client = Redis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=False,  # Мы сами декодируем
    )

    task_store = await create_task_store(redis_client)
    lock_coordinator = LockCoordinator(redis_client)

    app.state.task_store = task_store
    app.state.mapping_service = MappingService(task_store, lock_coordinator)
    logger.info("MappingService создан", lock_timeout=lock_coordinator.lock_timeout)

    logger.info(
        "MapRoulette Mapping API готов",
        server_host=settings.server_host,
        server_port=settings.server_port,
    )

    yield

    # =================================================================
    # Shutdown
    # =================================================================
    logger.info("MapRoulette Mapping API останавливается")

    await redis_client.aclose()
    logger.info("Redis connection закрыт")


# =================================================================
# FastAPI Application
# =================================================================

app = FastAPI(
    title=settings.app_name,
    description="Выбор, блокировка и отображение задач MapRoulette для маппера",
    version=API_VERSION,
    lifespan=lifespan,
    debug=settings.debug,
    docs_url="/docs" if settings.debug else None,  # Swagger UI только в debug
    redoc_url="/redoc" if settings.debug else None,
)

# =================================================================
# Middleware
# =================================================================

app.add_middleware(TraceContextMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Prometheus metrics
if settings.app_env != "development":
    Instrumentator().instrument(app).expose(app)
    logger.info("Prometheus metrics enabled на /metrics")

setup_exception_handlers(app)

# =================================================================
# Routes
# =================================================================

app.include_router(api_router, prefix=API_PREFIX)


# =================================================================
# Root Endpoint
# =================================================================

@app.get("/", tags=["root"])
async def root() -> dict[str, str]:
    """Root endpoint.

    Returns:
        Информация о сервисе

    """
    return {
        "service": settings.app_name,
        "version": API_VERSION,
        "status": "running",
        "docs": "/docs" if settings.debug else "disabled",
    }
