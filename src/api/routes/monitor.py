"""Monitor API Routes для MapRoulette Mapping API.

Endpoints для мониторинга сервиса.
"""

from fastapi import APIRouter

from src.api.schemas.responses import HealthCheckResponse
from src.core.dependencies import TaskStoreDep
from src.core.enums import HealthStatus

router = APIRouter(prefix="/monitor", tags=["monitor"])


@router.get(
    "/health",
    summary="Health check",
    description="Проверяет доступность Redis",
)
async def health_check(store: TaskStoreDep) -> HealthCheckResponse:
    """Health check сервиса.

    Returns:
        HealthCheckResponse со статусом Redis

    """
    redis_ok = await store.health_check()
    overall = HealthStatus.HEALTHY if redis_ok else HealthStatus.UNHEALTHY
    return HealthCheckResponse(status=overall.value, redis=redis_ok)
