"""MapRoulette Mapping API - API Module.

Главный роутер: собирает все sub-routers под API_PREFIX.
"""

from fastapi import APIRouter

from src.api.routes import challenges, mapping, monitor, tasks
from src.core.constants import API_PREFIX

# Создаем главный API роутер
router = APIRouter()

# Подключаем все sub-routers
router.include_router(mapping.router)
router.include_router(tasks.router)
router.include_router(challenges.router)
router.include_router(monitor.router)

__all__ = ["router", "API_PREFIX"]
