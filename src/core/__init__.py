"""MapRoulette Mapping API - Core module.

Ядро приложения: enums, константы, доменные модели, зависимости.
"""

from src.core.constants import API_PREFIX, API_VERSION
from src.core.enums import TaskPriority, TaskStatus, status_name

__all__ = [
    "API_PREFIX",
    "API_VERSION",
    "TaskPriority",
    "TaskStatus",
    "status_name",
]
