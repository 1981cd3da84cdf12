"""Enums для MapRoulette Mapping API.

Централизованное хранилище всех enum'ов проекта.
Коды статусов и приоритетов совпадают с нумерацией MapRoulette.
"""

from enum import Enum


class TaskStatus(int, Enum):
    """Статус задачи картирования."""

    CREATED = 0
    FIXED = 1
    FALSE_POSITIVE = 2
    SKIPPED = 3
    DELETED = 4
    ALREADY_FIXED = 5
    TOO_HARD = 6
    DISABLED = 9


class TaskPriority(int, Enum):
    """Приоритет задачи (меньше = важнее)."""

    HIGH = 0
    MEDIUM = 1
    LOW = 2


class SequenceDirection(str, Enum):
    """Направление навигации по последовательности задач челленджа."""

    NEXT = "next"
    PREVIOUS = "previous"


class HealthStatus(str, Enum):
    """Статус здоровья сервиса."""

    HEALTHY = "healthy"  # Все компоненты работают
    UNHEALTHY = "unhealthy"  # Redis недоступен


STATUS_NAMES: dict[int, str] = {
    TaskStatus.CREATED: "Created",
    TaskStatus.FIXED: "Fixed",
    TaskStatus.FALSE_POSITIVE: "False_Positive",
    TaskStatus.SKIPPED: "Skipped",
    TaskStatus.DELETED: "Deleted",
    TaskStatus.ALREADY_FIXED: "Already_Fixed",
    TaskStatus.TOO_HARD: "Too_Hard",
    TaskStatus.DISABLED: "Disabled",
}

STATUS_CREATED_NAME = STATUS_NAMES[TaskStatus.CREATED]


def status_name(code: int | None) -> str | None:
    """Получить имя статуса по коду.

    Args:
        code: Код статуса (может отсутствовать)

    Returns:
        Имя статуса или None если код неизвестен

    """
    if code is None:
        return None
    return STATUS_NAMES.get(code)
