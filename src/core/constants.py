"""Константы для MapRoulette Mapping API.

Централизованное хранилище всех магических чисел и строк.
"""

from src.core.enums import TaskStatus

# === HTTP и API ===
API_PREFIX = "/api/v1"
API_VERSION = "1.0.0"

# === Пользователи ===
GUEST_USER_ID = -998  # Как DEFAULT_GUEST_USER_ID в MapRoulette
GUEST_USER_NAME = "Guest"

# === Выбор задач ===
# Статусы, доступные для случайного выбора, если фильтр статусов пуст
DEFAULT_RANDOM_STATUSES = frozenset({
    TaskStatus.CREATED,
    TaskStatus.SKIPPED,
    TaskStatus.TOO_HARD,
})

# === Redis ключи ===
TASK_ID_COUNTER_KEY = "task:next_id"
ALL_TASKS_KEY = "tasks:all"
TASK_KEY = "task:{task_id}"
TASK_HISTORY_KEY = "task:{task_id}:history"
CHALLENGE_KEY = "challenge:{challenge_id}"
CHALLENGE_TASKS_KEY = "challenge:{challenge_id}:tasks"
PROJECT_CHALLENGES_KEY = "project:{project_id}:challenges"
LOCK_KEY = "lock:task:{task_id}"
