"""Response Projector: Task + Lock + последний изменивший пользователь -> JSON.

Запись собирается как dict и сериализуется orjson целиком, поэтому все
текстовые поля экранируются одинаково. Геометрия уже является JSON
текстом и встраивается как есть через orjson.Fragment.
"""

from typing import Any

import orjson

from src.core.enums import STATUS_CREATED_NAME, TaskStatus, status_name
from src.core.models import Lock, Task, UserSummary
from src.shared.errors import TaskNotFoundError


def project(task: Task, lock: Lock, last_modified_user: UserSummary | None = None) -> dict[str, Any]:
    """Построить JSON запись задачи для маппера.

    Args:
        task: Задача
        lock: Текущая блокировка (пустая, если задача свободна)
        last_modified_user: Последний изменивший задачу пользователь

    Returns:
        Запись, готовая к сериализации через `render`

    """
    current_status = int(task.status) if task.status is not None else int(TaskStatus.CREATED)

    record: dict[str, Any] = {
        "id": task.id,
        "parentId": task.parent_id,
        "name": task.name,
        "instruction": task.instruction or "",
        "statusName": status_name(current_status) or STATUS_CREATED_NAME,
        "status": current_status,
    }

    if last_modified_user is not None:
        record["last_modified_user_osm_id"] = last_modified_user.osm_id
        record["last_modified_user_id"] = last_modified_user.id
        record["last_modified_user"] = last_modified_user.display_name

    record.update({
        "geometry": orjson.Fragment(task.geometry),
        "locked": lock.locked_time is not None,
        "created": task.created,
        "modified": task.modified,
    })
    return record


def project_or_fail(
    task: Task | None,
    lock: Lock | None = None,
    last_modified_user: UserSummary | None = None,
) -> dict[str, Any]:
    """Как `project`, но отсутствие задачи - это ошибка.

    Raises:
        TaskNotFoundError: task is None

    """
    if task is None:
        raise TaskNotFoundError()
    return project(task, lock or Lock.empty(), last_modified_user)


def render(record: dict[str, Any]) -> bytes:
    """Сериализовать запись в JSON."""
    return orjson.dumps(record)
