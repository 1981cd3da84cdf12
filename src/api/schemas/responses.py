"""Response Schemas для MapRoulette Mapping API.

Pydantic models для API responses. JSON задачи для маппера описан
`MappingTaskResponse` только для документации: сам ответ собирает projector.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field

from src.core.models import Lock, Task
from src.shared.errors import ErrorResponse

__all__ = [
    "ChallengeResponse",
    "ErrorResponse",
    "HealthCheckResponse",
    "LockResponse",
    "MappingTaskResponse",
    "TaskResponse",
]


class MappingTaskResponse(BaseModel):
    """JSON задачи для маппера."""

    id: int = Field(description="ID задачи")
    parentId: int = Field(description="ID челленджа")
    name: str = Field(description="Имя задачи")
    instruction: str = Field(description="Инструкция")
    statusName: str = Field(description="Имя статуса")
    status: int = Field(description="Код статуса")
    geometry: dict[str, Any] = Field(description="GeoJSON задачи")
    locked: bool = Field(description="Заблокирована ли задача")
    created: str = Field(description="Timestamp создания")
    modified: str = Field(description="Timestamp последнего изменения")
    last_modified_user_osm_id: int | None = Field(default=None, description="OSM ID последнего изменившего")
    last_modified_user_id: int | None = Field(default=None, description="ID последнего изменившего")
    last_modified_user: str | None = Field(default=None, description="Имя последнего изменившего")


class TaskResponse(BaseModel):
    """Задача после создания или смены статуса."""

    id: int
    parent_id: int
    name: str
    instruction: str | None = None
    status: int | None
    priority: int
    created: str
    modified: str

    @classmethod
    def from_task(cls, task: Task) -> "TaskResponse":
        return cls(
            id=task.id,
            parent_id=task.parent_id,
            name=task.name,
            instruction=task.instruction,
            status=int(task.status) if task.status is not None else None,
            priority=int(task.priority),
            created=task.created,
            modified=task.modified,
        )


class LockResponse(BaseModel):
    """Состояние блокировки задачи."""

    task_id: int
    locked: bool
    locked_time: str | None = None
    user_id: int | None = None

    @classmethod
    def from_lock(cls, task_id: int, lock: Lock) -> "LockResponse":
        return cls(task_id=task_id, locked=lock.is_locked, locked_time=lock.locked_time, user_id=lock.user_id)


class ChallengeResponse(BaseModel):
    """Зарегистрированный челлендж."""

    id: int
    project_id: int
    name: str


class HealthCheckResponse(BaseModel):
    """Ответ health check."""

    status: Literal["healthy", "unhealthy"] = Field(description="Общий статус")
    redis: bool = Field(description="Redis доступен")
