"""Доменные модели MapRoulette Mapping API.

Task, Lock, UserSummary и Challenge. Блокировка намеренно не хранится
внутри Task: задача и её блокировка читаются независимо.
"""

from typing import Any

import orjson
from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.core.constants import GUEST_USER_ID, GUEST_USER_NAME
from src.core.enums import TaskPriority, TaskStatus
from src.utils.geo import geometry_location


class Task(BaseModel):
    """Задача картирования внутри челленджа."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(description="ID задачи (ключ последовательности)")
    parent_id: int = Field(description="ID челленджа-родителя")
    name: str = Field(description="Имя задачи")
    instruction: str | None = Field(default=None, description="Инструкция для маппера")
    geometry: str = Field(description="GeoJSON задачи в виде исходного JSON текста")
    status: int | None = Field(
        default=TaskStatus.CREATED,
        description="Код статуса (коды вне TaskStatus сохраняются как есть)",
    )
    priority: TaskPriority = Field(default=TaskPriority.HIGH, description="Приоритет задачи")
    created: str = Field(description="Timestamp создания (ISO 8601)")
    modified: str = Field(description="Timestamp последнего изменения (ISO 8601)")

    @field_validator("geometry", mode="before")
    @classmethod
    def validate_geometry(cls, value: Any) -> str:
        """Геометрия должна быть валидным JSON.

        Словари сериализуются, строки проверяются парсингом.
        """
        if isinstance(value, (dict, list)):
            return orjson.dumps(value).decode("utf-8")
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        if not isinstance(value, str):
            msg = "geometry должна быть JSON строкой или объектом"
            raise ValueError(msg)
        try:
            orjson.loads(value)
        except orjson.JSONDecodeError as e:
            msg = f"geometry не является валидным JSON: {e}"
            raise ValueError(msg) from e
        return value

    @property
    def location(self) -> tuple[float, float] | None:
        """Опорная точка (lon, lat) геометрии задачи."""
        return geometry_location(self.geometry)


class Lock(BaseModel):
    """Блокировка задачи. Пустая блокировка = задача не заблокирована."""

    model_config = ConfigDict(frozen=True)

    locked_time: str | None = Field(default=None, description="Время взятия блокировки")
    user_id: int | None = Field(default=None, description="ID владельца блокировки")

    @classmethod
    def empty(cls) -> "Lock":
        """Пустая блокировка."""
        return cls()

    @property
    def is_locked(self) -> bool:
        return self.locked_time is not None

    def held_by_other(self, user_id: int) -> bool:
        """Заблокирована ли задача кем-то кроме указанного пользователя."""
        return self.is_locked and self.user_id != user_id


class UserSummary(BaseModel):
    """Краткая информация о пользователе."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(description="ID пользователя в MapRoulette")
    osm_id: int = Field(description="ID пользователя в OSM")
    display_name: str = Field(description="Отображаемое имя")


class Challenge(BaseModel):
    """Челлендж: нужен только для привязки к проекту при фильтрации."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(ge=1, description="ID челленджа")
    project_id: int = Field(ge=1, description="ID проекта")
    name: str = Field(default="", description="Имя челленджа")


GUEST_USER = UserSummary(id=GUEST_USER_ID, osm_id=GUEST_USER_ID, display_name=GUEST_USER_NAME)
