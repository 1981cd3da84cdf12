"""Request Schemas для MapRoulette Mapping API.

Pydantic models для валидации входящих запросов.
"""

from typing import Any

from pydantic import BaseModel, Field

from src.core.enums import TaskPriority


class CreateTaskRequest(BaseModel):
    """Запрос на создание задачи.

    POST /api/v1/tasks/
    """

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "parent_id": 12,
                    "name": "way/123456",
                    "instruction": "Проверьте, что дорога соединена с перекрёстком",
                    "geometry": {"type": "Point", "coordinates": [30.31, 59.94]},
                    "priority": 0,
                },
            ]
        }
    }

    parent_id: int = Field(ge=1, description="ID челленджа")
    name: str = Field(min_length=1, description="Имя задачи")
    instruction: str | None = Field(default=None, description="Инструкция для маппера")
    geometry: dict[str, Any] = Field(description="GeoJSON задачи")
    priority: TaskPriority = Field(default=TaskPriority.HIGH, description="Приоритет (0 - High, 1 - Medium, 2 - Low)")


class RegisterChallengeRequest(BaseModel):
    """Регистрация челленджа в проекте.

    POST /api/v1/challenges/
    """

    id: int = Field(ge=1, description="ID челленджа")
    project_id: int = Field(ge=1, description="ID проекта")
    name: str = Field(default="", description="Имя челленджа")
