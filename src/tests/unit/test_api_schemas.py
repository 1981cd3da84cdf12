"""Unit тесты для API schemas."""

import pytest
from pydantic import ValidationError

from src.api.schemas.requests import CreateTaskRequest, RegisterChallengeRequest
from src.api.schemas.responses import LockResponse, MappingTaskResponse, TaskResponse
from src.core.enums import TaskPriority
from src.core.models import Lock
from src.tests.unit.fakes import make_task


class TestCreateTaskRequest:
    """Тесты для CreateTaskRequest schema."""

    def test_minimal_request(self) -> None:
        """Тест минимального валидного запроса."""
        request = CreateTaskRequest(parent_id=1, name="way/1", geometry={"type": "Point", "coordinates": [1, 2]})

        assert request.instruction is None
        assert request.priority == TaskPriority.HIGH  # default

    def test_priority_code(self) -> None:
        request = CreateTaskRequest(parent_id=1, name="way/1", geometry={}, priority=2)
        assert request.priority == TaskPriority.LOW

    @pytest.mark.parametrize(
        "payload",
        [
            {"parent_id": 0, "name": "x", "geometry": {}},
            {"parent_id": 1, "name": "", "geometry": {}},
            {"parent_id": 1, "name": "x"},
            {"parent_id": 1, "name": "x", "geometry": {}, "priority": 5},
        ],
    )
    def test_invalid(self, payload: dict) -> None:
        with pytest.raises(ValidationError):
            CreateTaskRequest(**payload)


class TestRegisterChallengeRequest:
    """Тесты для RegisterChallengeRequest schema."""

    def test_defaults(self) -> None:
        request = RegisterChallengeRequest(id=5, project_id=2)
        assert request.name == ""

    def test_invalid_project(self) -> None:
        with pytest.raises(ValidationError):
            RegisterChallengeRequest(id=5, project_id=-1)


class TestResponses:
    """Тесты для response schemas."""

    def test_task_response_from_task(self) -> None:
        response = TaskResponse.from_task(make_task(3, parent_id=9, priority=TaskPriority.MEDIUM))

        assert response.id == 3
        assert response.parent_id == 9
        assert response.status == 0
        assert response.priority == 1

    def test_lock_response(self) -> None:
        free = LockResponse.from_lock(1, Lock.empty())
        held = LockResponse.from_lock(1, Lock(locked_time="2024-01-01T12:00:00+00:00", user_id=8))

        assert free.locked is False
        assert free.user_id is None
        assert held.locked is True
        assert held.user_id == 8

    def test_mapping_task_schema_fields(self) -> None:
        """Схема документации совпадает с полями проекции."""
        properties = MappingTaskResponse.model_json_schema()["properties"]

        for field in ("id", "parentId", "statusName", "geometry", "locked", "last_modified_user"):
            assert field in properties
