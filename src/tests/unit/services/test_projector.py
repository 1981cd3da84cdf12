"""Unit тесты для services/projector.py."""

import orjson
import pytest

from src.core.enums import TaskStatus
from src.core.models import Lock, UserSummary
from src.services.projector import project, project_or_fail, render
from src.shared.errors import TaskNotFoundError
from src.tests.unit.fakes import make_task


class TestProject:
    """Тесты проекции задачи в JSON."""

    def test_basic_record(self) -> None:
        task = make_task(3, parent_id=9, status=TaskStatus.SKIPPED, instruction="Проверьте тег")

        data = orjson.loads(render(project(task, Lock.empty())))

        assert data == {
            "id": 3,
            "parentId": 9,
            "name": "task-3",
            "instruction": "Проверьте тег",
            "statusName": "Skipped",
            "status": 3,
            "geometry": {"type": "Point", "coordinates": [0.0, 0.0]},
            "locked": False,
            "created": "2024-01-01T00:00:00+00:00",
            "modified": "2024-01-02T00:00:00+00:00",
        }

    def test_geometry_embedded_verbatim(self) -> None:
        """Геометрия встраивается как JSON, а не как строка."""
        task = make_task(1, geometry='{"type":"LineString","coordinates":[[1,2],[3,4]]}')

        raw = render(project(task, Lock.empty()))

        assert b'"geometry":{"type":"LineString","coordinates":[[1,2],[3,4]]}' in raw

    def test_instruction_escaped(self) -> None:
        """Кавычки в тексте не ломают JSON."""
        task = make_task(1, name='way "A"', instruction='He said "hi"\n')

        data = orjson.loads(render(project(task, Lock.empty())))

        assert data["instruction"] == 'He said "hi"\n'
        assert data["name"] == 'way "A"'

    def test_missing_instruction_is_empty_string(self) -> None:
        data = project(make_task(1, instruction=None), Lock.empty())
        assert data["instruction"] == ""

    def test_missing_status_is_created(self) -> None:
        data = project(make_task(1, status=None), Lock.empty())

        assert data["status"] == 0
        assert data["statusName"] == "Created"

    def test_unknown_status_is_created(self) -> None:
        """Неизвестный код сохраняется, имя статуса по умолчанию Created."""
        data = project(make_task(1, status=7), Lock.empty())

        assert data["status"] == 7
        assert data["statusName"] == "Created"

    def test_locked(self) -> None:
        data = project(make_task(1), Lock(locked_time="2024-01-01T12:00:00+00:00", user_id=8))
        assert data["locked"] is True

    def test_last_modified_user(self) -> None:
        user = UserSummary(id=7, osm_id=100, display_name="alice")

        data = project(make_task(1), Lock.empty(), user)

        assert data["last_modified_user_osm_id"] == 100
        assert data["last_modified_user_id"] == 7
        assert data["last_modified_user"] == "alice"

    def test_no_user_fields_without_history(self) -> None:
        data = project(make_task(1), Lock.empty())
        assert "last_modified_user" not in data
        assert "last_modified_user_id" not in data


class TestProjectOrFail:
    """Тесты project_or_fail."""

    def test_missing_task(self) -> None:
        with pytest.raises(TaskNotFoundError) as exc_info:
            project_or_fail(None)

        assert exc_info.value.message == "Could not find task"

    def test_default_lock_is_empty(self) -> None:
        assert project_or_fail(make_task(1))["locked"] is False
