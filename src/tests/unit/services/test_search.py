"""Unit тесты для services/search.py."""

import pytest

from src.core.constants import DEFAULT_RANDOM_STATUSES
from src.core.enums import TaskPriority, TaskStatus
from src.services.search import (
    SearchParameters,
    matches_status_filter,
    negative_to_optional,
    parse_optional_id,
)
from src.shared.errors import InvalidSearchParameterError
from src.tests.unit.fakes import make_task


class TestOptionalIds:
    """Тесты разбора необязательных идентификаторов."""

    @pytest.mark.parametrize(("value", "expected"), [(None, None), (-1, None), (0, 0), (12, 12)])
    def test_negative_to_optional(self, value: int | None, expected: int | None) -> None:
        assert negative_to_optional(value) == expected

    @pytest.mark.parametrize(("raw", "expected"), [(None, None), ("", None), ("  ", None), ("-5", None), (" 7 ", 7)])
    def test_parse_optional_id(self, raw: str | None, expected: int | None) -> None:
        assert parse_optional_id(raw, "pid") == expected

    def test_parse_optional_id_invalid(self) -> None:
        with pytest.raises(InvalidSearchParameterError) as exc_info:
            parse_optional_id("abc", "pid")

        assert exc_info.value.details["parameter"] == "pid"


class TestFromQuery:
    """Тесты построения SearchParameters из query."""

    def test_empty_query(self) -> None:
        params = SearchParameters.from_query({})

        assert params == SearchParameters()
        assert params.effective_statuses == DEFAULT_RANDOM_STATUSES

    def test_full_query(self) -> None:
        params = SearchParameters.from_query({
            "pid": "3",
            "cid": "-1",
            "tStatus": "0, 3,,6",
            "tPriorities": "1",
            "tSearch": "  way  ",
        })

        assert params.project_id == 3
        assert params.challenge_id is None
        assert params.statuses == {TaskStatus.CREATED, TaskStatus.SKIPPED, TaskStatus.TOO_HARD}
        assert params.priorities == {TaskPriority.MEDIUM}
        assert params.task_search == "way"

    @pytest.mark.parametrize(
        ("key", "value"),
        [("tStatus", "1,x"), ("tStatus", "7"), ("tPriorities", "5"), ("cid", "1.5")],
    )
    def test_invalid_values(self, key: str, value: str) -> None:
        """Некорректный параметр - ошибка, а не молчаливое игнорирование."""
        with pytest.raises(InvalidSearchParameterError) as exc_info:
            SearchParameters.from_query({key: value})

        assert exc_info.value.details["parameter"] == key

    def test_frozen(self) -> None:
        params = SearchParameters()
        with pytest.raises(ValueError):
            params.project_id = 1  # type: ignore[misc]


class TestMatches:
    """Тесты фильтра случайного выбора."""

    def test_default_statuses(self) -> None:
        params = SearchParameters()

        assert params.matches(make_task(1, status=TaskStatus.CREATED))
        assert params.matches(make_task(1, status=TaskStatus.SKIPPED))
        assert params.matches(make_task(1, status=TaskStatus.TOO_HARD))
        assert not params.matches(make_task(1, status=TaskStatus.FIXED))

    def test_missing_status_counts_as_created(self) -> None:
        assert SearchParameters().matches(make_task(1, status=None))

    def test_explicit_statuses(self) -> None:
        params = SearchParameters(statuses=frozenset({TaskStatus.FIXED}))

        assert params.matches(make_task(1, status=TaskStatus.FIXED))
        assert not params.matches(make_task(1, status=TaskStatus.CREATED))

    def test_priorities(self) -> None:
        params = SearchParameters(priorities=frozenset({TaskPriority.LOW}))

        assert params.matches(make_task(1, priority=TaskPriority.LOW))
        assert not params.matches(make_task(1, priority=TaskPriority.HIGH))

    def test_name_search_case_insensitive(self) -> None:
        params = SearchParameters(task_search="Bridge")

        assert params.matches(make_task(1, name="missing bridge tag"))
        assert not params.matches(make_task(1, name="road"))

    def test_challenge_scope(self) -> None:
        params = SearchParameters(challenge_id=5)

        assert params.matches(make_task(1, parent_id=5))
        assert not params.matches(make_task(1, parent_id=6))

    def test_project_scope(self) -> None:
        params = SearchParameters(project_id=2)

        assert params.matches(make_task(1, parent_id=5), project_challenges={5, 6})
        assert not params.matches(make_task(1, parent_id=7), project_challenges={5, 6})
        assert not params.matches(make_task(1, parent_id=5))


class TestStatusFilter:
    """Тесты фильтра статусов навигации."""

    def test_empty_means_any(self) -> None:
        assert matches_status_filter(make_task(1, status=TaskStatus.DELETED), None)
        assert matches_status_filter(make_task(1, status=TaskStatus.DELETED), [])

    def test_filter(self) -> None:
        assert matches_status_filter(make_task(1, status=None), [TaskStatus.CREATED])
        assert not matches_status_filter(make_task(1, status=TaskStatus.FIXED), [TaskStatus.CREATED])
