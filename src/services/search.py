"""Search Parameters для выбора задач.

Сырые query параметры разбираются один раз в неизменяемый SearchParameters;
дальше по цепочке выбора передаётся только он.

Query параметры:
    pid          -> ID проекта (отрицательный = без ограничения)
    cid          -> ID челленджа (отрицательный = без ограничения)
    tStatus      -> коды статусов через запятую
    tPriorities  -> коды приоритетов через запятую
    tSearch      -> подстрока имени задачи
"""

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import TypeVar

from pydantic import BaseModel, ConfigDict, Field

from src.core.constants import DEFAULT_RANDOM_STATUSES
from src.core.enums import TaskPriority, TaskStatus
from src.core.models import Task
from src.shared.errors import InvalidSearchParameterError

E = TypeVar("E", bound=Enum)

PROJECT_PARAM = "pid"
CHALLENGE_PARAM = "cid"
STATUS_PARAM = "tStatus"
PRIORITY_PARAM = "tPriorities"
SEARCH_PARAM = "tSearch"


def negative_to_optional(value: int | None) -> int | None:
    """Отрицательный идентификатор означает "не задан"."""
    if value is None or value < 0:
        return None
    return value


def parse_optional_id(raw: str | None, name: str) -> int | None:
    """Разобрать необязательный числовой идентификатор.

    Args:
        raw: Сырое значение параметра
        name: Имя параметра (для сообщения об ошибке)

    Returns:
        Идентификатор или None, если параметр пуст или отрицателен

    Raises:
        InvalidSearchParameterError: Значение не является целым числом

    """
    if raw is None or not raw.strip():
        return None
    try:
        value = int(raw.strip())
    except ValueError as e:
        raise InvalidSearchParameterError(name, raw, "ожидается целое число") from e
    return negative_to_optional(value)


def _parse_codes(raw: str | None, name: str, enum_cls: type[E]) -> frozenset[E]:
    """Разобрать список кодов enum через запятую."""
    if raw is None or not raw.strip():
        return frozenset()

    values: set[E] = set()
    for token in raw.split(","):
        token = token.strip()
        if not token:
            continue
        try:
            values.add(enum_cls(int(token)))
        except ValueError as e:
            raise InvalidSearchParameterError(name, raw, f"неизвестный код '{token}'") from e
    return frozenset(values)


class SearchParameters(BaseModel):
    """Неизменяемый набор фильтров для выбора задач."""

    model_config = ConfigDict(frozen=True)

    statuses: frozenset[TaskStatus] = Field(
        default_factory=frozenset,
        description="Допустимые статусы (пусто = статусы по умолчанию для случайного выбора)",
    )
    priorities: frozenset[TaskPriority] = Field(
        default_factory=frozenset,
        description="Допустимые приоритеты (пусто = любые)",
    )
    project_id: int | None = Field(default=None, description="Ограничение по проекту")
    challenge_id: int | None = Field(default=None, description="Ограничение по челленджу")
    task_search: str | None = Field(default=None, description="Подстрока имени задачи")

    @classmethod
    def from_query(cls, params: Mapping[str, str]) -> "SearchParameters":
        """Построить SearchParameters из query параметров запроса.

        Raises:
            InvalidSearchParameterError: Некорректное значение параметра

        """
        task_search = (params.get(SEARCH_PARAM) or "").strip()
        return cls(
            statuses=_parse_codes(params.get(STATUS_PARAM), STATUS_PARAM, TaskStatus),
            priorities=_parse_codes(params.get(PRIORITY_PARAM), PRIORITY_PARAM, TaskPriority),
            project_id=parse_optional_id(params.get(PROJECT_PARAM), PROJECT_PARAM),
            challenge_id=parse_optional_id(params.get(CHALLENGE_PARAM), CHALLENGE_PARAM),
            task_search=task_search or None,
        )

    @property
    def effective_statuses(self) -> frozenset[TaskStatus]:
        """Статусы для случайного выбора с учётом значений по умолчанию."""
        return self.statuses or DEFAULT_RANDOM_STATUSES

    def matches(self, task: Task, project_challenges: Iterable[int] | None = None) -> bool:
        """Подходит ли задача под фильтр случайного выбора.

        Args:
            task: Проверяемая задача
            project_challenges: Челленджи проекта (если задан project_id)

        """
        status = task.status if task.status is not None else TaskStatus.CREATED
        if status not in self.effective_statuses:
            return False
        if self.priorities and task.priority not in self.priorities:
            return False
        if self.task_search and self.task_search.lower() not in task.name.lower():
            return False
        return self.matches_scope(task, project_challenges)

    def matches_scope(self, task: Task, project_challenges: Iterable[int] | None = None) -> bool:
        """Проверка ограничения по челленджу и проекту."""
        if self.challenge_id is not None and task.parent_id != self.challenge_id:
            return False
        if self.project_id is not None:
            return project_challenges is not None and task.parent_id in set(project_challenges)
        return True


def matches_status_filter(task: Task, statuses: Iterable[TaskStatus] | None) -> bool:
    """Фильтр статусов для навигации по последовательности (пусто = любой статус)."""
    allowed = frozenset(statuses or ())
    if not allowed:
        return True
    status = task.status if task.status is not None else TaskStatus.CREATED
    return status in allowed
