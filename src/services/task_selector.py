"""Task Selector для MapRoulette Mapping API.

Четыре стратегии выбора задачи:
- случайная (опционально ближе к заданной задаче)
- случайная с учётом приоритета (High -> Medium -> Low)
- следующая в последовательности челленджа (с переходом по кругу)
- предыдущая в последовательности челленджа (с переходом по кругу)

Пустой набор кандидатов - это не ошибка, а None / пустой список.
Блокировки к результату не прикладываются: это делает путь отображения.
"""

import math
import random
from collections.abc import Iterable, Sequence
from typing import Protocol

from src.config import settings
from src.core.enums import SequenceDirection, TaskPriority, TaskStatus
from src.core.models import Lock, Task, UserSummary
from src.services.search import SearchParameters
from src.utils.geo import haversine_km
from src.utils.logging import get_logger

logger = get_logger()


class TaskSource(Protocol):
    """Чтение задач, нужное селектору (реализуется TaskStore)."""

    async def get_task(self, task_id: int) -> Task | None: ...

    async def random_candidates(self, params: SearchParameters) -> list[Task]: ...

    async def sequence_neighbor(
        self,
        parent_id: int,
        current_id: int | None,
        direction: SequenceDirection,
        statuses: Iterable[TaskStatus] | None = None,
    ) -> Task | None: ...


class LockSource(Protocol):
    """Чтение блокировок, нужное селектору (реализуется LockCoordinator)."""

    async def current_locks(self, task_ids: Iterable[int]) -> dict[int, Lock]: ...


class TaskSelector:
    """Выбор задачи для маппера.

    Случайный выбор по близости: кандидаты сортируются по расстоянию до
    опорной задачи, и задача выбирается равновероятно среди
    `proximity_pool_size` ближайших. При фиксированном seed выбор
    детерминирован.
    """

    def __init__(
        self,
        store: TaskSource,
        locks: LockSource,
        rng: random.Random | None = None,
        proximity_pool_size: int | None = None,
    ) -> None:
        """Инициализировать Task Selector.

        Args:
            store: Источник задач
            locks: Источник блокировок
            rng: Генератор случайных чисел (по умолчанию с seed из settings)
            proximity_pool_size: Размер пула ближайших задач

        Raises:
            ValueError: Размер пула меньше 1

        """
        if proximity_pool_size is None:
            proximity_pool_size = settings.proximity_pool_size
        if proximity_pool_size < 1:
            raise ValueError(f"proximity_pool_size must be >= 1, got {proximity_pool_size}")

        self.store = store
        self.locks = locks
        self.rng = rng if rng is not None else random.Random(settings.random_seed)
        self.proximity_pool_size = proximity_pool_size

    # =================================================================
    # Random selection
    # =================================================================

    async def get_random_tasks(
        self,
        user: UserSummary,
        params: SearchParameters,
        limit: int = 1,
        proximity_id: int | None = None,
    ) -> list[Task]:
        """Случайные задачи, подходящие под фильтр.

        Args:
            user: Эффективный пользователь (его собственные блокировки не мешают)
            params: Параметры поиска
            limit: Сколько задач вернуть
            proximity_id: Опорная задача для выбора по близости

        Returns:
            До `limit` различных задач

        """
        candidates = await self._available_candidates(user, params, proximity_id)
        origin = await self._proximity_origin(proximity_id)
        picked = self._pick(candidates, limit, origin)

        logger.debug(
            "Случайный выбор задач",
            user_id=user.id,
            candidates=len(candidates),
            picked=[task.id for task in picked],
            proximity_id=proximity_id,
        )
        return picked

    async def get_random_task(
        self,
        user: UserSummary,
        params: SearchParameters,
        proximity_id: int | None = None,
    ) -> Task | None:
        """Одна случайная задача или None."""
        tasks = await self.get_random_tasks(user, params, 1, proximity_id)
        return tasks[0] if tasks else None

    async def get_random_tasks_with_priority(
        self,
        user: UserSummary,
        params: SearchParameters,
        limit: int = 1,
        proximity_id: int | None = None,
    ) -> list[Task]:
        """Случайные задачи с учётом приоритета.

        Уровень с более высоким приоритетом исчерпывается прежде, чем
        рассматривается следующий.
        """
        candidates = await self._available_candidates(user, params, proximity_id)
        origin = await self._proximity_origin(proximity_id)

        picked: list[Task] = []
        for tier in sorted(TaskPriority):
            if len(picked) >= limit:
                break
            tier_candidates = [task for task in candidates if task.priority == tier]
            if tier_candidates:
                picked.extend(self._pick(tier_candidates, limit - len(picked), origin))

        logger.debug(
            "Случайный выбор задач с приоритетом",
            user_id=user.id,
            candidates=len(candidates),
            picked=[task.id for task in picked],
            proximity_id=proximity_id,
        )
        return picked

    async def get_random_task_with_priority(
        self,
        user: UserSummary,
        params: SearchParameters,
        proximity_id: int | None = None,
    ) -> Task | None:
        """Одна случайная задача из наивысшего непустого уровня приоритета."""
        tasks = await self.get_random_tasks_with_priority(user, params, 1, proximity_id)
        return tasks[0] if tasks else None

    # =================================================================
    # Sequence navigation
    # =================================================================

    async def get_next_in_sequence(
        self,
        parent_id: int,
        current_task_id: int,
        statuses: Iterable[TaskStatus] | None = None,
    ) -> Task | None:
        """Следующая задача челленджа (после последней - первая)."""
        return await self._sequence(parent_id, current_task_id, SequenceDirection.NEXT, statuses)

    async def get_previous_in_sequence(
        self,
        parent_id: int,
        current_task_id: int,
        statuses: Iterable[TaskStatus] | None = None,
    ) -> Task | None:
        """Предыдущая задача челленджа (перед первой - последняя)."""
        return await self._sequence(parent_id, current_task_id, SequenceDirection.PREVIOUS, statuses)

    async def _sequence(
        self,
        parent_id: int,
        current_task_id: int,
        direction: SequenceDirection,
        statuses: Iterable[TaskStatus] | None,
    ) -> Task | None:
        allowed = frozenset(statuses or ())
        task = await self.store.sequence_neighbor(parent_id, current_task_id, direction, allowed)
        if task is None:
            # Переход по кругу к краю последовательности
            task = await self.store.sequence_neighbor(parent_id, None, direction, allowed)

        logger.debug(
            "Навигация по последовательности",
            parent_id=parent_id,
            current_task_id=current_task_id,
            direction=direction.value,
            task_id=task.id if task else None,
        )
        return task

    # =================================================================
    # Helpers
    # =================================================================

    async def _available_candidates(
        self,
        user: UserSummary,
        params: SearchParameters,
        proximity_id: int | None,
    ) -> list[Task]:
        """Кандидаты без опорной задачи и без задач, заблокированных другими."""
        candidates = [
            task for task in await self.store.random_candidates(params)
            if task.id != proximity_id
        ]
        if not candidates:
            return []

        locks = await self.locks.current_locks(task.id for task in candidates)
        return [
            task for task in candidates
            if not locks.get(task.id, Lock.empty()).held_by_other(user.id)
        ]

    async def _proximity_origin(self, proximity_id: int | None) -> tuple[float, float] | None:
        """Опорная точка для выбора по близости (None = равновероятный выбор)."""
        if proximity_id is None:
            return None

        task = await self.store.get_task(proximity_id)
        location = task.location if task else None
        if location is None:
            logger.warning(
                "Опорная задача не найдена или без координат, выбор без учёта близости",
                proximity_id=proximity_id,
            )
        return location

    def _pick(
        self,
        candidates: Sequence[Task],
        limit: int,
        origin: tuple[float, float] | None,
    ) -> list[Task]:
        if not candidates or limit <= 0:
            return []

        pool = list(candidates)
        if origin is not None:
            def distance(task: Task) -> float:
                location = task.location
                return haversine_km(origin, location) if location else math.inf

            pool.sort(key=lambda task: (distance(task), task.id))
            pool = pool[:max(self.proximity_pool_size, limit)]

        return self.rng.sample(pool, min(limit, len(pool)))
