"""Mapping Service для MapRoulette Mapping API.

Путь отображения задачи: выбор задачи -> чтение блокировки -> чтение
последнего изменившего пользователя -> проекция. Блокировка и журнал
читаются отдельными запросами уже после выбора задачи.
"""

from datetime import datetime, timezone
from typing import Any

from src.core.enums import TaskPriority, TaskStatus
from src.core.models import Challenge, Lock, Task, UserSummary
from src.services.lock_coordinator import LockCoordinator
from src.services.projector import project_or_fail
from src.services.search import SearchParameters
from src.services.task_selector import TaskSelector
from src.services.task_store import TaskStore
from src.shared.errors import TaskNotFoundError


class MappingService:
    """Фасад для routes: выбор, отображение и смена статуса задач."""

    def __init__(
        self,
        store: TaskStore,
        locks: LockCoordinator,
        selector: TaskSelector | None = None,
    ) -> None:
        """Инициализировать Mapping Service.

        Args:
            store: Хранилище задач
            locks: Координатор блокировок
            selector: Селектор задач (по умолчанию строится поверх store и locks)

        """
        self.store = store
        self.locks = locks
        self.selector = selector or TaskSelector(store, locks)

    async def _display(self, task: Task | None) -> dict[str, Any]:
        if task is None:
            return project_or_fail(None)

        lock = await self.locks.current_lock(task.id)
        last_user = await self.store.last_modified_user(task.id)
        return project_or_fail(task, lock, last_user)

    # =================================================================
    # Display path
    # =================================================================

    async def display_task(self, task_id: int) -> dict[str, Any]:
        """JSON конкретной задачи.

        Raises:
            TaskNotFoundError: Задача не найдена

        """
        return await self._display(await self.store.get_task(task_id))

    async def random_task(
        self,
        user: UserSummary,
        params: SearchParameters,
        proximity_id: int | None = None,
    ) -> dict[str, Any]:
        """JSON случайной задачи под фильтр."""
        task = await self.selector.get_random_task(user, params, proximity_id)
        return await self._display(task)

    async def random_task_with_priority(
        self,
        user: UserSummary,
        params: SearchParameters,
        proximity_id: int | None = None,
    ) -> dict[str, Any]:
        """JSON случайной задачи с учётом приоритета."""
        task = await self.selector.get_random_task_with_priority(user, params, proximity_id)
        return await self._display(task)

    async def next_task(self, parent_id: int, current_task_id: int, params: SearchParameters) -> dict[str, Any]:
        """JSON следующей задачи челленджа."""
        task = await self.selector.get_next_in_sequence(parent_id, current_task_id, params.statuses)
        return await self._display(task)

    async def previous_task(self, parent_id: int, current_task_id: int, params: SearchParameters) -> dict[str, Any]:
        """JSON предыдущей задачи челленджа."""
        task = await self.selector.get_previous_in_sequence(parent_id, current_task_id, params.statuses)
        return await self._display(task)

    # =================================================================
    # Mutations
    # =================================================================

    async def register_challenge(self, challenge: Challenge) -> Challenge:
        return await self.store.register_challenge(challenge)

    async def create_task(
        self,
        parent_id: int,
        name: str,
        geometry: str | dict[str, Any],
        instruction: str | None = None,
        priority: TaskPriority = TaskPriority.HIGH,
    ) -> Task:
        return await self.store.create_task(
            parent_id=parent_id,
            name=name,
            geometry=geometry,
            instruction=instruction,
            priority=priority,
        )

    async def set_task_status(self, task_id: int, status: TaskStatus, user: UserSummary) -> Task:
        """Сменить статус задачи и снять блокировку пользователя.

        Raises:
            TaskNotFoundError: Задача не найдена
            TaskLockedError: Задача заблокирована другим пользователем

        """
        if await self.store.get_task(task_id) is None:
            raise TaskNotFoundError(task_id)

        # Снятие сверяет владельца атомарно, статус пишется только после него
        await self.locks.release(task_id, user)
        return await self.store.update_status(task_id, status, user)

    async def lock_task(self, task_id: int, user: UserSummary) -> Lock:
        """Взять блокировку существующей задачи.

        Raises:
            TaskNotFoundError: Задача не найдена
            TaskLockedError: Задача заблокирована другим пользователем

        """
        if await self.store.get_task(task_id) is None:
            raise TaskNotFoundError(task_id)
        return await self.locks.acquire(task_id, user, datetime.now(timezone.utc).isoformat())

    async def unlock_task(self, task_id: int, user: UserSummary) -> bool:
        """Снять свою блокировку задачи."""
        if await self.store.get_task(task_id) is None:
            raise TaskNotFoundError(task_id)
        return await self.locks.release(task_id, user)

    async def task_lock(self, task_id: int) -> Lock:
        """Текущая блокировка существующей задачи."""
        if await self.store.get_task(task_id) is None:
            raise TaskNotFoundError(task_id)
        return await self.locks.current_lock(task_id)
