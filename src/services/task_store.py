"""Task Store для MapRoulette Mapping API.

Redis хранилище задач, привязок челленджей к проектам и журнала изменений.

Redis Schema:
    task:next_id                -> String (счётчик ID задач)
    task:{id}                   -> Hash (данные задачи)
    tasks:all                   -> Sorted Set (все задачи, score = id)
    challenge:{id}              -> Hash (id, project_id, name)
    challenge:{id}:tasks        -> Sorted Set (задачи челленджа, score = id)
    project:{id}:challenges     -> Set (ID челленджей проекта)
    task:{id}:history           -> List (журнал изменений, новые первыми)
"""

from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

import orjson
from redis.asyncio import Redis

from src.core.constants import (
    ALL_TASKS_KEY,
    CHALLENGE_KEY,
    CHALLENGE_TASKS_KEY,
    PROJECT_CHALLENGES_KEY,
    TASK_HISTORY_KEY,
    TASK_ID_COUNTER_KEY,
    TASK_KEY,
)
from src.core.enums import SequenceDirection, TaskPriority, TaskStatus
from src.core.models import Challenge, Task, UserSummary
from src.services.search import SearchParameters, matches_status_filter
from src.shared.errors import TaskNotFoundError, safe_deco
from src.utils.logging import get_logger

logger = get_logger()

SEQUENCE_BATCH_SIZE = 100


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _decode(value: Any) -> str:
    return value.decode("utf-8") if isinstance(value, bytes) else str(value)


def _decode_hash(data: dict[Any, Any]) -> dict[str, str]:
    return {_decode(k): _decode(v) for k, v in data.items()}


def task_from_hash(data: dict[Any, Any]) -> Task | None:
    """Собрать Task из Redis Hash (None для пустого hash)."""
    if not data:
        return None

    fields = _decode_hash(data)
    status = fields.get("status")
    return Task(
        id=int(fields["id"]),
        parent_id=int(fields["parent_id"]),
        name=fields.get("name", ""),
        instruction=fields.get("instruction"),
        geometry=fields["geometry"],
        status=int(status) if status not in (None, "") else None,
        priority=TaskPriority(int(fields.get("priority", TaskPriority.HIGH))),
        created=fields["created"],
        modified=fields["modified"],
    )


def task_to_hash(task: Task) -> dict[str, str]:
    """Сериализовать Task в Redis Hash."""
    data = {
        "id": str(task.id),
        "parent_id": str(task.parent_id),
        "name": task.name,
        "geometry": task.geometry,
        "priority": str(int(task.priority)),
        "created": task.created,
        "modified": task.modified,
    }
    if task.instruction is not None:
        data["instruction"] = task.instruction
    if task.status is not None:
        data["status"] = str(int(task.status))
    return data


class TaskStore:
    """Redis-based хранилище задач.

    Обеспечивает:
    - Создание задач и регистрацию челленджей
    - Выборку кандидатов для случайного выбора
    - Навигацию по последовательности задач челленджа
    - Журнал изменений статуса (последний изменивший пользователь)

    Состояние задач не кэшируется: каждый вызов читает Redis заново.
    """

    def __init__(self, redis_client: Redis) -> None:
        """Инициализировать Task Store.

        Args:
            redis_client: Async Redis client

        """
        self.redis = redis_client

    # =================================================================
    # Challenges
    # =================================================================

    @safe_deco
    async def register_challenge(self, challenge: Challenge) -> Challenge:
        """Зарегистрировать челлендж и привязать его к проекту."""
        previous = await self.get_challenge(challenge.id)

        await self.redis.hset(  # type: ignore[misc]
            CHALLENGE_KEY.format(challenge_id=challenge.id),
            mapping={
                "id": str(challenge.id),
                "project_id": str(challenge.project_id),
                "name": challenge.name,
            },
        )
        if previous is not None and previous.project_id != challenge.project_id:
            await self.redis.srem(  # type: ignore[misc]
                PROJECT_CHALLENGES_KEY.format(project_id=previous.project_id),
                str(challenge.id),
            )
        await self.redis.sadd(  # type: ignore[misc]
            PROJECT_CHALLENGES_KEY.format(project_id=challenge.project_id),
            str(challenge.id),
        )

        logger.info("Челлендж зарегистрирован", challenge_id=challenge.id, project_id=challenge.project_id)
        return challenge

    @safe_deco
    async def get_challenge(self, challenge_id: int) -> Challenge | None:
        data = await self.redis.hgetall(CHALLENGE_KEY.format(challenge_id=challenge_id))  # type: ignore[misc]
        if not data:
            return None
        fields = _decode_hash(data)
        return Challenge(id=int(fields["id"]), project_id=int(fields["project_id"]), name=fields.get("name", ""))

    @safe_deco
    async def project_challenges(self, project_id: int) -> set[int]:
        """ID челленджей проекта."""
        members = await self.redis.smembers(PROJECT_CHALLENGES_KEY.format(project_id=project_id))  # type: ignore[misc]
        return {int(_decode(m)) for m in members}

    # =================================================================
    # Tasks
    # =================================================================

    @safe_deco
    async def create_task(
        self,
        parent_id: int,
        name: str,
        geometry: str | dict[str, Any],
        instruction: str | None = None,
        status: TaskStatus = TaskStatus.CREATED,
        priority: TaskPriority = TaskPriority.HIGH,
    ) -> Task:
        """Создать задачу.

        ID выдаётся счётчиком Redis и монотонно растёт, поэтому он же
        служит ключом последовательности внутри челленджа.

        Args:
            parent_id: ID челленджа
            name: Имя задачи
            geometry: GeoJSON (строка или объект)
            instruction: Инструкция (опционально)
            status: Начальный статус
            priority: Приоритет

        Returns:
            Созданная задача

        """
        task_id = int(await self.redis.incr(TASK_ID_COUNTER_KEY))  # type: ignore[misc]
        timestamp = _now()

        task = Task(
            id=task_id,
            parent_id=parent_id,
            name=name,
            instruction=instruction,
            geometry=geometry,  # type: ignore[arg-type]
            status=status,
            priority=priority,
            created=timestamp,
            modified=timestamp,
        )

        await self.redis.hset(TASK_KEY.format(task_id=task_id), mapping=task_to_hash(task))  # type: ignore[misc]
        await self.redis.zadd(ALL_TASKS_KEY, {str(task_id): task_id})
        await self.redis.zadd(CHALLENGE_TASKS_KEY.format(challenge_id=parent_id), {str(task_id): task_id})

        logger.info("Задача создана", task_id=task_id, parent_id=parent_id, priority=int(priority))
        return task

    @safe_deco
    async def get_task(self, task_id: int) -> Task | None:
        """Получить задачу по ID.

        Args:
            task_id: ID задачи

        Returns:
            Задача или None если не найдена

        """
        data = await self.redis.hgetall(TASK_KEY.format(task_id=task_id))  # type: ignore[misc]
        return task_from_hash(data)

    @safe_deco
    async def get_tasks(self, task_ids: Iterable[int]) -> list[Task]:
        """Получить задачи пачкой (отсутствующие пропускаются, порядок сохраняется)."""
        ids = list(task_ids)
        if not ids:
            return []

        async with self.redis.pipeline(transaction=False) as pipe:
            for task_id in ids:
                pipe.hgetall(TASK_KEY.format(task_id=task_id))
            results = await pipe.execute()

        return [task for task in (task_from_hash(data) for data in results) if task is not None]

    @safe_deco
    async def random_candidates(self, params: SearchParameters) -> list[Task]:
        """Все задачи, подходящие под фильтр случайного выбора.

        Args:
            params: Параметры поиска

        Returns:
            Подходящие задачи (в порядке ID)

        """
        project_challenges: set[int] | None = None
        if params.project_id is not None:
            project_challenges = await self.project_challenges(params.project_id)

        if params.challenge_id is not None:
            scopes = [CHALLENGE_TASKS_KEY.format(challenge_id=params.challenge_id)]
        elif project_challenges is not None:
            scopes = [CHALLENGE_TASKS_KEY.format(challenge_id=cid) for cid in sorted(project_challenges)]
        else:
            scopes = [ALL_TASKS_KEY]

        task_ids: list[int] = []
        for scope in scopes:
            members = await self.redis.zrange(scope, 0, -1)
            task_ids.extend(int(_decode(m)) for m in members)

        tasks = await self.get_tasks(sorted(set(task_ids)))
        candidates = [task for task in tasks if params.matches(task, project_challenges)]

        logger.debug(
            "Кандидаты для случайного выбора",
            scanned=len(tasks),
            matched=len(candidates),
            project_id=params.project_id,
            challenge_id=params.challenge_id,
        )
        return candidates

    @safe_deco
    async def sequence_neighbor(
        self,
        parent_id: int,
        current_id: int | None,
        direction: SequenceDirection,
        statuses: Iterable[TaskStatus] | None = None,
    ) -> Task | None:
        """Соседняя задача в последовательности челленджа.

        Args:
            parent_id: ID челленджа
            current_id: ID текущей задачи (None = начать с края последовательности)
            direction: NEXT - ближайший больший ID, PREVIOUS - ближайший меньший
            statuses: Допустимые статусы (пусто = любой)

        Returns:
            Задача или None если подходящей нет

        """
        key = CHALLENGE_TASKS_KEY.format(challenge_id=parent_id)
        allowed = frozenset(statuses or ())
        offset = 0

        while True:
            if direction == SequenceDirection.NEXT:
                lower = "-inf" if current_id is None else f"({current_id}"
                members = await self.redis.zrangebyscore(key, lower, "+inf", start=offset, num=SEQUENCE_BATCH_SIZE)
            else:
                upper = "+inf" if current_id is None else f"({current_id}"
                members = await self.redis.zrevrangebyscore(key, upper, "-inf", start=offset, num=SEQUENCE_BATCH_SIZE)

            if not members:
                return None

            for task in await self.get_tasks(int(_decode(m)) for m in members):
                if matches_status_filter(task, allowed):
                    return task

            offset += len(members)

    @safe_deco
    async def update_status(self, task_id: int, status: TaskStatus, user: UserSummary) -> Task:
        """Сменить статус задачи и записать изменение в журнал.

        Raises:
            TaskNotFoundError: Задача не найдена

        """
        task = await self.get_task(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)

        timestamp = _now()
        await self.redis.hset(  # type: ignore[misc]
            TASK_KEY.format(task_id=task_id),
            mapping={"status": str(int(status)), "modified": timestamp},
        )
        await self.redis.lpush(  # type: ignore[misc]
            TASK_HISTORY_KEY.format(task_id=task_id),
            orjson.dumps({
                "user_id": user.id,
                "osm_id": user.osm_id,
                "display_name": user.display_name,
                "old_status": int(task.status) if task.status is not None else None,
                "status": int(status),
                "timestamp": timestamp,
            }),
        )

        logger.info("Статус задачи изменён", task_id=task_id, status=int(status), user_id=user.id)
        return task.model_copy(update={"status": status, "modified": timestamp})

    @safe_deco
    async def last_modified_user(self, task_id: int) -> UserSummary | None:
        """Пользователь, последним изменивший задачу (по журналу изменений)."""
        entry = await self.redis.lindex(TASK_HISTORY_KEY.format(task_id=task_id), 0)  # type: ignore[misc]
        if not entry:
            return None

        data = orjson.loads(entry)
        return UserSummary(id=data["user_id"], osm_id=data["osm_id"], display_name=data["display_name"])

    async def health_check(self) -> bool:
        """Проверить доступность Redis.

        Returns:
            True если Redis доступен

        """
        try:
            await self.redis.ping()  # type: ignore[misc]
            return True
        except Exception as e:
            logger.exception("Redis недоступен", error=str(e))
            return False


async def create_task_store(redis_client: Redis) -> TaskStore:
    """Создать TaskStore и проверить подключение к Redis.

    Raises:
        ConnectionError: Redis недоступен

    """
    store = TaskStore(redis_client)

    if not await store.health_check():
        msg = "Не удалось подключиться к Redis"
        raise ConnectionError(msg)

    logger.info("TaskStore создан")
    return store
