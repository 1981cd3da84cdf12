"""Lock Coordinator для MapRoulette Mapping API.

Блокировки задач в Redis:
    lock:task:{id}  -> String (orjson {"user_id", "locked_time"}), TTL = lock_timeout_seconds

Истечение блокировки обеспечивается TTL ключа, отдельной очистки нет.
Взятие и снятие выполняются Lua скриптами: проверка владельца и запись
происходят внутри Redis одной операцией.
"""

from collections.abc import Iterable

import orjson
from redis.asyncio import Redis

from src.config import settings
from src.core.constants import LOCK_KEY
from src.core.models import Lock, UserSummary
from src.shared.errors import TaskLockedError, safe_deco
from src.utils.logging import get_logger

logger = get_logger()

# KEYS[1] - ключ блокировки; ARGV: payload, user_id, ttl.
# nil - блокировка взята или продлена, иначе payload чужой блокировки.
ACQUIRE_SCRIPT = """
local current = redis.call('GET', KEYS[1])
if current and cjson.decode(current)['user_id'] ~= tonumber(ARGV[2]) then
    return current
end
redis.call('SET', KEYS[1], ARGV[1], 'EX', ARGV[3])
return false
"""

# KEYS[1] - ключ блокировки; ARGV: user_id.
# 0 - блокировки нет, 1 - снята, иначе payload чужой блокировки.
RELEASE_SCRIPT = """
local current = redis.call('GET', KEYS[1])
if not current then
    return 0
end
if cjson.decode(current)['user_id'] ~= tonumber(ARGV[1]) then
    return current
end
redis.call('DEL', KEYS[1])
return 1
"""


def _lock_from_payload(payload: bytes | str | None) -> Lock:
    if not payload:
        return Lock.empty()
    data = orjson.loads(payload)
    return Lock(locked_time=data.get("locked_time"), user_id=data.get("user_id"))


class LockCoordinator:
    """Чтение, взятие и снятие блокировок задач.

    Путь отображения задачи только читает блокировки. Гонка двух
    пользователей за одну задачу разрешается самим Redis: скрипт
    взятия атомарно сверяет владельца и перезаписывает ключ.
    """

    def __init__(self, redis_client: Redis, lock_timeout: int | None = None) -> None:
        """Инициализировать Lock Coordinator.

        Args:
            redis_client: Async Redis client
            lock_timeout: TTL блокировки в секундах (по умолчанию из settings)

        """
        self.redis = redis_client
        self.lock_timeout = lock_timeout if lock_timeout is not None else settings.lock_timeout_seconds
        self._acquire = redis_client.register_script(ACQUIRE_SCRIPT)
        self._release = redis_client.register_script(RELEASE_SCRIPT)

    @safe_deco
    async def current_lock(self, task_id: int) -> Lock:
        """Текущая блокировка задачи (пустая, если задача свободна)."""
        payload = await self.redis.get(LOCK_KEY.format(task_id=task_id))
        return _lock_from_payload(payload)

    @safe_deco
    async def current_locks(self, task_ids: Iterable[int]) -> dict[int, Lock]:
        """Блокировки для набора задач одним запросом."""
        ids = list(task_ids)
        if not ids:
            return {}

        payloads = await self.redis.mget([LOCK_KEY.format(task_id=task_id) for task_id in ids])
        return {task_id: _lock_from_payload(payload) for task_id, payload in zip(ids, payloads)}

    @safe_deco
    async def acquire(self, task_id: int, user: UserSummary, locked_time: str) -> Lock:
        """Взять блокировку задачи.

        Повторное взятие своей блокировки продлевает её.

        Args:
            task_id: ID задачи
            user: Пользователь, берущий блокировку
            locked_time: Время взятия (ISO 8601)

        Returns:
            Взятая блокировка

        Raises:
            TaskLockedError: Задача заблокирована другим пользователем

        """
        payload = orjson.dumps({"user_id": user.id, "locked_time": locked_time})
        holder_payload = await self._acquire(
            keys=[LOCK_KEY.format(task_id=task_id)],
            args=[payload, user.id, self.lock_timeout],
        )

        if holder_payload is not None:
            raise TaskLockedError(task_id, _lock_from_payload(holder_payload).user_id)

        logger.info("Блокировка взята", task_id=task_id, user_id=user.id)
        return Lock(locked_time=locked_time, user_id=user.id)

    @safe_deco
    async def release(self, task_id: int, user: UserSummary) -> bool:
        """Снять свою блокировку.

        Returns:
            True если блокировка была снята, False если её не было

        Raises:
            TaskLockedError: Блокировка принадлежит другому пользователю

        """
        result = await self._release(keys=[LOCK_KEY.format(task_id=task_id)], args=[user.id])

        if isinstance(result, (bytes, str)):
            raise TaskLockedError(task_id, _lock_from_payload(result).user_id)
        if not result:
            return False

        logger.info("Блокировка снята", task_id=task_id, user_id=user.id)
        return True
