"""Error handling decorators.

Декораторы для обработки ошибок.
"""

import functools
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import redis.exceptions
from loguru import logger

from src.shared.errors.domain_errors import ServiceUnavailableError

T = TypeVar("T")


def safe_deco(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    """Декоратор для методов, работающих с Redis.

    Перехватывает ошибки Redis и преобразует их в ServiceUnavailableError.
    Доменные исключения пробрасываются как есть.

    Args:
        func: Асинхронная функция для декорирования.

    Returns:
        Обернутая функция.

    """

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            return await func(*args, **kwargs)
        except redis.exceptions.RedisError as e:
            logger.exception(
                f"Redis error in {func.__name__}",
                exception_type=type(e).__name__,
                exception_message=str(e),
            )
            raise ServiceUnavailableError(
                message=f"Хранилище недоступно: {type(e).__name__}",
                details={"error": str(e), "function": func.__name__},
            ) from e

    return wrapper
