"""Тесты для доменных исключений.

Покрывает:
- HTTP status codes
- Коды ошибок
- Сообщения и details доменных ошибок задач
"""

from unittest.mock import AsyncMock

import pytest
import redis.exceptions

from src.shared.errors import (
    AppException,
    ConflictError,
    InvalidSearchParameterError,
    NotFoundError,
    ServiceUnavailableError,
    TaskLockedError,
    TaskNotFoundError,
    ValidationError,
    safe_deco,
)


class TestStandardErrors:
    """Тесты для базовых доменных ошибок."""

    @pytest.mark.parametrize(
        ("error_cls", "status_code", "code"),
        [
            (NotFoundError, 404, "NOT_FOUND"),
            (ValidationError, 422, "VALIDATION_ERROR"),
            (ConflictError, 409, "CONFLICT"),
            (ServiceUnavailableError, 503, "SERVICE_UNAVAILABLE"),
        ],
    )
    def test_status_and_code(self, error_cls: type[AppException], status_code: int, code: str):
        error = error_cls()

        assert error.status_code == status_code
        assert error.code == code
        assert isinstance(error, AppException)

    def test_with_details(self):
        details = {"field": "email", "error": "invalid format"}
        assert ValidationError(details=details).details == details


class TestTaskNotFoundError:
    """Тесты для TaskNotFoundError."""

    def test_without_id(self):
        """Без ID сообщение совпадает с сообщением по умолчанию."""
        error = TaskNotFoundError()

        assert error.status_code == 404
        assert error.code == "TASK_NOT_FOUND"
        assert error.message == "Could not find task"
        assert error.details == {}

    def test_with_id(self):
        error = TaskNotFoundError(42)

        assert "42" in error.message
        assert error.details == {"task_id": 42}
        assert isinstance(error, NotFoundError)


class TestInvalidSearchParameterError:
    """Тесты для InvalidSearchParameterError."""

    def test_fields(self):
        error = InvalidSearchParameterError("tStatus", "1,x", "неизвестный код 'x'")

        assert error.status_code == 422
        assert error.code == "INVALID_SEARCH_PARAMETER"
        assert "tStatus" in error.message
        assert error.details == {"parameter": "tStatus", "value": "1,x", "reason": "неизвестный код 'x'"}
        assert isinstance(error, ValidationError)


class TestTaskLockedError:
    """Тесты для TaskLockedError."""

    def test_fields(self):
        error = TaskLockedError(5, 8)

        assert error.status_code == 409
        assert error.code == "TASK_LOCKED"
        assert error.details == {"task_id": 5, "holder_id": 8}
        assert isinstance(error, ConflictError)


class TestSafeDeco:
    """Тесты для декоратора safe_deco."""

    @pytest.mark.asyncio
    async def test_passes_result(self):
        @safe_deco
        async def ok() -> int:
            return 1

        assert await ok() == 1

    @pytest.mark.asyncio
    async def test_redis_error_mapped(self):
        """Ошибка Redis превращается в ServiceUnavailableError."""
        call = AsyncMock(side_effect=redis.exceptions.ConnectionError("down"))

        @safe_deco
        async def broken() -> None:
            await call()

        with pytest.raises(ServiceUnavailableError) as exc_info:
            await broken()

        assert exc_info.value.details["function"] == "broken"
        assert isinstance(exc_info.value.__cause__, redis.exceptions.ConnectionError)

    @pytest.mark.asyncio
    async def test_domain_error_passes_through(self):
        @safe_deco
        async def missing() -> None:
            raise TaskNotFoundError(1)

        with pytest.raises(TaskNotFoundError):
            await missing()
