"""Base exception class for application errors.

Единая база для доменных ошибок: код ошибки и сообщение по умолчанию
выводятся из имени класса и docstring, HTTP статус задаётся атрибутом класса.
"""

import re
from typing import Any

from src.shared.errors.context import get_trace_id
from src.shared.errors.schemas import ErrorResponse


class AppException(Exception):
    """Внутренняя ошибка сервера."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"
    default_message: str = "Внутренняя ошибка сервера"

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
        status_code: int | None = None,
        code: str | None = None,
    ) -> None:
        """Инициализация исключения.

        Args:
            message: Сообщение об ошибке (по умолчанию из docstring класса).
            details: Дополнительные детали для клиента.
            status_code: Переопределение HTTP статуса.
            code: Переопределение кода ошибки.

        """
        self.message = message or self.default_message
        self.details = dict(details) if details else {}

        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code

        super().__init__(self.message)

    def __init_subclass__(cls, **kwargs: Any) -> None:
        """Автоматическая генерация code и default_message для подклассов."""
        super().__init_subclass__(**kwargs)

        # TaskLockedError -> TASK_LOCKED
        if "code" not in cls.__dict__:
            name = re.sub(r"(Exception|Error)$", "", cls.__name__) or cls.__name__
            cls.code = re.sub(r"(?<!^)(?=[A-Z])", "_", name).upper()

        if "default_message" not in cls.__dict__:
            doc = (cls.__doc__ or "").strip()
            cls.default_message = doc.split("\n")[0] if doc else cls.__name__

    def to_response(self) -> ErrorResponse:
        """Сериализация в Pydantic модель ответа.

        Returns:
            ErrorResponse с данными ошибки.

        """
        return ErrorResponse(
            error=self.code,
            message=self.message,
            details=self.details,
            trace_id=get_trace_id(),
        )

    @classmethod
    def openapi_response(cls) -> dict[str, Any]:
        """Описание ответа для `responses=` в декораторах роутов."""
        return {
            "model": ErrorResponse,
            "description": cls.default_message,
        }
