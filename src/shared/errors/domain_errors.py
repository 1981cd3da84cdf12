"""Domain errors.

Доменные исключения приложения.
"""

from src.shared.errors.base import AppException


class NotFoundError(AppException):
    """Ресурс не найден."""

    status_code = 404
    code = "NOT_FOUND"


class ValidationError(AppException):
    """Ошибка валидации данных."""

    status_code = 422
    code = "VALIDATION_ERROR"


class ConflictError(AppException):
    """Конфликт данных."""

    status_code = 409
    code = "CONFLICT"


class ServiceUnavailableError(AppException):
    """Сервис недоступен."""

    status_code = 503
    code = "SERVICE_UNAVAILABLE"


class TaskNotFoundError(NotFoundError):
    """Could not find task"""

    code = "TASK_NOT_FOUND"

    def __init__(self, task_id: int | None = None) -> None:
        """Инициализация исключения.

        Args:
            task_id: Идентификатор задачи (если известен).

        """
        if task_id is None:
            super().__init__()
        else:
            super().__init__(
                message=f"Could not find task with id {task_id}",
                details={"task_id": task_id},
            )


class InvalidSearchParameterError(ValidationError):
    """Некорректный параметр поиска."""

    code = "INVALID_SEARCH_PARAMETER"

    def __init__(self, name: str, value: str, reason: str) -> None:
        """Инициализация исключения.

        Args:
            name: Имя параметра запроса.
            value: Полученное значение.
            reason: Причина отказа.

        """
        super().__init__(
            message=f"Параметр '{name}' некорректен: {reason}",
            details={"parameter": name, "value": value, "reason": reason},
        )


class TaskLockedError(ConflictError):
    """Задача заблокирована другим пользователем."""

    code = "TASK_LOCKED"

    def __init__(self, task_id: int, holder_id: int | None) -> None:
        """Инициализация исключения.

        Args:
            task_id: Идентификатор задачи.
            holder_id: Кто держит блокировку.

        """
        super().__init__(
            message=f"Задача {task_id} заблокирована пользователем {holder_id}",
            details={"task_id": task_id, "holder_id": holder_id},
        )
