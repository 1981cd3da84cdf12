"""Shared errors module.

Система обработки ошибок приложения.
"""

from src.shared.errors.base import AppException
from src.shared.errors.context import TRACE_ID_HEADER, TraceContextMiddleware, get_trace_id, set_trace_id
from src.shared.errors.decorators import safe_deco
from src.shared.errors.domain_errors import (
    ConflictError,
    InvalidSearchParameterError,
    NotFoundError,
    ServiceUnavailableError,
    TaskLockedError,
    TaskNotFoundError,
    ValidationError,
)
from src.shared.errors.handlers import setup_exception_handlers
from src.shared.errors.schemas import ErrorResponse

__all__ = [
    # Base
    "AppException",
    # Context
    "TRACE_ID_HEADER",
    "TraceContextMiddleware",
    "get_trace_id",
    "set_trace_id",
    # Domain errors
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "ServiceUnavailableError",
    "TaskNotFoundError",
    "TaskLockedError",
    "InvalidSearchParameterError",
    # Handlers
    "setup_exception_handlers",
    # Schemas
    "ErrorResponse",
    # Decorators
    "safe_deco",
]
