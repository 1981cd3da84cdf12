"""Exception handlers for FastAPI.

Все ошибки отдаются одной схемой ErrorResponse с заголовками
X-Error-Code и X-Trace-Id.
"""

from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from src.shared.errors.base import AppException
from src.shared.errors.context import TRACE_ID_HEADER, get_trace_id
from src.shared.errors.schemas import ErrorResponse


def _error_response(status_code: int, body: ErrorResponse) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(),
        headers={"X-Error-Code": body.error, TRACE_ID_HEADER: body.trace_id},
    )


def validation_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    """Ошибки валидации в виде {field, message}.

    Первый элемент loc (body, query, path, header) указывает источник
    и остаётся в имени поля: "query.proximity", "body.parent_id".
    """
    return [
        {"field": ".".join(str(part) for part in error.get("loc", ())), "message": error.get("msg", "")}
        for error in exc.errors()
    ]


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Доменные исключения: 4xx логируются как warning, 5xx как error."""
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "Доменная ошибка {}",
        exc.code,
        error_code=exc.code,
        details=exc.details,
        method=request.method,
        path=request.url.path,
    )
    return _error_response(exc.status_code, exc.to_response())


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = validation_errors(exc)
    logger.warning("Некорректный запрос", errors=errors, method=request.method, path=request.url.path)

    return _error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        ErrorResponse(
            error="VALIDATION_ERROR",
            message="Ошибка валидации входных данных",
            details={"errors": errors},
            trace_id=get_trace_id(),
        ),
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Непредвиденные ошибки: полный traceback в лог, клиенту только trace_id."""
    logger.exception(
        "Необработанное исключение",
        exception_type=type(exc).__name__,
        method=request.method,
        path=request.url.path,
    )
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, AppException().to_response())


def setup_exception_handlers(app: FastAPI) -> None:
    """Зарегистрировать обработчики исключений в FastAPI.

    Args:
        app: Экземпляр FastAPI приложения.

    """
    app.add_exception_handler(AppException, app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, global_exception_handler)

    logger.info("Обработчики исключений зарегистрированы")
