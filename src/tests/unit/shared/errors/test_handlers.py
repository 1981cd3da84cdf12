"""Тесты обработчиков исключений и trace context.

Покрывает:
- Заголовок X-Trace-Id в успешных ответах и в ответах с ошибкой
- Единую схему ErrorResponse для доменных, валидационных и непредвиденных ошибок
- Разбор trace_id из заголовка
"""

from collections.abc import AsyncIterator
from uuid import UUID

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from src.shared.errors import TaskLockedError, TraceContextMiddleware, get_trace_id, setup_exception_handlers
from src.shared.errors.context import MAX_TRACE_ID_LENGTH, trace_id_from_header


def build_app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(TraceContextMiddleware)
    setup_exception_handlers(app)

    @app.get("/ok")
    async def ok() -> dict[str, str]:
        return {"trace_id": get_trace_id()}

    @app.get("/locked")
    async def locked() -> None:
        raise TaskLockedError(5, 8)

    @app.get("/count")
    async def count(n: int) -> dict[str, int]:
        return {"n": n}

    @app.get("/boom")
    async def boom() -> None:
        raise RuntimeError("boom")

    return app


@pytest.fixture
async def error_client() -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=build_app(), raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


class TestTraceIdFromHeader:
    """Тесты разбора заголовка X-Trace-Id."""

    def test_keeps_client_value(self):
        assert trace_id_from_header(b"req-42") == "req-42"

    @pytest.mark.parametrize("raw", [None, b"", b"   ", b"a" * (MAX_TRACE_ID_LENGTH + 1), b"bad\x01id"])
    def test_generates_new(self, raw):
        """Пустое, слишком длинное или непечатаемое значение заменяется UUID."""
        UUID(trace_id_from_header(raw))


class TestTraceContextMiddleware:
    """Тесты middleware trace context."""

    @pytest.mark.asyncio
    async def test_echoes_trace_id_on_success(self, error_client: AsyncClient):
        response = await error_client.get("/ok", headers={"X-Trace-Id": "req-42"})

        assert response.status_code == 200
        assert response.headers["X-Trace-Id"] == "req-42"
        assert response.json() == {"trace_id": "req-42"}

    @pytest.mark.asyncio
    async def test_generates_trace_id(self, error_client: AsyncClient):
        response = await error_client.get("/ok")

        assert response.headers["X-Trace-Id"] == response.json()["trace_id"]
        UUID(response.headers["X-Trace-Id"])


class TestExceptionHandlers:
    """Тесты обработчиков исключений."""

    @pytest.mark.asyncio
    async def test_app_exception(self, error_client: AsyncClient):
        response = await error_client.get("/locked", headers={"X-Trace-Id": "req-7"})

        assert response.status_code == 409
        assert response.headers["X-Error-Code"] == "TASK_LOCKED"
        assert response.headers.get_list("X-Trace-Id") == ["req-7"]
        assert response.json() == {
            "error": "TASK_LOCKED",
            "message": "Задача 5 заблокирована пользователем 8",
            "details": {"task_id": 5, "holder_id": 8},
            "trace_id": "req-7",
        }

    @pytest.mark.asyncio
    async def test_request_validation_error(self, error_client: AsyncClient):
        response = await error_client.get("/count", params={"n": "many"})
        body = response.json()

        assert response.status_code == 422
        assert body["error"] == "VALIDATION_ERROR"
        assert [error["field"] for error in body["details"]["errors"]] == ["query.n"]
        assert response.headers["X-Error-Code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_unhandled_exception(self, error_client: AsyncClient):
        """Детали исключения не попадают в ответ."""
        response = await error_client.get("/boom")
        body = response.json()

        assert response.status_code == 500
        assert body["error"] == "INTERNAL_ERROR"
        assert body["details"] == {}
        assert "boom" not in response.text
        assert response.headers["X-Trace-Id"] == body["trace_id"]
