"""Trace context запроса.

trace_id хранится в ContextVar: его читают логи (patcher) и ответы с ошибкой.
Клиент может передать свой trace_id в заголовке X-Trace-Id, сервис
возвращает его в каждом ответе.
"""

from contextvars import ContextVar
from typing import Any
from uuid import uuid4

from starlette.datastructures import MutableHeaders

TRACE_ID_HEADER = "X-Trace-Id"

# Длинные или непечатаемые значения заголовка заменяются новым trace_id
MAX_TRACE_ID_LENGTH = 128

trace_id_var: ContextVar[str] = ContextVar("trace_id", default="")


def get_trace_id() -> str:
    """Получить текущий trace_id или сгенерировать новый."""
    trace_id = trace_id_var.get()
    if not trace_id:
        trace_id = str(uuid4())
        trace_id_var.set(trace_id)
    return trace_id


def set_trace_id(trace_id: str) -> None:
    trace_id_var.set(trace_id)


def trace_id_from_header(raw: bytes | None) -> str:
    """trace_id из заголовка X-Trace-Id или новый UUID.

    Args:
        raw: Значение заголовка как пришло в ASGI scope

    Returns:
        Принятый trace_id

    """
    value = (raw or b"").decode("latin-1").strip()
    if not value or len(value) > MAX_TRACE_ID_LENGTH or not value.isprintable():
        return str(uuid4())
    return value


class TraceContextMiddleware:
    """ASGI middleware: выставляет trace_id запроса и отдаёт его в ответе."""

    def __init__(self, app: Any) -> None:
        self.app = app

    async def __call__(self, scope: dict, receive: Any, send: Any) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        trace_id = trace_id_from_header(headers.get(TRACE_ID_HEADER.lower().encode()))
        set_trace_id(trace_id)

        async def send_with_trace_id(message: dict) -> None:
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                MutableHeaders(scope=message).setdefault(TRACE_ID_HEADER, trace_id)
            await send(message)

        await self.app(scope, receive, send_with_trace_id)
