"""MapRoulette Mapping API - Logging Configuration.

Настройка Loguru для структурированного логирования:
- Loguru для собственных логов (цвета в development, JSON в остальных окружениях)
- Перехват логов сторонних библиотек (uvicorn, fastapi, redis) в Loguru
"""

import json
import logging
import sys
from typing import TYPE_CHECKING, Any

from loguru import logger

from src.config import settings
from src.shared.errors.context import trace_id_var

if TYPE_CHECKING:
    from loguru import Logger

SENSITIVE_KEYS = frozenset({"password", "token", "secret", "api_key", "access_token", "redis_url"})


class InterceptHandler(logging.Handler):
    """Handler для перенаправления стандартного logging в Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        """Переслать одну запись стандартного logging в Loguru.

        Глубина стека подбирается так, чтобы в логе был файл и строка
        вызывающего кода, а не модуля logging.

        Args:
            record: Запись лога из стандартного logging

        """
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def json_formatter(record: dict[str, Any]) -> str:
    """JSON formatter для production логирования.

    Args:
        record: Record от Loguru

    Returns:
        Шаблон формата Loguru (сама JSON строка кладётся в extra)

    """
    log_entry: dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "module": record["name"],
        "function": record["function"],
        "line": record["line"],
    }

    for key, value in record["extra"].items():
        if key == "serialized":
            continue
        log_entry[key] = "***REDACTED***" if key in SENSITIVE_KEYS else value

    if record["exception"] is not None:
        exc_type, exc_value, _ = record["exception"]
        log_entry["exception"] = {
            "type": exc_type.__name__ if exc_type else None,
            "value": str(exc_value) if exc_value else None,
        }

    record["extra"]["serialized"] = json.dumps(log_entry, ensure_ascii=False, default=str)
    return "{extra[serialized]}\n"


def _trace_id_patcher(record: dict[str, Any]) -> None:
    """Добавить trace_id текущего запроса в extra."""
    trace_id = trace_id_var.get()
    if trace_id:
        record["extra"].setdefault("trace_id", trace_id)


def setup_logging() -> None:
    """Настроить Loguru для всего приложения.

    Конфигурация:
    - development: human-readable в stdout с цветами
    - staging/production: JSON в stdout
    - Перехват сторонних логгеров (uvicorn, fastapi, redis)
    """
    logger.remove()
    logger.configure(patcher=_trace_id_patcher)  # type: ignore[arg-type]

    dev_format = (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
        "<level>{message}</level> {extra}"
    )

    if settings.app_env == "development":
        logger.add(
            sys.stdout,
            format=dev_format,
            level=settings.log_level,
            colorize=True,
            backtrace=True,
            diagnose=settings.debug,
        )
    else:
        logger.add(
            sys.stdout,
            format=json_formatter,  # type: ignore[arg-type]
            level=settings.log_level,
            backtrace=True,
            diagnose=False,
            enqueue=True,
        )

    configure_third_party_loggers()

    logger.info("Логгер настроен", level=settings.log_level, env=settings.app_env)


def configure_third_party_loggers() -> None:
    """Перехватить логи сторонних библиотек и выставить им уровни.

    В production access-логи uvicorn понижаются до WARNING.
    """
    logging.root.handlers = []
    logging.root.setLevel(logging.INFO)

    loggers_to_configure = [
        "",
        "uvicorn",
        "uvicorn.access",
        "uvicorn.error",
        "fastapi",
        "redis",
    ]

    for logger_name in loggers_to_configure:
        logging_logger = logging.getLogger(logger_name)
        logging_logger.handlers.clear()
        logging_logger.addHandler(InterceptHandler())
        logging_logger.propagate = False

        if logger_name == "uvicorn.access" and settings.app_env == "production":
            logging_logger.setLevel(logging.WARNING)
        else:
            logging_logger.setLevel(logging.INFO)

    logger.debug("Сторонние логгеры настроены")


def get_logger(name: str | None = None) -> "Logger":
    """Получить настроенный logger instance.

    Args:
        name: Имя логгера (обычно __name__ модуля)

    Returns:
        Loguru logger (с привязанным именем, если оно задано)

    """
    if name:
        return logger.bind(name=name)
    return logger
