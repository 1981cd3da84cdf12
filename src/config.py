"""Настройки приложения MapRoulette Mapping API.

Конфигурация загружается из переменных окружения через pydantic-settings.
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Основные настройки приложения."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =================================================================
    # Application
    # =================================================================
    app_name: str = Field(default="MapRoulette Mapping API", description="Название приложения")
    app_env: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Окружение",
    )
    debug: bool = Field(default=True, description="Режим отладки")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Уровень логирования",
    )

    # =================================================================
    # Server
    # =================================================================
    server_host: str = Field(default="0.0.0.0", description="Хост сервера")
    server_port: int = Field(default=9000, description="Порт сервера")

    @field_validator("server_port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Валидация порта."""
        if not 1 <= v <= 65535:
            msg = f"Порт должен быть в диапазоне 1-65535, получено: {v}"
            raise ValueError(msg)
        return v

    # =================================================================
    # Redis
    # =================================================================
    redis_url: str = Field(default="redis://localhost:6379/0", description="URL для подключения к Redis")

    # =================================================================
    # Locks / Task selection
    # =================================================================
    lock_timeout_seconds: int = Field(
        default=3600,
        ge=1,
        description="Через сколько секунд блокировка задачи истекает",
    )
    proximity_pool_size: int = Field(
        default=5,
        ge=1,
        description="Сколько ближайших задач участвует в случайном выборе по близости",
    )
    random_seed: int | None = Field(
        default=None,
        description="Seed генератора случайных чисел (для воспроизводимого выбора)",
    )

    cors_allowed_origins: list[str] = Field(default=["*"], description="Разрешённые origins для CORS")


settings = Settings()
