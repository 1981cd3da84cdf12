"""MapRoulette Mapping API - Dependencies.

Dependency Injection для FastAPI.
"""

from typing import Annotated

from fastapi import Depends, Header, Query, Request

from src.core.models import GUEST_USER, UserSummary
from src.services.mapping_service import MappingService
from src.services.search import SearchParameters, parse_optional_id
from src.services.task_store import TaskStore
from src.shared.errors import ValidationError

# ==================== Service Dependencies ====================


def get_mapping_service(request: Request) -> MappingService:
    """Mapping service из состояния приложения (создаётся в lifespan)."""
    return request.app.state.mapping_service


def get_task_store(request: Request) -> TaskStore:
    """Task store из состояния приложения (создаётся в lifespan)."""
    return request.app.state.task_store


# ==================== Request Dependencies ====================


def get_effective_user(
    x_user_id: Annotated[int | None, Header(description="ID пользователя MapRoulette")] = None,
    x_osm_id: Annotated[int | None, Header(description="OSM ID пользователя")] = None,
    x_display_name: Annotated[str | None, Header(description="Отображаемое имя")] = None,
) -> UserSummary:
    """Эффективный пользователь запроса.

    Аутентификация происходит до сервиса: сюда приходит уже проверенная
    личность в заголовках. Без заголовков запрос выполняется от гостя.

    Returns:
        Пользователь запроса или GUEST_USER

    Raises:
        ValidationError: X-User-Id передан без X-Osm-Id

    """
    if x_user_id is None:
        return GUEST_USER
    if x_osm_id is None:
        raise ValidationError(
            message="Заголовок X-Osm-Id обязателен вместе с X-User-Id",
            details={"header": "X-Osm-Id"},
        )

    return UserSummary(
        id=x_user_id,
        osm_id=x_osm_id,
        display_name=x_display_name or str(x_user_id),
    )


def get_search_parameters(request: Request) -> SearchParameters:
    """Разобрать параметры поиска из query запроса.

    Raises:
        InvalidSearchParameterError: Некорректный параметр

    """
    return SearchParameters.from_query(request.query_params)


def get_proximity_id(
    proximity: Annotated[
        str | None,
        Query(description="ID задачи, рядом с которой искать (отрицательный = без учёта близости)"),
    ] = None,
) -> int | None:
    """ID опорной задачи для выбора по близости."""
    return parse_optional_id(proximity, "proximity")


# ==================== Type Aliases ====================
# Используются для более чистого кода в route handlers

MappingServiceDep = Annotated[MappingService, Depends(get_mapping_service)]
TaskStoreDep = Annotated[TaskStore, Depends(get_task_store)]
EffectiveUserDep = Annotated[UserSummary, Depends(get_effective_user)]
SearchParametersDep = Annotated[SearchParameters, Depends(get_search_parameters)]
ProximityDep = Annotated[int | None, Depends(get_proximity_id)]
