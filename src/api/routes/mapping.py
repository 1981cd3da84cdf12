"""Mapping API Routes для MapRoulette Mapping API.

Endpoints выбора и отображения задач для маппера. Ответ собирается
projector'ом и отдаётся как готовый JSON.
"""

from typing import Any

from fastapi import APIRouter, Response

from src.api.schemas.responses import MappingTaskResponse
from src.core.dependencies import (
    EffectiveUserDep,
    MappingServiceDep,
    ProximityDep,
    SearchParametersDep,
)
from src.services.projector import render
from src.shared.errors import InvalidSearchParameterError, TaskNotFoundError

router = APIRouter(prefix="/mapping", tags=["mapping"])

TASK_RESPONSES: dict[int | str, dict[str, Any]] = {
    200: {"model": MappingTaskResponse, "description": "JSON задачи"},
    404: TaskNotFoundError.openapi_response(),
    422: InvalidSearchParameterError.openapi_response(),
}


def _json(record: dict[str, Any]) -> Response:
    return Response(content=render(record), media_type="application/json")


# Маршруты /task/random объявлены раньше /task/{task_id}, иначе "random"
# попадёт в task_id.


@router.get(
    "/task/random",
    summary="Случайная задача",
    description="Случайная задача под фильтр поиска; с `proximity` - одна из ближайших к указанной задаче",
    responses=TASK_RESPONSES,
)
async def get_random_task(
    service: MappingServiceDep,
    user: EffectiveUserDep,
    params: SearchParametersDep,
    proximity_id: ProximityDep,
) -> Response:
    """Случайная задача под фильтр."""
    return _json(await service.random_task(user, params, proximity_id))


@router.get(
    "/task/random/priority",
    summary="Случайная задача с учётом приоритета",
    description="Как /task/random, но сначала исчерпываются задачи с более высоким приоритетом",
    responses=TASK_RESPONSES,
)
async def get_random_task_with_priority(
    service: MappingServiceDep,
    user: EffectiveUserDep,
    params: SearchParametersDep,
    proximity_id: ProximityDep,
) -> Response:
    """Случайная задача наивысшего доступного приоритета."""
    return _json(await service.random_task_with_priority(user, params, proximity_id))


@router.get(
    "/task/{task_id}",
    summary="JSON задачи",
    description="Задача с состоянием блокировки и последним изменившим пользователем",
    responses=TASK_RESPONSES,
)
async def get_task_display(task_id: int, service: MappingServiceDep) -> Response:
    """JSON конкретной задачи."""
    return _json(await service.display_task(task_id))


@router.get(
    "/challenge/{parent_id}/next/{current_task_id}",
    summary="Следующая задача челленджа",
    description="Следующая по порядку задача челленджа (после последней - первая), фильтр `tStatus`",
    responses=TASK_RESPONSES,
)
async def get_sequential_next_task(
    parent_id: int,
    current_task_id: int,
    service: MappingServiceDep,
    params: SearchParametersDep,
) -> Response:
    """Следующая задача в последовательности."""
    return _json(await service.next_task(parent_id, current_task_id, params))


@router.get(
    "/challenge/{parent_id}/previous/{current_task_id}",
    summary="Предыдущая задача челленджа",
    description="Предыдущая по порядку задача челленджа (перед первой - последняя), фильтр `tStatus`",
    responses=TASK_RESPONSES,
)
async def get_sequential_previous_task(
    parent_id: int,
    current_task_id: int,
    service: MappingServiceDep,
    params: SearchParametersDep,
) -> Response:
    """Предыдущая задача в последовательности."""
    return _json(await service.previous_task(parent_id, current_task_id, params))
