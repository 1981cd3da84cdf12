"""Tasks API Routes для MapRoulette Mapping API.

Создание задач, смена статуса и блокировки.
"""

from fastapi import APIRouter, status

from src.api.schemas.requests import CreateTaskRequest
from src.api.schemas.responses import ErrorResponse, LockResponse, TaskResponse
from src.core.dependencies import EffectiveUserDep, MappingServiceDep
from src.core.enums import TaskStatus
from src.shared.errors import ValidationError
from src.utils.logging import get_logger

logger = get_logger()

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.post(
    "/",
    status_code=status.HTTP_201_CREATED,
    summary="Создать задачу",
    description="Создаёт задачу в челлендже; ID задачи задаёт её место в последовательности",
    responses={
        201: {"description": "Задача создана"},
        422: {"model": ErrorResponse, "description": "Невалидный запрос"},
    },
)
async def create_task(request: CreateTaskRequest, service: MappingServiceDep) -> TaskResponse:
    """Создать задачу.

    Args:
        request: Параметры задачи
        service: Mapping service

    Returns:
        Созданная задача

    """
    task = await service.create_task(
        parent_id=request.parent_id,
        name=request.name,
        geometry=request.geometry,
        instruction=request.instruction,
        priority=request.priority,
    )
    return TaskResponse.from_task(task)


@router.put(
    "/{task_id}/status/{task_status}",
    summary="Сменить статус задачи",
    description="Меняет статус, записывает изменение в журнал и снимает блокировку пользователя",
    responses={
        404: {"model": ErrorResponse, "description": "Задача не найдена"},
        409: {"model": ErrorResponse, "description": "Задача заблокирована другим пользователем"},
        422: {"model": ErrorResponse, "description": "Неизвестный код статуса"},
    },
)
async def set_task_status(
    task_id: int,
    task_status: int,
    service: MappingServiceDep,
    user: EffectiveUserDep,
) -> TaskResponse:
    """Сменить статус задачи от имени пользователя.

    Raises:
        ValidationError: Неизвестный код статуса

    """
    try:
        new_status = TaskStatus(task_status)
    except ValueError as e:
        raise ValidationError(
            message=f"Неизвестный код статуса: {task_status}",
            details={"status": task_status},
        ) from e

    task = await service.set_task_status(task_id, new_status, user)
    logger.info("Статус изменён через API", task_id=task_id, status=task_status, user_id=user.id)
    return TaskResponse.from_task(task)


@router.get(
    "/{task_id}/lock",
    summary="Состояние блокировки",
    responses={404: {"model": ErrorResponse, "description": "Задача не найдена"}},
)
async def get_task_lock(task_id: int, service: MappingServiceDep) -> LockResponse:
    """Текущая блокировка задачи."""
    return LockResponse.from_lock(task_id, await service.task_lock(task_id))


@router.post(
    "/{task_id}/lock",
    summary="Заблокировать задачу",
    description="Берёт блокировку на время работы с задачей; повторный вызов продлевает её",
    responses={
        404: {"model": ErrorResponse, "description": "Задача не найдена"},
        409: {"model": ErrorResponse, "description": "Задача заблокирована другим пользователем"},
    },
)
async def lock_task(task_id: int, service: MappingServiceDep, user: EffectiveUserDep) -> LockResponse:
    """Заблокировать задачу за пользователем."""
    return LockResponse.from_lock(task_id, await service.lock_task(task_id, user))


@router.delete(
    "/{task_id}/lock",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Снять блокировку",
    responses={
        404: {"model": ErrorResponse, "description": "Задача не найдена"},
        409: {"model": ErrorResponse, "description": "Блокировка принадлежит другому пользователю"},
    },
)
async def unlock_task(task_id: int, service: MappingServiceDep, user: EffectiveUserDep) -> None:
    """Снять блокировку пользователя."""
    released = await service.unlock_task(task_id, user)
    logger.debug("Снятие блокировки через API", task_id=task_id, released=released)
