"""Challenges API Routes для MapRoulette Mapping API.

Только регистрация челленджа в проекте: нужна для фильтра `pid`.
"""

from fastapi import APIRouter, status

from src.api.schemas.requests import RegisterChallengeRequest
from src.api.schemas.responses import ChallengeResponse
from src.core.dependencies import MappingServiceDep
from src.core.models import Challenge

router = APIRouter(prefix="/challenges", tags=["challenges"])


@router.post(
    "/",
    status_code=status.HTTP_201_CREATED,
    summary="Зарегистрировать челлендж",
    description="Привязывает челлендж к проекту (повторный вызов переносит его в другой проект)",
)
async def register_challenge(request: RegisterChallengeRequest, service: MappingServiceDep) -> ChallengeResponse:
    """Зарегистрировать челлендж."""
    challenge = await service.register_challenge(
        Challenge(id=request.id, project_id=request.project_id, name=request.name),
    )
    return ChallengeResponse(id=challenge.id, project_id=challenge.project_id, name=challenge.name)
