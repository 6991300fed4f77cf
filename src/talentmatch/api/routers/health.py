"""Health route: record counts by status and worker state."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from talentmatch._matching_async import MatchingAsync
from talentmatch.api.dependencies import get_matching
from talentmatch.api.schemas.health import HealthResponse

router = APIRouter(prefix="/api/v1/matching", tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health(matching: MatchingAsync = Depends(get_matching)) -> HealthResponse:
    return HealthResponse.model_validate(await matching.health())
