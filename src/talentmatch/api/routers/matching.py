"""Matching routes: indexing requests, status and ranked matches."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, status

from talentmatch._matching_async import MatchingAsync
from talentmatch.api.dependencies import get_matching, get_principal, require_candidate
from talentmatch.api.schemas.matching import (
    CandidateMatchResultsResponse,
    EmbeddingStatusResponse,
    JobMatchResultsResponse,
)
from talentmatch.matching.retrieval import DEFAULT_PAGE_SIZE
from talentmatch.matching.types import Principal

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/matching", tags=["matching"])


@router.get("/my-job-matches", response_model=JobMatchResultsResponse)
async def my_job_matches(
    page: int = Query(1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, alias="pageSize"),
    principal: Principal = Depends(require_candidate),
    matching: MatchingAsync = Depends(get_matching),
) -> JobMatchResultsResponse:
    results = await matching.jobs_for_candidate(
        principal.user_id, principal, page=page, page_size=page_size
    )
    return JobMatchResultsResponse.model_validate(results)


@router.get("/jobs/{job_id}/candidates", response_model=CandidateMatchResultsResponse)
async def job_candidates(
    job_id: str,
    page: int = Query(1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, alias="pageSize"),
    principal: Principal = Depends(get_principal),
    matching: MatchingAsync = Depends(get_matching),
) -> CandidateMatchResultsResponse:
    results = await matching.candidates_for_job(
        job_id, principal, page=page, page_size=page_size
    )
    return CandidateMatchResultsResponse.model_validate(results)


@router.post(
    "/index/my-profile",
    response_model=EmbeddingStatusResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def index_my_profile(
    principal: Principal = Depends(require_candidate),
    matching: MatchingAsync = Depends(get_matching),
) -> EmbeddingStatusResponse:
    snapshot = await matching.request_profile_indexing(principal)
    logger.info("POST /index/my-profile user=%s status=%s", principal.user_id, snapshot.status.value)
    return EmbeddingStatusResponse.model_validate(snapshot)


@router.post(
    "/index/jobs/{job_id}",
    response_model=EmbeddingStatusResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def index_job(
    job_id: str,
    principal: Principal = Depends(get_principal),
    matching: MatchingAsync = Depends(get_matching),
) -> EmbeddingStatusResponse:
    snapshot = await matching.request_job_indexing(job_id, principal)
    logger.info("POST /index/jobs/%s user=%s status=%s", job_id, principal.user_id, snapshot.status.value)
    return EmbeddingStatusResponse.model_validate(snapshot)
