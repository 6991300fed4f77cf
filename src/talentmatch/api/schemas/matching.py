"""Response bodies for the matching routes (camelCase JSON)."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from talentmatch.models.records import DocumentType, EmbeddingStatus


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class EmbeddingStatusResponse(CamelModel):
    document_id: str
    document_type: DocumentType
    status: EmbeddingStatus
    last_indexed_at: datetime | None = None
    retry_count: int = 0


class JobMatchResponse(CamelModel):
    job_id: str
    title: str
    company_name: str | None = None
    location: str | None = None
    country: str | None = None
    work_mode: str
    experience_level: str
    salary_min: float | None = None
    salary_max: float | None = None
    salary_currency: str | None = None
    skills_required: list[str]
    score: float
    score_percent: int
    matched_skills: list[str]
    posted_at: datetime


class CandidateMatchResponse(CamelModel):
    user_id: str
    full_name: str | None = None
    headline: str | None = None
    current_role: str | None = None
    location: str | None = None
    years_of_experience: int
    experience_level: str
    availability: str
    skills: list[str]
    certifications: list[str]
    score: float
    score_percent: int
    matched_skills: list[str]
    profile_updated_at: datetime


class JobMatchResultsResponse(CamelModel):
    total: int
    page: int
    page_size: int
    embedding_ready: bool
    results: list[JobMatchResponse]


class CandidateMatchResultsResponse(CamelModel):
    total: int
    page: int
    page_size: int
    embedding_ready: bool
    results: list[CandidateMatchResponse]
