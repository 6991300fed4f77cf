"""Match retrieval value types — caller identity and ranked results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from datetime import datetime

ADMIN_ROLES: frozenset[str] = frozenset({"Admin", "SuperAdmin"})
CANDIDATE_ROLE = "Candidate"
EMPLOYER_ROLE = "Employer"

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Principal:
    """The authenticated caller of a match or indexing request.

    Attributes:
        user_id: Caller's user id.
        roles: Role names granted to the caller.
    """

    user_id: str
    roles: frozenset[str] = field(default_factory=frozenset)

    @property
    def is_admin(self) -> bool:
        return not ADMIN_ROLES.isdisjoint(self.roles)

    @property
    def is_candidate(self) -> bool:
        return CANDIDATE_ROLE in self.roles

    @property
    def is_employer(self) -> bool:
        return EMPLOYER_ROLE in self.roles


@dataclass(frozen=True, slots=True)
class JobMatch:
    """A job ranked against a candidate.

    Salary fields are ``None`` when the employer hides the salary.
    """

    job_id: str
    title: str
    company_name: str | None
    location: str | None
    country: str | None
    work_mode: str
    experience_level: str
    salary_min: float | None
    salary_max: float | None
    salary_currency: str | None
    skills_required: tuple[str, ...]
    score: float
    score_percent: int
    matched_skills: tuple[str, ...]
    posted_at: datetime


@dataclass(frozen=True, slots=True)
class CandidateMatch:
    """A candidate ranked against a job."""

    user_id: str
    full_name: str | None
    headline: str | None
    current_role: str | None
    location: str | None
    years_of_experience: int
    experience_level: str
    availability: str
    skills: tuple[str, ...]
    certifications: tuple[str, ...]
    score: float
    score_percent: int
    matched_skills: tuple[str, ...]
    profile_updated_at: datetime


@dataclass(frozen=True, slots=True)
class MatchResults(Generic[T]):
    """One page of ranked matches.

    Attributes:
        total: Number of enriched matches across all pages.
        page: 1-indexed page number.
        page_size: Maximum results per page.
        embedding_ready: False when the subject is not indexed yet; the
            results are then always empty.
        results: The matches on this page, best first.
    """

    total: int
    page: int
    page_size: int
    embedding_ready: bool
    results: list[T] = field(default_factory=list)

    @classmethod
    def not_ready(cls, page: int, page_size: int) -> MatchResults[T]:
        return cls(total=0, page=page, page_size=page_size, embedding_ready=False, results=[])
