"""Canonical job and candidate data as served by the owning services."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if not value:
        return datetime.fromtimestamp(0, UTC)
    parsed = datetime.fromisoformat(str(value))
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def _parse_float(value: Any) -> float | None:
    return None if value is None else float(value)


def _str_tuple(value: Any) -> tuple[str, ...]:
    if not value:
        return ()
    return tuple(str(v) for v in value)


@dataclass(frozen=True, slots=True)
class JobData:
    """A job posting fetched from the jobs service.

    Attributes:
        id: Job identifier.
        employer_id: Identifier of the owning employer user.
        title: Job title.
        description: Free-text description.
        requirements: Free-text requirements.
        is_active: False once the job is closed or expired.
        skills: Required skills, in the order the employer listed them.
        servicenow_versions: Platform versions the job targets.
        created_at: When the job was posted.
    """

    id: str
    employer_id: str
    title: str
    description: str = ""
    requirements: str | None = None
    company_name: str | None = None
    location: str | None = None
    country: str | None = None
    work_mode: str = ""
    experience_level: str = ""
    job_type: str = ""
    salary_min: float | None = None
    salary_max: float | None = None
    salary_currency: str | None = None
    is_salary_visible: bool = False
    skills: tuple[str, ...] = ()
    servicenow_versions: tuple[str, ...] = ()
    is_active: bool = True
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> JobData:
        """Build from the jobs service's camelCase JSON."""
        return cls(
            id=str(payload["id"]),
            employer_id=str(payload.get("employerId", "")),
            title=payload.get("title") or "",
            description=payload.get("description") or "",
            requirements=payload.get("requirements"),
            company_name=payload.get("companyName"),
            location=payload.get("location"),
            country=payload.get("country"),
            work_mode=payload.get("workMode") or "",
            experience_level=payload.get("experienceLevel") or "",
            job_type=payload.get("jobType") or "",
            salary_min=_parse_float(payload.get("salaryMin")),
            salary_max=_parse_float(payload.get("salaryMax")),
            salary_currency=payload.get("salaryCurrency"),
            is_salary_visible=bool(payload.get("isSalaryVisible", False)),
            skills=_str_tuple(payload.get("skills")),
            servicenow_versions=_str_tuple(payload.get("serviceNowVersions")),
            is_active=bool(payload.get("isActive", False)),
            created_at=_parse_datetime(payload.get("createdAt")),
        )


@dataclass(frozen=True, slots=True)
class CandidateData:
    """A candidate profile fetched from the profiles service."""

    user_id: str
    first_name: str | None = None
    last_name: str | None = None
    headline: str | None = None
    bio: str | None = None
    current_role: str | None = None
    location: str | None = None
    country: str | None = None
    years_of_experience: int = 0
    experience_level: str = ""
    availability: str = ""
    open_to_remote: bool = False
    skills: tuple[str, ...] = ()
    certifications: tuple[str, ...] = ()
    servicenow_versions: tuple[str, ...] = ()
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> CandidateData:
        """Build from the profiles service's camelCase JSON."""
        return cls(
            user_id=str(payload["userId"]),
            first_name=payload.get("firstName"),
            last_name=payload.get("lastName"),
            headline=payload.get("headline"),
            bio=payload.get("bio"),
            current_role=payload.get("currentRole"),
            location=payload.get("location"),
            country=payload.get("country"),
            years_of_experience=int(payload.get("yearsOfExperience") or 0),
            experience_level=payload.get("experienceLevel") or "",
            availability=payload.get("availability") or "",
            open_to_remote=bool(payload.get("openToRemote", False)),
            skills=_str_tuple(payload.get("skills")),
            certifications=_str_tuple(payload.get("certifications")),
            servicenow_versions=_str_tuple(payload.get("serviceNowVersions")),
            updated_at=_parse_datetime(payload.get("updatedAt")),
        )
