"""Canonical plain-text rendering of jobs and candidates for embedding.

Both builders are pure functions of the document's fields. Identical input
always renders byte-identical text, so re-indexing an unchanged document
yields the same embedding.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from talentmatch.sources.types import CandidateData, JobData


def _present(value: str | None) -> bool:
    return bool(value and value.strip())


def _join(values: Iterable[str]) -> str:
    return ", ".join(values)


def build_job_text(job: JobData) -> str:
    """Render *job* as the text that gets embedded."""
    lines = [f"Job Title: {job.title}"]
    if _present(job.company_name):
        lines.append(f"Company: {job.company_name}")
    lines.append(f"Type: {job.job_type}, Mode: {job.work_mode}, Level: {job.experience_level}")
    if _present(job.location):
        lines.append(f"Location: {job.location}, {job.country or ''}")
    lines.append(f"Description: {job.description}")
    if _present(job.requirements):
        lines.append(f"Requirements: {job.requirements}")
    if job.skills:
        lines.append(f"Required Skills: {_join(job.skills)}")
    if job.servicenow_versions:
        lines.append(f"ServiceNow Versions: {_join(job.servicenow_versions)}")
    return "\n".join(lines) + "\n"


def build_candidate_text(candidate: CandidateData) -> str:
    """Render *candidate* as the text that gets embedded.

    Names are left out so that matching is driven by experience and skills.
    """
    lines: list[str] = []
    if _present(candidate.headline):
        lines.append(f"Headline: {candidate.headline}")
    if _present(candidate.current_role):
        lines.append(f"Current Role: {candidate.current_role}")
    lines.append(
        f"Experience: {candidate.years_of_experience} years, Level: {candidate.experience_level}"
    )
    lines.append(f"Availability: {candidate.availability}")
    if _present(candidate.location):
        lines.append(f"Location: {candidate.location}, {candidate.country or ''}")
    if _present(candidate.bio):
        lines.append(f"Summary: {candidate.bio}")
    if candidate.skills:
        lines.append(f"Skills: {_join(candidate.skills)}")
    if candidate.certifications:
        lines.append(f"Certifications: {_join(candidate.certifications)}")
    if candidate.servicenow_versions:
        lines.append(f"ServiceNow Versions: {_join(candidate.servicenow_versions)}")
    return "\n".join(lines) + "\n"
