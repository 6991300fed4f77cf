"""Match retrieval — ranked, enriched, paginated matches."""

from talentmatch.matching.retrieval import (
    DEFAULT_PAGE_SIZE,
    DEFAULT_TOP_K,
    MAX_PAGE_SIZE,
    MatchRetrieval,
    matched_skills,
)
from talentmatch.matching.types import (
    ADMIN_ROLES,
    CandidateMatch,
    JobMatch,
    MatchResults,
    Principal,
)

__all__ = [
    "ADMIN_ROLES",
    "DEFAULT_PAGE_SIZE",
    "DEFAULT_TOP_K",
    "MAX_PAGE_SIZE",
    "CandidateMatch",
    "JobMatch",
    "MatchResults",
    "MatchRetrieval",
    "Principal",
    "matched_skills",
]
