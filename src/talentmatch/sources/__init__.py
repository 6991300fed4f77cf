"""Document sources — read access to jobs and candidate profiles."""

from talentmatch.sources.http import HttpJobSource, HttpProfileSource
from talentmatch.sources.memory import InMemoryJobSource, InMemoryProfileSource
from talentmatch.sources.protocols import JobSource, ProfileSource
from talentmatch.sources.types import CandidateData, JobData

__all__ = [
    "CandidateData",
    "HttpJobSource",
    "HttpProfileSource",
    "InMemoryJobSource",
    "InMemoryProfileSource",
    "JobData",
    "JobSource",
    "ProfileSource",
]
