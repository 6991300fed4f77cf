"""TalentMatch: semantic job/candidate matching.

Asynchronous embedding indexing of jobs and candidate profiles, and ranked
match retrieval over the resulting vector index.
"""

__version__ = "0.1.0"

from talentmatch._matching_async import MatchingAsync
from talentmatch.config import MatchingConfig
from talentmatch.events import DocumentEvent, EventBus, EventType
from talentmatch.exceptions import (
    AccessDeniedError,
    AuthenticationRequiredError,
    ConfigurationError,
    DocumentNotFoundError,
    InvalidRequestError,
    MatchingError,
    SourceUnavailableError,
)
from talentmatch.indexing import (
    BatchResult,
    DocumentProcessor,
    EmbeddingRecordStore,
    EmbeddingStatusSnapshot,
    IndexingWorker,
    ProcessResult,
    request_indexing,
)
from talentmatch.matching import (
    CandidateMatch,
    JobMatch,
    MatchResults,
    MatchRetrieval,
    Principal,
)
from talentmatch.models import DocumentType, EmbeddingRecord, EmbeddingStatus
from talentmatch.search import (
    CandidateSearchDocument,
    DocumentVectorIndex,
    EmbeddingProvider,
    HashEmbedding,
    JobSearchDocument,
    LocalVectorStore,
    MemoryVectorStore,
    VectorIndex,
    VectorStore,
)
from talentmatch.sources import (
    CandidateData,
    HttpJobSource,
    HttpProfileSource,
    InMemoryJobSource,
    InMemoryProfileSource,
    JobData,
    JobSource,
    ProfileSource,
)
from talentmatch.text import build_candidate_text, build_job_text

__all__ = [
    "AccessDeniedError",
    "AuthenticationRequiredError",
    "BatchResult",
    "CandidateData",
    "CandidateMatch",
    "CandidateSearchDocument",
    "ConfigurationError",
    "DocumentEvent",
    "DocumentNotFoundError",
    "DocumentProcessor",
    "DocumentType",
    "DocumentVectorIndex",
    "EmbeddingProvider",
    "EmbeddingRecord",
    "EmbeddingRecordStore",
    "EmbeddingStatus",
    "EmbeddingStatusSnapshot",
    "EventBus",
    "EventType",
    "HashEmbedding",
    "HttpJobSource",
    "HttpProfileSource",
    "InMemoryJobSource",
    "InMemoryProfileSource",
    "IndexingWorker",
    "InvalidRequestError",
    "JobData",
    "JobMatch",
    "JobSearchDocument",
    "JobSource",
    "LocalVectorStore",
    "MatchResults",
    "MatchRetrieval",
    "MatchingAsync",
    "MatchingConfig",
    "MatchingError",
    "MemoryVectorStore",
    "Principal",
    "ProcessResult",
    "ProfileSource",
    "SourceUnavailableError",
    "VectorIndex",
    "VectorStore",
    "__version__",
    "build_candidate_text",
    "build_job_text",
    "request_indexing",
]
