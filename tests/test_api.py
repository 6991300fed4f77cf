"""Tests for the FastAPI surface."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import create_async_engine

from talentmatch._matching_async import MatchingAsync
from talentmatch.api.app import create_app, status_for
from talentmatch.exceptions import (
    AccessDeniedError,
    AuthenticationRequiredError,
    ConfigurationError,
    DocumentNotFoundError,
    InvalidRequestError,
    SourceUnavailableError,
)
from talentmatch.search._index import DocumentVectorIndex
from talentmatch.search.providers.hashing import HashEmbedding
from talentmatch.search.stores.memory import MemoryVectorStore

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path

    from talentmatch.sources.memory import InMemoryJobSource, InMemoryProfileSource
    from talentmatch.sources.types import CandidateData, JobData

DIM = 32

CANDIDATE_HEADERS = {"X-User-Id": "cand-1", "X-User-Roles": "Candidate"}
EMPLOYER_HEADERS = {"X-User-Id": "employer-1", "X-User-Roles": "Employer"}
ADMIN_HEADERS = {"X-User-Id": "root", "X-User-Roles": "Admin, Employer"}


@pytest.fixture
def service(
    tmp_path: Path, jobs: InMemoryJobSource, profiles: InMemoryProfileSource
) -> MatchingAsync:
    return MatchingAsync(
        engine=create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'api.db'}"),
        owns_engine=True,
        embedding_provider=HashEmbedding(DIM),
        index=DocumentVectorIndex(
            MemoryVectorStore(dimension=DIM), MemoryVectorStore(dimension=DIM)
        ),
        jobs=jobs,
        profiles=profiles,
        worker_id="api-test",
    )


@pytest.fixture
def client(service: MatchingAsync) -> Iterator[TestClient]:
    with TestClient(create_app(service)) as c:
        yield c


# =========================================================================
# Error mapping
# =========================================================================


class TestStatusMapping:
    @pytest.mark.parametrize(
        ("exc", "code"),
        [
            (AuthenticationRequiredError("x"), 401),
            (AccessDeniedError(), 403),
            (DocumentNotFoundError("j", "Job"), 404),
            (InvalidRequestError("x"), 400),
            (SourceUnavailableError("x"), 503),
            (ConfigurationError("x"), 500),
        ],
    )
    def test_status_for(self, exc, code):
        assert status_for(exc) == code


# =========================================================================
# Indexing requests
# =========================================================================


class TestIndexEndpoints:
    def test_index_my_profile(self, client: TestClient):
        resp = client.post("/api/v1/matching/index/my-profile", headers=CANDIDATE_HEADERS)
        assert resp.status_code == 202
        body = resp.json()
        assert body["documentId"] == "cand-1"
        assert body["documentType"] == "CandidateProfile"
        assert body["status"] == "Pending"
        assert body["retryCount"] == 0
        assert body["lastIndexedAt"] is None

    def test_index_my_profile_requires_candidate(self, client: TestClient):
        resp = client.post("/api/v1/matching/index/my-profile", headers=EMPLOYER_HEADERS)
        assert resp.status_code == 403
        assert resp.json()["detail"] == "Only candidates can use this endpoint."

    def test_missing_identity(self, client: TestClient):
        resp = client.post("/api/v1/matching/index/my-profile")
        assert resp.status_code == 401

    def test_index_job_owner(
        self, client: TestClient, jobs: InMemoryJobSource, make_job: Callable[..., JobData]
    ):
        jobs.seed(make_job())
        resp = client.post("/api/v1/matching/index/jobs/job-1", headers=EMPLOYER_HEADERS)
        assert resp.status_code == 202
        assert resp.json()["documentType"] == "Job"

    def test_index_job_not_owner(
        self, client: TestClient, jobs: InMemoryJobSource, make_job: Callable[..., JobData]
    ):
        jobs.seed(make_job(employer_id="other"))
        resp = client.post("/api/v1/matching/index/jobs/job-1", headers=EMPLOYER_HEADERS)
        assert resp.status_code == 403

    def test_index_job_unknown(self, client: TestClient):
        resp = client.post("/api/v1/matching/index/jobs/nope", headers=EMPLOYER_HEADERS)
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Job document nope not found."

    def test_index_job_admin(self, client: TestClient):
        resp = client.post("/api/v1/matching/index/jobs/anything", headers=ADMIN_HEADERS)
        assert resp.status_code == 202


# =========================================================================
# Match queries
# =========================================================================


class TestMatchEndpoints:
    def test_not_ready(self, client: TestClient):
        resp = client.get("/api/v1/matching/my-job-matches", headers=CANDIDATE_HEADERS)
        assert resp.status_code == 200
        assert resp.json() == {
            "total": 0,
            "page": 1,
            "pageSize": 10,
            "embeddingReady": False,
            "results": [],
        }

    def test_my_job_matches_requires_candidate(self, client: TestClient):
        resp = client.get("/api/v1/matching/my-job-matches", headers=EMPLOYER_HEADERS)
        assert resp.status_code == 403

    def test_bad_paging(self, client: TestClient):
        resp = client.get(
            "/api/v1/matching/my-job-matches",
            params={"page": 1, "pageSize": 500},
            headers=CANDIDATE_HEADERS,
        )
        assert resp.status_code == 400
        assert "pageSize" in resp.json()["detail"]

    def test_end_to_end(
        self,
        client: TestClient,
        service: MatchingAsync,
        jobs: InMemoryJobSource,
        profiles: InMemoryProfileSource,
        make_job: Callable[..., JobData],
        make_candidate: Callable[..., CandidateData],
    ):
        jobs.seed(make_job("job-1"))
        jobs.seed(make_job("job-2", is_salary_visible=False))
        profiles.seed(make_candidate())

        for job_id in ("job-1", "job-2"):
            assert (
                client.post(
                    f"/api/v1/matching/index/jobs/{job_id}", headers=EMPLOYER_HEADERS
                ).status_code
                == 202
            )
        client.post("/api/v1/matching/index/my-profile", headers=CANDIDATE_HEADERS)
        client.portal.call(service.run_worker_once)

        resp = client.get(
            "/api/v1/matching/my-job-matches",
            params={"page": 1, "pageSize": 5},
            headers=CANDIDATE_HEADERS,
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["embeddingReady"] is True
        assert body["total"] == 2
        assert body["pageSize"] == 5
        by_id = {m["jobId"]: m for m in body["results"]}
        assert set(by_id) == {"job-1", "job-2"}
        assert by_id["job-1"]["salaryMin"] == 50000.0
        assert by_id["job-2"]["salaryMin"] is None
        assert by_id["job-1"]["matchedSkills"] == ["ITSM", "JavaScript"]
        assert 0 <= by_id["job-1"]["scorePercent"] <= 100

        resp = client.get("/api/v1/matching/jobs/job-1/candidates", headers=EMPLOYER_HEADERS)
        assert resp.status_code == 200
        [match] = resp.json()["results"]
        assert match["userId"] == "cand-1"
        assert match["fullName"] == "Ada Lovelace"
        assert "profileUpdatedAt" in match

    def test_job_candidates_denied_for_other_employer(
        self, client: TestClient, jobs: InMemoryJobSource, make_job: Callable[..., JobData]
    ):
        jobs.seed(make_job(employer_id="other"))
        resp = client.get("/api/v1/matching/jobs/job-1/candidates", headers=EMPLOYER_HEADERS)
        assert resp.status_code == 403

    def test_job_candidates_unknown_job(self, client: TestClient):
        resp = client.get("/api/v1/matching/jobs/nope/candidates", headers=EMPLOYER_HEADERS)
        assert resp.status_code == 404


# =========================================================================
# Health
# =========================================================================


class TestHealth:
    def test_health(self, client: TestClient):
        client.post("/api/v1/matching/index/my-profile", headers=CANDIDATE_HEADERS)
        resp = client.get("/api/v1/matching/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "ok"
        assert body["records"]["Pending"] == 1
        assert body["worker"] == {"id": "api-test", "running": False, "ticks": 0}

    def test_unmapped_error_is_server_error(self, client: TestClient, service: MatchingAsync):
        with patch.object(service, "health", AsyncMock(side_effect=ConfigurationError("broken"))):
            resp = client.get("/api/v1/matching/health")
        assert resp.status_code == 500
        assert resp.json() == {"detail": "broken"}

    def test_worker_not_started_for_injected_service(
        self, client: TestClient, service: MatchingAsync
    ):
        assert not service.worker.running
