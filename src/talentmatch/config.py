"""MatchingConfig — service settings read from ``TALENTMATCH_*`` environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import TYPE_CHECKING, Any

from talentmatch.exceptions import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

ENV_PREFIX = "TALENTMATCH_"

EMBEDDING_PROVIDERS = ("hash", "openai", "sentence-transformers")
VECTOR_STORES = ("memory", "local", "pinecone")
_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    msg = f"expected a boolean, got {value!r}"
    raise ValueError(msg)


# field name -> parser for values read from the environment; default is str
_PARSERS: dict[str, Callable[[str], Any]] = {
    "poll_interval": float,
    "batch_size": int,
    "max_concurrency": int,
    "stale_after": float,
    "worker_enabled": _parse_bool,
    "top_k": int,
    "http_timeout": float,
    "embedding_dimensions": int,
}


@dataclass(frozen=True)
class MatchingConfig:
    """Everything needed to build the matching service.

    Build from the environment with :meth:`from_env`; each field maps to
    ``TALENTMATCH_<FIELD_NAME_UPPERCASE>``.
    """

    database_url: str = "sqlite+aiosqlite:///talentmatch.db"

    # Worker
    poll_interval: float = 15.0
    batch_size: int = 10
    max_concurrency: int | None = None
    stale_after: float | None = None
    worker_enabled: bool = True
    worker_id: str | None = None

    # Retrieval
    top_k: int = 100

    # Document sources
    jobs_service_url: str | None = None
    profiles_service_url: str | None = None
    http_timeout: float = 10.0

    # Embeddings
    embedding_provider: str = "hash"
    embedding_model: str | None = None
    embedding_dimensions: int | None = None

    # Vector index
    vector_store: str = "memory"
    vector_index_dir: str | None = None
    pinecone_index_prefix: str = "talentmatch"

    log_level: str = "INFO"

    def __post_init__(self) -> None:
        problems: list[str] = []
        if self.poll_interval <= 0:
            problems.append("poll_interval must be positive")
        if self.batch_size <= 0:
            problems.append("batch_size must be positive")
        if self.max_concurrency is not None and self.max_concurrency <= 0:
            problems.append("max_concurrency must be positive")
        if self.stale_after is not None and self.stale_after <= 0:
            problems.append("stale_after must be positive")
        if self.top_k <= 0:
            problems.append("top_k must be positive")
        if self.http_timeout <= 0:
            problems.append("http_timeout must be positive")
        if self.embedding_dimensions is not None and self.embedding_dimensions <= 0:
            problems.append("embedding_dimensions must be positive")
        if self.embedding_provider not in EMBEDDING_PROVIDERS:
            problems.append(
                f"embedding_provider must be one of {', '.join(EMBEDDING_PROVIDERS)}"
            )
        if self.vector_store not in VECTOR_STORES:
            problems.append(f"vector_store must be one of {', '.join(VECTOR_STORES)}")
        if bool(self.jobs_service_url) != bool(self.profiles_service_url):
            problems.append("jobs_service_url and profiles_service_url must be set together")
        if problems:
            raise ConfigurationError("Invalid configuration: " + "; ".join(problems))

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> MatchingConfig:
        """Build a config from ``TALENTMATCH_*`` variables; unset ones keep their defaults."""
        env = os.environ if environ is None else environ
        kwargs: dict[str, Any] = {}
        for f in fields(cls):
            name = f.name
            env_name = ENV_PREFIX + name.upper()
            raw = env.get(env_name)
            if raw is None or raw.strip() == "":
                continue
            parser = _PARSERS.get(name, str)
            try:
                kwargs[name] = parser(raw.strip())
            except ValueError as e:
                msg = f"Invalid value for {env_name}: {raw!r} ({e})"
                raise ConfigurationError(msg) from e
        return cls(**kwargs)

    @property
    def uses_http_sources(self) -> bool:
        return bool(self.jobs_service_url and self.profiles_service_url)

    def summary(self) -> dict[str, Any]:
        """Non-sensitive settings for logging."""
        return {
            "database": self.database_url.split("://", 1)[0],
            "poll_interval": self.poll_interval,
            "batch_size": self.batch_size,
            "worker_enabled": self.worker_enabled,
            "embedding_provider": self.embedding_provider,
            "vector_store": self.vector_store,
            "http_sources": self.uses_http_sources,
        }
