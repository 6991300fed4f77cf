"""FastAPI application factory for the matching service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from talentmatch import __version__
from talentmatch._matching_async import MatchingAsync
from talentmatch.api.routers import health, matching
from talentmatch.config import MatchingConfig
from talentmatch.exceptions import (
    AccessDeniedError,
    AuthenticationRequiredError,
    DocumentNotFoundError,
    InvalidRequestError,
    MatchingError,
    SourceUnavailableError,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)

# Most specific first; anything else derived from MatchingError is a 500.
_STATUS_BY_ERROR: tuple[tuple[type[MatchingError], int], ...] = (
    (AuthenticationRequiredError, status.HTTP_401_UNAUTHORIZED),
    (AccessDeniedError, status.HTTP_403_FORBIDDEN),
    (DocumentNotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidRequestError, status.HTTP_400_BAD_REQUEST),
    (SourceUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def status_for(exc: MatchingError) -> int:
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def _matching_error_handler(request: Request, exc: MatchingError) -> JSONResponse:
    code = status_for(exc)
    if code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc)
    else:
        logger.info("%s %s rejected (%d): %s", request.method, request.url.path, code, exc)
    return JSONResponse(status_code=code, content={"detail": str(exc)})


def create_app(
    service: MatchingAsync | None = None,
    *,
    config: MatchingConfig | None = None,
    start_worker: bool | None = None,
) -> FastAPI:
    """Build the FastAPI app.

    With no *service*, one is built from *config* (or from the environment)
    when the app starts.  The lifespan opens the service, starts the
    indexing worker when enabled, and closes everything on shutdown.
    *start_worker* defaults to ``config.worker_enabled`` for services built
    here and to ``False`` for an injected *service*.
    """
    if service is None and config is None:
        config = MatchingConfig.from_env()
    if start_worker is None:
        start_worker = config.worker_enabled if service is None and config is not None else False

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        svc = service if service is not None else MatchingAsync.from_config(config)  # type: ignore[arg-type]
        app.state.matching = svc
        await svc.open()
        if start_worker:
            svc.start_worker()
        try:
            yield
        finally:
            await svc.close()

    app = FastAPI(title="TalentMatch", version=__version__, lifespan=lifespan)
    app.add_exception_handler(MatchingError, _matching_error_handler)
    app.include_router(matching.router)
    app.include_router(health.router)
    return app
