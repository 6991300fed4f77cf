"""FastAPI dependencies — the service facade and the caller's identity."""

from __future__ import annotations

from fastapi import Depends, Header, Request

from talentmatch._matching_async import MatchingAsync
from talentmatch.exceptions import AccessDeniedError, AuthenticationRequiredError
from talentmatch.matching.types import Principal


def get_matching(request: Request) -> MatchingAsync:
    return request.app.state.matching


def get_principal(
    x_user_id: str | None = Header(default=None),
    x_user_roles: str | None = Header(default=None),
) -> Principal:
    """Caller identity as forwarded by the gateway.

    ``X-User-Id`` carries the user id and ``X-User-Roles`` a comma-separated
    role list.
    """
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise AuthenticationRequiredError("Authentication required.")
    roles = frozenset(r.strip() for r in (x_user_roles or "").split(",") if r.strip())
    return Principal(user_id=user_id, roles=roles)


def require_candidate(principal: Principal = Depends(get_principal)) -> Principal:
    if not principal.is_candidate:
        raise AccessDeniedError("Only candidates can use this endpoint.")
    return principal
