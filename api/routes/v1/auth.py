"""
api/routes/v1/auth.py -- Session endpoints.

Routes:
  POST /api/v1/auth/login    -- sign in as a demo account (or an ad hoc one with a role)
  POST /api/v1/auth/logout   -- end the session; 200 even if nobody was signed in
  GET  /api/v1/auth/me       -- the active identity (requires auth)
  GET  /api/v1/auth/access   -- authorization decision for an ad hoc allow-list

Single-flight:
  SessionStore does not serialize overlapping calls. This layer is its caller,
  so it owns the "operation in progress" flag: while a login is suspended on
  its simulated latency, a second login, a logout or a role change (see
  api/routes/v1/users.py) gets 409.

Security:
  Login failures return one generic message. Nothing is verified, so the
  response must not suggest that a password was checked.
  POST /login is rate-limited per IP (LOGIN_RATE_LIMIT).
  Cache-Control: no-store on login responses.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter
from api.models import AccessDecisionResponse, IdentityResponse, LoginRequest, MessageResponse
from auth.access import AccessControl
from auth.dependencies import get_access_control, get_current_identity, get_session_store
from auth.models import Identity, Role
from auth.session import SessionStore
from core.config import get_settings

# Auth policy:
# - POST /api/v1/auth/login:   public -- login endpoint must be unauthenticated
# - POST /api/v1/auth/logout:  public -- logging out needs no prior auth
# - GET  /api/v1/auth/me:      requires auth (get_current_identity)
# - GET  /api/v1/auth/access:  public -- reports a decision, grants nothing
router = APIRouter()


class SessionOperationGuard:
    """Boolean "operation in progress" flag for session-mutating requests."""

    def __init__(self) -> None:
        self.busy = False

    @contextmanager
    def hold(self) -> Iterator[None]:
        if self.busy:
            raise HTTPException(
                status_code=409,
                detail={
                    "code": "operation_in_progress",
                    "message": "Another sign-in, sign-out or role change is still being processed.",
                },
            )
        self.busy = True
        try:
            yield
        finally:
            self.busy = False


def get_session_guard(request: Request) -> SessionOperationGuard:
    return request.app.state.session_guard


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@limiter.limit(get_settings().login_rate_limit)  # must be ABOVE @router to preserve FastAPI introspection
@router.post("/auth/login", response_model=IdentityResponse)
async def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Sign in and persist the session.

    Known demo emails sign in with their stored role regardless of the role
    field. Unknown emails succeed only when a role is supplied.
    """
    store: SessionStore = get_session_store(request)
    guard = get_session_guard(request)

    with guard.hold():
        ok = await store.login(body.email, body.password, body.role)

    if not ok:
        resp = JSONResponse(
            status_code=401,
            content={"error": {"code": "login_failed", "message": "Unable to sign in with those details."}},
        )
        resp.headers["Cache-Control"] = "no-store"
        return resp

    resp = JSONResponse(
        status_code=200,
        content=IdentityResponse.from_identity(store.current).model_dump(mode="json"),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/auth/logout", response_model=MessageResponse)
async def logout(request: Request) -> MessageResponse:
    """Clear the session and its durable record."""
    store: SessionStore = get_session_store(request)
    with get_session_guard(request).hold():
        store.logout()
    return MessageResponse(message="Logged out.")


@router.get("/auth/access", response_model=AccessDecisionResponse)
async def access(
    roles: list[Role] = Query(default=[]),
    access_control: AccessControl = Depends(get_access_control),
) -> AccessDecisionResponse:
    """Report whether the current session satisfies the given allow-list.

    Always 200: a denial is an ordinary answer here, not an error. An empty
    allow-list is never granted.
    """
    decision = access_control.check(roles)
    return AccessDecisionResponse.from_decision(decision, access_control.is_authenticated())


# ---------------------------------------------------------------------------
# Authenticated endpoints
# ---------------------------------------------------------------------------


@router.get("/auth/me", response_model=IdentityResponse)
async def me(identity: Identity = Depends(get_current_identity)) -> IdentityResponse:
    """Return the currently signed-in identity."""
    return IdentityResponse.from_identity(identity)
