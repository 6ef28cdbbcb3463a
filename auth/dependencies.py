"""
auth/dependencies.py -- FastAPI Depends() helpers for session gating.

The application runs one SessionStore per process, created in the API
lifespan and stored on app.state. These helpers fetch it from the request,
wrap it in AccessControl, and translate denied decisions into HTTP errors:

  get_current_identity()   -- 401 auth_required if nobody is signed in.
  require_roles(allowed)   -- 401 auth_required, or 403 access_denied naming
                              the required roles and the caller's actual role.

Layer rule: no imports from api/ or listings/.
  auth/dependencies.py may import from fastapi (for HTTPException/Request)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from fastapi import HTTPException, Request

from auth.access import ACCESS_DENIED, AccessControl, AccessDecision
from auth.models import Identity, Role
from auth.session import SessionStore


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_access_control(request: Request) -> AccessControl:
    return AccessControl(get_session_store(request))


def _raise_for(decision: AccessDecision) -> None:
    if decision.reason == ACCESS_DENIED:
        required = [r.value for r in decision.required_roles]
        actual = decision.actual_role.value if decision.actual_role else None
        raise HTTPException(
            status_code=403,
            detail={
                "code": "access_denied",
                "message": (
                    "You don't have permission to access this page. "
                    f"Required roles: {', '.join(required)}. Your current role: {actual}."
                ),
                "required_roles": required,
                "role": actual,
            },
        )
    raise HTTPException(
        status_code=401,
        detail={"code": "auth_required", "message": "You need to be logged in to access this page."},
    )


def get_current_identity(request: Request) -> Identity:
    """Require a signed-in session. Raises HTTP 401 otherwise.

    Use as a FastAPI dependency:
        @router.get("/protected")
        async def route(identity: Identity = Depends(get_current_identity)): ...
    """
    identity = get_session_store(request).current
    if identity is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "auth_required", "message": "You need to be logged in to access this page."},
        )
    return identity


def require_roles(allowed_roles: Iterable[Role]) -> Callable[[Request], Identity]:
    """Build a dependency that admits only the listed roles.

    Use as a FastAPI dependency:
        @router.get("/admin-only")
        async def route(identity: Identity = Depends(require_roles(ADMIN_DASHBOARD))): ...
    """
    allowed = frozenset(Role(r) for r in allowed_roles)

    def dependency(request: Request) -> Identity:
        decision = get_access_control(request).check(allowed)
        if not decision.granted:
            _raise_for(decision)
        return get_session_store(request).current

    return dependency
