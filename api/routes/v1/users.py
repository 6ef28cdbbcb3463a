"""
api/routes/v1/users.py -- User management for the super-admin dashboard.

Routes:
  GET   /api/v1/users                 -- roster (USER_MANAGEMENT)
  PATCH /api/v1/users/{id}/role       -- change a user's role (USER_MANAGEMENT)
  PATCH /api/v1/users/{id}/status     -- toggle active/suspended (USER_MANAGEMENT)

A role change calls SessionStore.update_role() under the same single-flight
guard as login and logout (409 while one is pending), then updates the roster
entry. The session store only rewrites the active identity; when the target
is someone else the call still succeeds and the signed-in user's role is
untouched.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request

from api.models import RosterUserResponse, RoleUpdate
from api.routes.v1.auth import get_session_guard
from auth.access import USER_MANAGEMENT
from auth.dependencies import get_session_store, require_roles
from auth.directory import UserRoster

# Auth policy: every route here requires super_admin.
# Router-level dependency enforces the gate; handlers do not repeat it.
router = APIRouter(dependencies=[Depends(require_roles(USER_MANAGEMENT))])


def _roster(request: Request) -> UserRoster:
    return request.app.state.roster


def _not_found() -> HTTPException:
    return HTTPException(status_code=404, detail={"code": "not_found", "message": "User not found."})


@router.get("/users", response_model=list[RosterUserResponse])
async def list_users(request: Request) -> list[RosterUserResponse]:
    return [RosterUserResponse.from_entry(u) for u in _roster(request).list_users()]


@router.patch("/users/{user_id}/role", response_model=RosterUserResponse)
async def update_user_role(request: Request, user_id: str, body: RoleUpdate) -> RosterUserResponse:
    """Replace a user's role.

    Changing your own role takes effect on the active session immediately, so
    a super admin who demotes themselves loses access on the next request.
    """
    roster = _roster(request)
    if roster.get(user_id) is None:
        raise _not_found()

    with get_session_guard(request).hold():
        await get_session_store(request).update_role(user_id, body.role)
        updated = roster.set_role(user_id, body.role)
    return RosterUserResponse.from_entry(updated)


@router.patch("/users/{user_id}/status", response_model=RosterUserResponse)
async def toggle_user_status(request: Request, user_id: str) -> RosterUserResponse:
    updated = _roster(request).toggle_status(user_id)
    if updated is None:
        raise _not_found()
    return RosterUserResponse.from_entry(updated)
