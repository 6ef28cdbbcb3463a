"""
api/routes/v1/dashboard.py -- Aggregates for the two administrative dashboards.

  GET /api/v1/dashboard/admin        -- listing totals (ADMIN_DASHBOARD)
  GET /api/v1/dashboard/super-admin  -- user totals by role (SUPER_ADMIN_DASHBOARD)

Read-only aggregate routes -- no mutations here.
"""

from fastapi import APIRouter, Depends, Request

from api.models import AdminDashboardResponse, SuperAdminDashboardResponse
from auth.access import ADMIN_DASHBOARD, SUPER_ADMIN_DASHBOARD
from auth.dependencies import require_roles
from auth.directory import UserRoster
from auth.models import Identity
from listings.catalog import PropertyCatalog

# Auth policy:
# - GET /api/v1/dashboard/admin:        admin or super_admin
# - GET /api/v1/dashboard/super-admin:  super_admin only
router = APIRouter()


def _welcome(identity: Identity) -> str:
    return f"Welcome back, {identity.name} ({identity.role.label})"


@router.get("/dashboard/admin", response_model=AdminDashboardResponse)
def admin_dashboard(
    request: Request,
    identity: Identity = Depends(require_roles(ADMIN_DASHBOARD)),
) -> AdminDashboardResponse:
    catalog: PropertyCatalog = request.app.state.catalog
    return AdminDashboardResponse(
        welcome=_welcome(identity),
        total_properties=len(catalog),
        status_counts=catalog.status_counts(),
        type_counts=catalog.type_counts(),
    )


@router.get("/dashboard/super-admin", response_model=SuperAdminDashboardResponse)
def super_admin_dashboard(
    request: Request,
    identity: Identity = Depends(require_roles(SUPER_ADMIN_DASHBOARD)),
) -> SuperAdminDashboardResponse:
    roster: UserRoster = request.app.state.roster
    users = roster.list_users()
    return SuperAdminDashboardResponse(
        welcome=_welcome(identity),
        total_users=len(users),
        role_counts=roster.role_counts(),
        active_users=sum(1 for u in users if u.status == "active"),
    )
