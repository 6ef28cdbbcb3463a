"""
api/routes/v1/navigation.py -- Menu links visible to the current session.

The header menu shows the public pages to everyone and adds the dashboard
links only for roles on each dashboard's allow-list. The client renders the
list as-is; it never decides visibility itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import APIRouter, Depends

from api.models import NavLinkResponse
from auth.access import ADMIN_DASHBOARD, SUPER_ADMIN_DASHBOARD, AccessControl
from auth.dependencies import get_access_control
from auth.models import Role


@dataclass(frozen=True)
class NavLink:
    label: str
    path: str
    allowed_roles: Optional[frozenset[Role]] = None  # None = public


NAV_LINKS: tuple[NavLink, ...] = (
    NavLink("Home", "/"),
    NavLink("Properties", "/properties"),
    NavLink("Agents", "/agents"),
    NavLink("Pricing", "/pricing"),
    NavLink("Contact", "/contact"),
    NavLink("Admin", "/admin", ADMIN_DASHBOARD),
    NavLink("Super Admin", "/super-admin", SUPER_ADMIN_DASHBOARD),
)


def visible_links(access_control: AccessControl, links: tuple[NavLink, ...] = NAV_LINKS) -> list[NavLink]:
    return [link for link in links if link.allowed_roles is None or access_control.has_any_role(link.allowed_roles)]


router = APIRouter()


@router.get("/navigation", response_model=list[NavLinkResponse])
async def navigation(access_control: AccessControl = Depends(get_access_control)) -> list[NavLinkResponse]:
    """Return the menu links for the current session, in display order."""
    return [NavLinkResponse(label=link.label, path=link.path) for link in visible_links(access_control)]
