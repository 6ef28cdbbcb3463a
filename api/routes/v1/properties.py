"""
api/routes/v1/properties.py -- Property listing endpoints.

Routes:
  GET    /api/v1/properties          -- filtered grid (public)
  GET    /api/v1/properties/{id}     -- single listing (public)
  POST   /api/v1/properties          -- create (PROPERTY_MANAGEMENT)
  PATCH  /api/v1/properties/{id}     -- partial update (PROPERTY_MANAGEMENT)
  DELETE /api/v1/properties/{id}     -- remove (PROPERTY_MANAGEMENT)

Mutations reach the catalogue only after require_roles() has admitted the
caller; the catalogue itself knows nothing about roles.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response

from api.models import BedroomsEnum, PropertyCreate, PropertyPatch, PropertyResponse, PropertyStatusEnum
from auth.access import PROPERTY_MANAGEMENT
from auth.dependencies import require_roles
from auth.models import Identity
from listings.catalog import PropertyCatalog
from listings.models import PROPERTY_TYPES, Property, PropertyFilter

# Auth policy:
# - GET    /api/v1/properties[/{id}]:  public -- the grid is a marketing page
# - POST   /api/v1/properties:         admin or super_admin
# - PATCH  /api/v1/properties/{id}:    admin or super_admin
# - DELETE /api/v1/properties/{id}:    admin or super_admin
router = APIRouter()

_require_manager = require_roles(PROPERTY_MANAGEMENT)


def _catalog(request: Request) -> PropertyCatalog:
    return request.app.state.catalog


def _not_found() -> HTTPException:
    return HTTPException(status_code=404, detail={"code": "not_found", "message": "Property not found."})


@router.get("/properties", response_model=list[PropertyResponse])
def list_properties(
    request: Request,
    q: str = Query(default="", max_length=200, description="Matches title or location, case-insensitive"),
    min_price: int = Query(default=0, ge=0),
    max_price: int = Query(default=2_000_000, ge=0),
    property_type: str = Query(default="all", description="'all' or a property type"),
    bedrooms: BedroomsEnum = Query(default=BedroomsEnum.any),
    status: Optional[list[PropertyStatusEnum]] = Query(default=None),
) -> list[PropertyResponse]:
    """Return listings matching every supplied filter."""
    if property_type != "all" and property_type not in PROPERTY_TYPES:
        raise HTTPException(
            status_code=422,
            detail={"code": "validation_error", "message": f"Unknown property type: {property_type}"},
        )
    criteria = PropertyFilter(
        search=q,
        min_price=min_price,
        max_price=max_price,
        property_type=property_type,
        bedrooms=bedrooms.value,
        statuses=[s.value for s in status or []],
    )
    return [PropertyResponse.from_property(p) for p in _catalog(request).list_properties(criteria)]


@router.get("/properties/{property_id}", response_model=PropertyResponse)
def get_property(request: Request, property_id: str) -> PropertyResponse:
    prop = _catalog(request).get(property_id)
    if prop is None:
        raise _not_found()
    return PropertyResponse.from_property(prop)


@router.post("/properties", response_model=PropertyResponse, status_code=201)
def create_property(
    request: Request,
    body: PropertyCreate,
    identity: Identity = Depends(_require_manager),
) -> PropertyResponse:
    catalog = _catalog(request)
    data = body.model_dump()
    data["property_type"] = body.property_type.value
    data["status"] = body.status.value
    new_id = catalog.create(Property(**data))
    return PropertyResponse.from_property(catalog.get(new_id))


@router.patch("/properties/{property_id}", response_model=PropertyResponse)
def update_property(
    request: Request,
    property_id: str,
    body: PropertyPatch,
    identity: Identity = Depends(_require_manager),
) -> PropertyResponse:
    updates = body.model_dump(exclude_none=True, mode="json")
    if not updates:
        raise HTTPException(
            status_code=400,
            detail={"code": "no_changes", "message": "No fields to update."},
        )
    updated = _catalog(request).update(property_id, **updates)
    if updated is None:
        raise _not_found()
    return PropertyResponse.from_property(updated)


@router.delete("/properties/{property_id}", status_code=204)
def delete_property(
    request: Request,
    property_id: str,
    identity: Identity = Depends(_require_manager),
) -> Response:
    if not _catalog(request).delete(property_id):
        raise _not_found()
    return Response(status_code=204)
