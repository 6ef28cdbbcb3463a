"""
listings/catalog.py -- In-memory property catalogue with grid filtering.

Pattern: Repository over a plain list. There is no database behind the
listings; the catalogue is seeded with demo data at startup and mutations
last for the lifetime of the process.

Filtering mirrors the property grid:
  - search: case-insensitive substring of title OR location
  - price: inclusive [min_price, max_price]
  - property_type: "all" or an exact type name
  - bedrooms: "any", an exact count ("1", "2", "3"), or "4+" for 4 and up
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional

from listings.models import BEDROOM_OPTIONS, PROPERTY_STATUSES, PROPERTY_TYPES, Property, PropertyFilter

_UPDATABLE_FIELDS = {
    "title",
    "description",
    "price",
    "location",
    "bedrooms",
    "bathrooms",
    "square_footage",
    "property_type",
    "status",
    "featured",
    "image_url",
}


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _seed() -> list[Property]:
    created = "2024-01-15T00:00:00+00:00"
    return [
        Property(
            id="1",
            title="Modern Luxury Villa",
            description="Five-bedroom villa with pool and canyon views.",
            price=1_250_000,
            location="Beverly Hills, CA",
            bedrooms=5,
            bathrooms=4,
            square_footage=3500,
            property_type="Villa",
            featured=True,
            image_url="https://images.unsplash.com/photo-1613490493576-7fde63acd811?w=800&q=80",
            created_at=created,
        ),
        Property(
            id="2",
            title="Downtown Penthouse",
            description="Top-floor penthouse steps from the park.",
            price=950_000,
            location="Manhattan, NY",
            bedrooms=3,
            bathrooms=2,
            square_footage=2200,
            property_type="Apartment",
            featured=True,
            image_url="https://images.unsplash.com/photo-1512917774080-9991f1c4c750?w=800&q=80",
            created_at=created,
        ),
        Property(
            id="3",
            title="Seaside Cottage",
            description="Beach cottage with a wraparound deck.",
            price=750_000,
            location="Malibu, CA",
            bedrooms=2,
            bathrooms=2,
            square_footage=1800,
            property_type="House",
            status="pending",
            image_url="https://images.unsplash.com/photo-1600596542815-ffad4c1539a9?w=800&q=80",
            created_at=created,
        ),
        Property(
            id="4",
            title="Urban Loft",
            description="Converted warehouse loft with exposed brick.",
            price=650_000,
            location="Chicago, IL",
            bedrooms=1,
            bathrooms=1,
            square_footage=1200,
            property_type="Loft",
            image_url="https://images.unsplash.com/photo-1600607687939-ce8a6c25118c?w=800&q=80",
            created_at=created,
        ),
        Property(
            id="5",
            title="Country Estate",
            description="Mountain estate on twelve acres.",
            price=1_850_000,
            location="Aspen, CO",
            bedrooms=6,
            bathrooms=5,
            square_footage=4500,
            property_type="Estate",
            featured=True,
            status="sold",
            image_url="https://images.unsplash.com/photo-1600585154340-be6161a56a0c?w=800&q=80",
            created_at=created,
        ),
        Property(
            id="6",
            title="Waterfront Condo",
            description="Bayfront condo with marina access.",
            price=850_000,
            location="Miami, FL",
            bedrooms=2,
            bathrooms=2,
            square_footage=1600,
            property_type="Condo",
            image_url="https://images.unsplash.com/photo-1600566753086-00f18fb6b3ea?w=800&q=80",
            created_at=created,
        ),
    ]


def matches(prop: Property, criteria: PropertyFilter) -> bool:
    """Return True if prop satisfies every criterion.

    Raises ValueError for an unknown bedrooms option.
    """
    term = criteria.search.lower()
    if term and term not in prop.title.lower() and term not in prop.location.lower():
        return False
    if not criteria.min_price <= prop.price <= criteria.max_price:
        return False
    if criteria.property_type != "all" and prop.property_type != criteria.property_type:
        return False
    if criteria.statuses and prop.status not in criteria.statuses:
        return False

    if criteria.bedrooms not in BEDROOM_OPTIONS:
        raise ValueError(f"Unknown bedrooms option: {criteria.bedrooms!r}")
    if criteria.bedrooms == "4+":
        return prop.bedrooms >= 4
    if criteria.bedrooms != "any":
        return prop.bedrooms == int(criteria.bedrooms)
    return True


class PropertyCatalog:
    """Repository for Property entities.

    Usage:
        catalog = PropertyCatalog()
        villas = catalog.list_properties(PropertyFilter(property_type="Villa"))
        new_id = catalog.create(Property(title="...", ...))
    """

    def __init__(self, properties: Optional[list[Property]] = None) -> None:
        self._properties: list[Property] = properties if properties is not None else _seed()
        numeric = [int(p.id) for p in self._properties if p.id and p.id.isdigit()]
        self._next_id = max(numeric, default=0) + 1

    def list_properties(self, criteria: Optional[PropertyFilter] = None) -> list[Property]:
        criteria = criteria or PropertyFilter()
        return [p for p in self._properties if matches(p, criteria)]

    def get(self, property_id: str) -> Optional[Property]:
        for prop in self._properties:
            if prop.id == property_id:
                return prop
        return None

    def create(self, prop: Property) -> str:
        """Insert prop and return its assigned ID.

        Raises ValueError for an unknown property_type or status.
        """
        _validate(prop.property_type, prop.status)
        new_id = str(self._next_id)
        self._next_id += 1
        self._properties.append(replace(prop, id=new_id, created_at=_now_iso()))
        return new_id

    def update(self, property_id: str, **fields) -> Optional[Property]:
        """Update mutable fields. Returns the updated property, or None if not found.

        Unknown field names raise ValueError rather than being ignored.
        """
        unknown = set(fields) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown property fields: {sorted(unknown)!r}")
        for i, prop in enumerate(self._properties):
            if prop.id == property_id:
                updated = replace(prop, **fields)
                _validate(updated.property_type, updated.status)
                self._properties[i] = updated
                return updated
        return None

    def delete(self, property_id: str) -> bool:
        before = len(self._properties)
        self._properties = [p for p in self._properties if p.id != property_id]
        return len(self._properties) < before

    def status_counts(self) -> dict[str, int]:
        counts = {status: 0 for status in PROPERTY_STATUSES}
        for prop in self._properties:
            counts[prop.status] = counts.get(prop.status, 0) + 1
        return counts

    def type_counts(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for prop in self._properties:
            counts[prop.property_type] = counts.get(prop.property_type, 0) + 1
        return counts

    def __len__(self) -> int:
        return len(self._properties)


def _validate(property_type: str, status: str) -> None:
    if property_type not in PROPERTY_TYPES:
        raise ValueError(f"Unknown property type: {property_type!r}")
    if status not in PROPERTY_STATUSES:
        raise ValueError(f"Unknown property status: {status!r}")
