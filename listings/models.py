"""
listings/models.py -- Domain dataclasses for property listings.

Pattern: Data class (pure data container, zero logic). The catalog owns the
behaviour; routes map these to API models.
"""

from __future__ import annotations

from dataclasses import dataclass, field

PROPERTY_TYPES = ("House", "Apartment", "Condo", "Villa", "Loft", "Estate", "Townhouse")
PROPERTY_STATUSES = ("available", "pending", "sold")
BEDROOM_OPTIONS = ("any", "1", "2", "3", "4+")


@dataclass
class Property:
    title: str
    price: int
    location: str
    bedrooms: int
    bathrooms: int
    square_footage: int
    property_type: str  # one of PROPERTY_TYPES
    id: str | None = None
    description: str = ""
    status: str = "available"  # one of PROPERTY_STATUSES
    featured: bool = False
    image_url: str = ""
    created_at: str | None = None


@dataclass
class PropertyFilter:
    """Search criteria for the property grid. Defaults match everything up to 2M."""

    search: str = ""
    min_price: int = 0
    max_price: int = 2_000_000
    property_type: str = "all"
    bedrooms: str = "any"  # one of BEDROOM_OPTIONS
    statuses: list[str] = field(default_factory=list)  # empty = any status
