"""
API request and response models for PeanechEstate REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
listings/models.py, which own the internal domain representation. Route
handlers map between the two.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from auth.access import AccessDecision
from auth.directory import RosterEntry
from auth.models import Identity, Role
from listings.models import Property

# ---------------------------------------------------------------------------
# Enums
#
# Values mirror the tuples in listings/models.py.
# ---------------------------------------------------------------------------


class PropertyTypeEnum(str, Enum):
    house = "House"
    apartment = "Apartment"
    condo = "Condo"
    villa = "Villa"
    loft = "Loft"
    estate = "Estate"
    townhouse = "Townhouse"


class PropertyStatusEnum(str, Enum):
    available = "available"
    pending = "pending"
    sold = "sold"


class BedroomsEnum(str, Enum):
    any = "any"
    one = "1"
    two = "2"
    three = "3"
    four_plus = "4+"


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    """Request body for POST /api/v1/auth/login.

    role is only used when the email matches no known account; it lets the
    sign-up form create an ad hoc account with the chosen role.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    email: str = Field(min_length=3, max_length=255)
    password: str = Field(default="", max_length=1024)
    role: Optional[Role] = None


class IdentityResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    email: str
    name: str
    role: Role

    @classmethod
    def from_identity(cls, identity: Identity) -> "IdentityResponse":
        return cls(id=identity.id, email=identity.email, name=identity.name, role=identity.role)


class AccessDecisionResponse(BaseModel):
    """Response for GET /api/v1/auth/access."""

    model_config = ConfigDict(frozen=True)

    authenticated: bool
    granted: bool
    required_roles: list[Role]
    role: Optional[Role] = None
    reason: Optional[str] = None

    @classmethod
    def from_decision(cls, decision: AccessDecision, authenticated: bool) -> "AccessDecisionResponse":
        return cls(
            authenticated=authenticated,
            granted=decision.granted,
            required_roles=list(decision.required_roles),
            role=decision.actual_role,
            reason=decision.reason,
        )


class NavLinkResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    path: str


# ---------------------------------------------------------------------------
# Users (super-admin dashboard)
# ---------------------------------------------------------------------------


class RoleUpdate(BaseModel):
    """Request body for PATCH /api/v1/users/{user_id}/role."""

    role: Role


class RosterUserResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    email: str
    name: str
    role: Role
    created_at: str
    last_login: str
    status: str

    @classmethod
    def from_entry(cls, entry: RosterEntry) -> "RosterUserResponse":
        return cls(
            id=entry.id,
            email=entry.email,
            name=entry.name,
            role=entry.role,
            created_at=entry.created_at,
            last_login=entry.last_login,
            status=entry.status,
        )


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------


class PropertyCreate(BaseModel):
    """Request body for POST /api/v1/properties."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=200)
    description: str = Field(default="", max_length=5000)
    price: int = Field(gt=0)
    location: str = Field(min_length=1, max_length=200)
    bedrooms: int = Field(default=1, ge=0, le=50)
    bathrooms: int = Field(default=1, ge=0, le=50)
    square_footage: int = Field(default=0, ge=0)
    property_type: PropertyTypeEnum = PropertyTypeEnum.apartment
    status: PropertyStatusEnum = PropertyStatusEnum.available
    featured: bool = False
    image_url: str = Field(default="", max_length=2000)


class PropertyPatch(BaseModel):
    """Request body for PATCH /api/v1/properties/{id}. Omitted fields are unchanged."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=5000)
    price: Optional[int] = Field(default=None, gt=0)
    location: Optional[str] = Field(default=None, min_length=1, max_length=200)
    bedrooms: Optional[int] = Field(default=None, ge=0, le=50)
    bathrooms: Optional[int] = Field(default=None, ge=0, le=50)
    square_footage: Optional[int] = Field(default=None, ge=0)
    property_type: Optional[PropertyTypeEnum] = None
    status: Optional[PropertyStatusEnum] = None
    featured: Optional[bool] = None
    image_url: Optional[str] = Field(default=None, max_length=2000)


class PropertyResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str
    price: int
    location: str
    bedrooms: int
    bathrooms: int
    square_footage: int
    property_type: str
    status: str
    featured: bool
    image_url: str
    created_at: str

    @classmethod
    def from_property(cls, prop: Property) -> "PropertyResponse":
        return cls(
            id=prop.id or "",
            title=prop.title,
            description=prop.description,
            price=prop.price,
            location=prop.location,
            bedrooms=prop.bedrooms,
            bathrooms=prop.bathrooms,
            square_footage=prop.square_footage,
            property_type=prop.property_type,
            status=prop.status,
            featured=prop.featured,
            image_url=prop.image_url,
            created_at=prop.created_at or "",
        )


# ---------------------------------------------------------------------------
# Dashboards
# ---------------------------------------------------------------------------


class AdminDashboardResponse(BaseModel):
    """Response for GET /api/v1/dashboard/admin."""

    model_config = ConfigDict(frozen=True)

    welcome: str
    total_properties: int
    status_counts: dict[str, int]
    type_counts: dict[str, int]


class SuperAdminDashboardResponse(BaseModel):
    """Response for GET /api/v1/dashboard/super-admin."""

    model_config = ConfigDict(frozen=True)

    welcome: str
    total_users: int
    role_counts: dict[str, int]
    active_users: int


# ---------------------------------------------------------------------------
# Envelopes
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str
    authenticated: bool = False
