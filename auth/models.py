"""
auth/models.py -- Domain types for authentication entities.

Pattern: Data class (pure data container, minimal logic). Stores and routes do
the work; the only behaviour here is the serialization seam used by the
session store when it writes and rehydrates the durable session record.

Layer rule: no imports from api/, listings/, or storage/.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from enum import Enum
from typing import Any


class Role(str, Enum):
    """Authorization unit. Membership checks are exact-match, never ordered."""

    visitor = "visitor"
    agent = "agent"
    admin = "admin"
    super_admin = "super_admin"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")


_IDENTITY_FIELDS = ("id", "email", "name", "role")


@dataclass(frozen=True)
class Identity:
    """The authenticated user: opaque id, email, display name, and role.

    Frozen because only the role may change, and it changes wholesale via
    with_role(), which returns a new Identity.
    """

    id: str
    email: str
    name: str
    role: Role

    def with_role(self, role: Role) -> Identity:
        return replace(self, role=Role(role))

    def to_dict(self) -> dict[str, str]:
        data = asdict(self)
        data["role"] = self.role.value
        return data

    @classmethod
    def from_dict(cls, data: Any) -> Identity:
        """Build an Identity from a decoded session record.

        Raises ValueError when data is not a mapping, a field is missing or is
        not a string, or the role is not a known Role value.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Identity record must be an object, got {type(data).__name__}")
        missing = [f for f in _IDENTITY_FIELDS if f not in data]
        if missing:
            raise ValueError(f"Identity record missing fields: {', '.join(missing)}")
        for f in _IDENTITY_FIELDS:
            if not isinstance(data[f], str):
                raise ValueError(f"Identity field {f!r} must be a string")
        try:
            role = Role(data["role"])
        except ValueError as exc:
            raise ValueError(f"Unknown role {data['role']!r}") from exc
        return cls(id=data["id"], email=data["email"], name=data["name"], role=role)
