"""Domain models for accounts."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

ADMIN_ROLES = frozenset({"admin", "super_admin"})


@dataclass(frozen=True, slots=True)
class Actor:
    """Who is performing a catalogue access, as handed over by the auth layer."""

    id: str
    name: str
    email: Optional[str]
    role: str


@dataclass(slots=True)
class Account:
    id: str
    username: str
    role: str
    is_active: bool
    password_hash: str = field(repr=False)
    name: Optional[str] = None
    email: Optional[str] = None
    company_name: Optional[str] = None
    phone_number: Optional[str] = None
    city: Optional[str] = None
    is_deleted: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        return self.name or self.username

    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    def is_super_admin(self) -> bool:
        return self.role == "super_admin"

    def as_actor(self) -> Actor:
        return Actor(id=self.id, name=self.display_name, email=self.email, role=self.role)


@dataclass(slots=True)
class AccountCreateInput:
    username: str
    password: str
    role: str = "user"
    name: Optional[str] = None
    email: Optional[str] = None
    company_name: Optional[str] = None
    phone_number: Optional[str] = None
    city: Optional[str] = None
    is_active: bool = True


# Sentinel: field left out of a partial update.
UNSET: Any = object()


@dataclass(slots=True)
class AccountUpdateInput:
    name: Optional[str] = UNSET
    email: Optional[str] = UNSET
    role: Optional[str] = UNSET
    company_name: Optional[str] = UNSET
    phone_number: Optional[str] = UNSET
    city: Optional[str] = UNSET

    def changes(self) -> dict[str, Any]:
        return {
            name: getattr(self, name)
            for name in ("name", "email", "role", "company_name", "phone_number", "city")
            if getattr(self, name) is not UNSET
        }
