"""Pydantic schemas for Repair Hub API payloads."""

from __future__ import annotations
from enum import Enum
from typing import Any
from pydantic import BaseModel, Field


class Role(str, Enum):
    CITIZEN = "Citizen"
    REPAIR_TEAM = "Repair Team"


ROLES = [role.value for role in Role]


class SignupRequest(BaseModel):
    """Fields sent to ``POST /api/auth/signup``."""
    name: str
    email: str
    password: str
    role: str = Role.CITIZEN.value
    region: str
    city: str
    # Opaque handle: a Path is uploaded as a file, anything else as ``image_ref``
    image: Any = None

    def form_fields(self) -> dict[str, str]:
        return {
            "name": self.name,
            "email": self.email,
            "password": self.password,
            "role": self.role,
            "region": self.region,
            "city": self.city,
        }


class SignupResponse(BaseModel):
    """Body of a successful signup."""
    token: str | None = None
    user: dict[str, Any] | None = None
    message: str | None = None

    class Config:
        extra = "allow"


class RegionEntry(BaseModel):
    """One item of the list-shaped ``GET /api/regions`` payload."""
    name: str = Field(..., min_length=1)
    cities: list[str] = Field(default_factory=list)
