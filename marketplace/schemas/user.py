# marketplace/schemas/user.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel

Role = Literal["CUSTOMER", "OWNER", "ADMIN"]


class UserRead(SQLModel):
    """Response schema returned to clients."""

    id: uuid.UUID
    email: str
    name: str | None
    image_url: str | None
    role: Role
    onboarded: bool
    created_at: datetime


class RoleRead(SQLModel):
    """Current role/onboarding state of the caller."""

    role: Role
    onboarded: bool


class RoleUpdate(SQLModel):
    """
    Self-service role selection during onboarding.

    Accepts any string so the role service can answer with a descriptive
    400 for values it refuses (ADMIN in particular).
    """

    model_config = ConfigDict(extra="forbid")

    role: str

    @field_validator("role")
    @classmethod
    def normalize_role(cls, v: str) -> str:
        return v.strip().upper()
