# marketplace/schemas/store.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


def _strip_required(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("field cannot be empty")
    return v


class StoreCreate(SQLModel):
    """
    Payload for opening a new store.

    Backend derives:
      - user_id from token
      - is_approved = False, is_active = True
    """

    model_config = ConfigDict(extra="forbid")

    name: str
    description: str | None = None
    logo_url: str | None = None
    store_type: str
    village: str
    phase_number: str = ""
    block_number: str = ""
    lot_number: str = ""

    @field_validator("name", "store_type", "village")
    @classmethod
    def not_empty(cls, v: str) -> str:
        return _strip_required(v)

    @field_validator("description", "phase_number", "block_number", "lot_number")
    @classmethod
    def strip_optional(cls, v: str | None) -> str | None:
        return v.strip() if v is not None else v


class StoreUpdate(SQLModel):
    """Partial update; omitted fields are left untouched."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = None
    description: str | None = None
    logo_url: str | None = None
    store_type: str | None = None
    village: str | None = None
    phase_number: str | None = None
    block_number: str | None = None
    lot_number: str | None = None

    @field_validator("name", "store_type", "village")
    @classmethod
    def not_empty(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return _strip_required(v)

    @field_validator("description", "phase_number", "block_number", "lot_number")
    @classmethod
    def strip_optional(cls, v: str | None) -> str | None:
        return v.strip() if v is not None else v


class StoreRead(SQLModel):
    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    description: str | None
    logo_url: str | None
    store_type: str
    village: str
    phase_number: str
    block_number: str
    lot_number: str
    is_approved: bool
    is_active: bool
    created_at: datetime
    updated_at: datetime


class StoreAdminAction(SQLModel):
    """Admin moderation of a store."""

    model_config = ConfigDict(extra="forbid")

    action: Literal["approve", "disable", "enable"] = Field(
        description="approve sets is_approved; disable/enable toggle is_active",
    )
