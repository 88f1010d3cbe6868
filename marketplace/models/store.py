# marketplace/models/store.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Store(SQLModel):
    """
    A seller's storefront.

    user_id must reference an existing User. Nothing in the document store
    enforces that; the consistency scan does.
    """

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
    )

    user_id: uuid.UUID = Field(description="Owning user")

    name: str = Field(min_length=1)
    description: str | None = None
    logo_url: str | None = None

    store_type: str = Field(min_length=1)

    # Location inside the village: phase / block / lot
    village: str = Field(min_length=1)
    phase_number: str = ""
    block_number: str = ""
    lot_number: str = ""

    is_approved: bool = Field(
        default=False,
        description="Set by an admin; new stores start unapproved",
    )
    is_active: bool = Field(
        default=True,
        description="Inactive stores cannot receive orders",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
