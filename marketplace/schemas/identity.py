# marketplace/schemas/identity.py
from typing import Literal

from pydantic import ConfigDict
from sqlmodel import SQLModel

IdentityEventType = Literal["user.created", "user.updated", "user.deleted"]


class IdentityEmail(SQLModel):
    id: str
    email_address: str


class IdentityEventData(SQLModel):
    """
    User attributes carried by an identity lifecycle event.

    Deletion events only carry `id`.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    email_addresses: list[IdentityEmail] = []
    primary_email_address_id: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    image_url: str | None = None

    @property
    def primary_email(self) -> str | None:
        for address in self.email_addresses:
            if address.id == self.primary_email_address_id:
                return address.email_address
        return None

    @property
    def display_name(self) -> str | None:
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) or None


class IdentityEvent(SQLModel):
    """Verified webhook body: {"type": "...", "data": {...}}."""

    model_config = ConfigDict(extra="ignore")

    type: IdentityEventType
    data: IdentityEventData


class Identity(SQLModel):
    """Caller identity as asserted by a verified bearer token."""

    external_id: str
    email: str
    name: str | None = None
    image_url: str | None = None
