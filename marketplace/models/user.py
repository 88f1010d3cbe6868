# marketplace/models/user.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field

# Application roles
CUSTOMER = "CUSTOMER"
OWNER = "OWNER"
ADMIN = "ADMIN"

ROLES = (CUSTOMER, OWNER, ADMIN)


class User(SQLModel):
    """
    Local user profile, mirrored from the identity provider.

    Identity:
      - id: local primary key, referenced by stores.user_id / orders.user_id
      - external_id: identity-provider user id (JWT "sub"), unique

    Role:
      - CUSTOMER | OWNER | ADMIN
      - onboarded flips to True once a role has been chosen
        (ADMIN accounts are created already onboarded)

    Passwords and sessions live with the identity provider; this row only
    mirrors email, name, avatar and the application role.
    """

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
    )

    external_id: str = Field(
        description="Identity provider user id",
    )

    email: str = Field(
        description="Primary email from the identity provider",
    )

    name: str | None = Field(
        default=None,
        description="Display name; may be empty until the provider sends one",
    )

    image_url: str | None = None

    role: str = Field(
        default=CUSTOMER,
        description="Application role: CUSTOMER | OWNER | ADMIN",
    )

    onboarded: bool = Field(default=False)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
