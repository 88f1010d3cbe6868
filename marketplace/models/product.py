# marketplace/models/product.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Product(SQLModel):
    """
    Catalog entry belonging to a store.

    store_id must reference an existing Store.
    """

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
    )

    store_id: uuid.UUID = Field(description="Owning store")

    name: str = Field(min_length=1, max_length=100)

    description: str | None = None

    price: float = Field(
        gt=0,
        description="Unit price",
    )

    stock: int = Field(
        default=0,
        ge=0,
        description="How many units currently in stock",
    )

    category: str

    images: list[str] = Field(
        default_factory=list,
        description="Public image URLs",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
