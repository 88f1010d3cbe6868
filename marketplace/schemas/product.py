# marketplace/schemas/product.py
import uuid
from datetime import datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


class ProductCreate(SQLModel):
    """
    Payload for creating a product in one of the caller's stores.

    At least one image reference is required; uploads themselves happen
    elsewhere and only their public URLs are stored here.
    """

    model_config = ConfigDict(extra="forbid")

    store_id: uuid.UUID
    name: str = Field(max_length=100)
    description: str
    price: float = Field(gt=0)
    stock: int = Field(ge=0)
    category: str
    images: list[str] = Field(min_length=1)

    @field_validator("name", "description", "category")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class ProductUpdate(SQLModel):
    """
    Partial update for a product.

    All fields optional. store_id cannot be changed.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=100)
    description: str | None = None
    price: float | None = Field(default=None, gt=0)
    stock: int | None = Field(default=None, ge=0)
    category: str | None = None
    images: list[str] | None = None

    @field_validator("name", "category")
    @classmethod
    def not_empty(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class ProductRead(SQLModel):
    id: uuid.UUID
    store_id: uuid.UUID
    name: str
    description: str | None
    price: float
    stock: int
    category: str
    images: list[str]
    created_at: datetime
    updated_at: datetime
