# marketplace/schemas/order.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

OrderStatus = Literal[
    "new",
    "accepted",
    "preparing",
    "for_delivery",
    "completed",
    "cancelled",
    "declined",
]
PaymentMethod = Literal["cash", "card", "online"]
PaymentStatus = Literal["pending", "paid", "failed"]


class OrderItemCreate(SQLModel):
    """One submitted line item; becomes an immutable OrderItem snapshot."""

    model_config = ConfigDict(extra="forbid")

    product_id: uuid.UUID | None = None
    product_name: str
    quantity: int = Field(gt=0)
    price: float = Field(gt=0)
    image_url: str | None = None

    @field_validator("product_name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("product_name cannot be empty")
        return v


class OrderCreate(SQLModel):
    """
    Payload for placing an order against a store.

    Backend derives:
      - user_id from token
      - status = 'new'
      - order_number
      - total_amount from items
    """

    model_config = ConfigDict(extra="forbid")

    store_id: uuid.UUID
    customer_name: str
    customer_email: str | None = None
    customer_phone: str | None = None
    customer_address: str
    payment_method: PaymentMethod
    payment_status: PaymentStatus = "pending"
    notes: str | None = None
    estimated_delivery_time: str | None = None
    items: list[OrderItemCreate] = Field(min_length=1)

    @field_validator("customer_name", "customer_address")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v

    @field_validator("customer_email", "customer_phone", "notes", "estimated_delivery_time")
    @classmethod
    def normalize_optional(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class OrderUpdate(SQLModel):
    """
    Partial update of an order: status transition and/or delivery details.

    At least one field must be given.
    """

    model_config = ConfigDict(extra="forbid")

    status: OrderStatus | None = None
    estimated_delivery_time: str | None = None
    notes: str | None = None

    @field_validator("estimated_delivery_time", "notes")
    @classmethod
    def normalize_optional(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class OrderRead(SQLModel):
    """
    Lightweight representation of an order (without items).
    """

    id: uuid.UUID
    user_id: uuid.UUID
    store_id: uuid.UUID
    order_number: str
    customer_name: str
    customer_email: str | None
    customer_phone: str | None
    customer_address: str
    status: OrderStatus
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    total_amount: float
    notes: str | None
    estimated_delivery_time: str | None
    completed_at: datetime | None
    created_at: datetime
    updated_at: datetime


class OrderItemRead(SQLModel):
    """
    Representation of a single order line item.
    """

    id: uuid.UUID
    order_id: uuid.UUID
    product_id: uuid.UUID | None
    product_name: str
    quantity: int
    price: float
    image_url: str | None
    line_total: float


class OrderWithItemsRead(OrderRead):
    """
    Full order view including items.
    """

    items: list[OrderItemRead]
