# marketplace/models/order.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Order(SQLModel):
    """
    Customer order placed against a store.

    References:
      - user_id: purchaser (User)
      - store_id: seller (Store)

    Status lifecycle:
      new -> accepted -> preparing -> for_delivery -> completed
      cancelled / declined from any non-terminal status
    """

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
    )

    user_id: uuid.UUID
    store_id: uuid.UUID

    order_number: str = Field(description="Human-readable order reference")

    customer_name: str
    customer_email: str | None = None
    customer_phone: str | None = None
    customer_address: str

    status: str = Field(
        default="new",
        description="Order status lifecycle",
    )

    # cash | card | online
    payment_method: str
    # pending | paid | failed
    payment_status: str = "pending"

    total_amount: float = Field(
        ge=0,
        description="Sum of item price * quantity",
    )

    notes: str | None = None
    estimated_delivery_time: str | None = None

    completed_at: datetime | None = Field(
        default=None,
        description="Set once, when status becomes 'completed'",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class OrderItem(SQLModel):
    """
    Line item inside an order.

    Product name/price are snapshotted at order time so the item survives
    product deletion. product_id is informational only.
    """

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
    )

    order_id: uuid.UUID

    product_id: uuid.UUID | None = None
    product_name: str

    quantity: int = Field(
        gt=0,
        description="Quantity ordered (>=1)",
    )

    price: float = Field(
        gt=0,
        description="Unit price at time of order",
    )

    image_url: str | None = None
