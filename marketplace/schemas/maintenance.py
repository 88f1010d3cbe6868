# marketplace/schemas/maintenance.py
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ActionType = Literal[
    "orphan-stores",
    "deleted-stores",
    "orphan-products",
    "deleted-products",
    "orphan-orders",
    "deleted-order-items",
    "deleted-orders",
    "orphan-order-items",
    "deleted-orphan-items",
]


class ScanReport(BaseModel):
    """
    Orphaned ids per entity type.

    Products/orders/items count as orphaned when their parent is itself an
    orphan, since a repair run would remove that parent first.
    """

    orphan_stores: list[str] = []
    orphan_products: list[str] = []
    orphan_orders: list[str] = []
    orphan_order_items: list[str] = []

    @property
    def is_clean(self) -> bool:
        return not (
            self.orphan_stores
            or self.orphan_products
            or self.orphan_orders
            or self.orphan_order_items
        )


class RepairAction(BaseModel):
    """One entry of the repair action log."""

    type: ActionType
    count: int
    ids: list[str] | None = None


class RepairReport(BaseModel):
    """
    Result of a repair run, serialized as
    {"dryRun": bool, "actions": [{"type", "count", "ids"}]}.
    """

    model_config = ConfigDict(populate_by_name=True)

    dry_run: bool = Field(alias="dryRun")
    actions: list[RepairAction] = []
    failed_phase: str | None = Field(default=None, alias="failedPhase")
    error: str | None = None

    def to_json_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
