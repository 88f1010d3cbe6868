"""
Model factories for creating valid test data.

Every factory returns a model instance; `insert` writes it into a
document store and returns the persisted model.

Usage:
    owner = UserFactory.insert(db, role="OWNER", onboarded=True)
    store = StoreFactory.insert(db, user_id=owner.id)
"""

import uuid

from marketplace.database import ORDER_ITEMS, ORDERS, PRODUCTS, STORES, USERS
from marketplace.models.order import Order, OrderItem
from marketplace.models.product import Product
from marketplace.models.store import Store
from marketplace.models.user import CUSTOMER, User
from marketplace.services.order_service import generate_order_number


def _unique_email() -> str:
    return f"test-{uuid.uuid4().hex[:8]}@village.test"


class _Factory:
    model = None
    collection = None

    @classmethod
    def defaults(cls) -> dict:
        return {}

    @classmethod
    def create(cls, **overrides):
        return cls.model(**{**cls.defaults(), **overrides})

    @classmethod
    def insert(cls, db, **overrides):
        obj = cls.create(**overrides)
        return cls.model.model_validate(db.insert(cls.collection, obj.model_dump()))


class UserFactory(_Factory):
    model = User
    collection = USERS

    @classmethod
    def defaults(cls) -> dict:
        return {
            "external_id": f"user_{uuid.uuid4().hex[:12]}",
            "email": _unique_email(),
            "name": "Test User",
            "role": CUSTOMER,
            "onboarded": True,
        }


class StoreFactory(_Factory):
    model = Store
    collection = STORES

    @classmethod
    def defaults(cls) -> dict:
        return {
            "user_id": uuid.uuid4(),
            "name": "Corner Bakery",
            "store_type": "food",
            "village": "Green Village",
            "phase_number": "1",
            "block_number": "4",
            "lot_number": "12",
        }


class ProductFactory(_Factory):
    model = Product
    collection = PRODUCTS

    @classmethod
    def defaults(cls) -> dict:
        return {
            "store_id": uuid.uuid4(),
            "name": "Pandesal",
            "description": "Bread roll",
            "price": 5.0,
            "stock": 100,
            "category": "bakery",
            "images": ["https://cdn.village.test/pandesal.jpg"],
        }


class OrderFactory(_Factory):
    model = Order
    collection = ORDERS

    @classmethod
    def defaults(cls) -> dict:
        return {
            "user_id": uuid.uuid4(),
            "store_id": uuid.uuid4(),
            "order_number": generate_order_number(),
            "customer_name": "Juan dela Cruz",
            "customer_address": "Block 4 Lot 12",
            "payment_method": "cash",
            "total_amount": 10.0,
        }


class OrderItemFactory(_Factory):
    model = OrderItem
    collection = ORDER_ITEMS

    @classmethod
    def defaults(cls) -> dict:
        return {
            "order_id": uuid.uuid4(),
            "product_name": "Pandesal",
            "quantity": 2,
            "price": 5.0,
        }
