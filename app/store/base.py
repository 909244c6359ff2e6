"""
The operations the shop needs from its backing data store.

Owned rows (cart items, orders, profiles) are always filtered by
``user_id``. Implementations raise ``StoreError`` for anything the store
rejects or cannot be reached for; translating that into a user-facing
failure is the caller's job.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from app.schemas.profile import Profile
from app.schemas.shop import CartLine, CartRow, Order, OrderLine, Product


class StoreError(Exception):
    def __init__(self, message, *, table=None, status=None):
        super().__init__(message)
        self.table = table
        self.status = status


class DataStore(ABC):
    def for_session(self, session) -> "DataStore":
        """The store acting for ``session``'s user; credential-less stores return themselves."""
        return self

    # --- products ---
    @abstractmethod
    def list_products(self, *, category: Optional[str] = None) -> List[Product]:
        """Active products, newest first."""

    @abstractmethod
    def get_product(self, product_id: str) -> Optional[Product]:
        """An active product, or None."""

    # --- cart ---
    @abstractmethod
    def fetch_cart(self, user_id: str) -> List[CartLine]:
        """Every cart row of the user joined with its product."""

    @abstractmethod
    def find_cart_item(self, user_id: str, product_id: str) -> Optional[CartRow]:
        ...

    @abstractmethod
    def insert_cart_item(self, user_id: str, product_id: str, quantity: int) -> CartRow:
        ...

    @abstractmethod
    def update_cart_item(self, user_id: str, item_id: str, quantity: int) -> Optional[CartRow]:
        """Set the quantity; None when the user has no such row."""

    @abstractmethod
    def delete_cart_item(self, user_id: str, item_id: str) -> bool:
        """False when the user has no such row."""

    @abstractmethod
    def delete_cart(self, user_id: str) -> None:
        ...

    # --- orders ---
    @abstractmethod
    def insert_order(self, values: Dict[str, Any]) -> Order:
        """Insert an order header; the store assigns id, order number and timestamp."""

    @abstractmethod
    def insert_order_items(self, rows: List[Dict[str, Any]]) -> List[OrderLine]:
        ...

    @abstractmethod
    def fetch_orders(self, user_id: str) -> List[Order]:
        """Orders with nested items and product name/image, newest first."""

    # --- profiles ---
    @abstractmethod
    def get_profile(self, user_id: str) -> Optional[Profile]:
        ...

    @abstractmethod
    def upsert_profile(self, user_id: str, values: Dict[str, Any]) -> Profile:
        ...
