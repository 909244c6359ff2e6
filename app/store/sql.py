from contextlib import contextmanager
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models import db
from models.cart import CartItem as CartItemRow
from models.order import Order as OrderRow, OrderItem as OrderItemRow
from models.product import Product as ProductRow
from models.user import Profile as ProfileRow
from app.schemas.profile import Profile
from app.schemas.shop import CartLine, CartRow, Order, OrderLine, Product
from app.utils import transactional
from .base import DataStore, StoreError


class SqlStore(DataStore):
    """Data store backed by the local SQLAlchemy models.

    Used for development and tests; behaves like the remote store, including
    the server-generated order number.
    """

    @contextmanager
    def _reading(self, table):
        try:
            yield
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StoreError(f"Failed to read {table}: {e}", table=table) from e

    @contextmanager
    def _writing(self, table, message):
        try:
            with transactional(message):
                yield
        except IntegrityError as e:
            raise StoreError(f"{message}: {e}", table=table, status=409) from e
        except SQLAlchemyError as e:
            raise StoreError(f"{message}: {e}", table=table) from e

    # --- products ---
    def list_products(self, *, category=None) -> List[Product]:
        with self._reading("products"):
            query = ProductRow.query.filter_by(is_active=True)
            if category:
                query = query.filter_by(category=category)
            rows = query.order_by(ProductRow.created_at.desc()).all()
            return [Product.model_validate(r) for r in rows]

    def get_product(self, product_id) -> Optional[Product]:
        with self._reading("products"):
            row = ProductRow.query.filter_by(id=product_id, is_active=True).first()
            return Product.model_validate(row) if row else None

    # --- cart ---
    def fetch_cart(self, user_id) -> List[CartLine]:
        with self._reading("cart_items"):
            rows = (
                CartItemRow.query.filter_by(user_id=user_id)
                .order_by(CartItemRow.created_at.asc())
                .all()
            )
            return [CartLine.model_validate(r) for r in rows]

    def find_cart_item(self, user_id, product_id) -> Optional[CartRow]:
        with self._reading("cart_items"):
            row = CartItemRow.query.filter_by(user_id=user_id, product_id=product_id).first()
            return CartRow.model_validate(row) if row else None

    def insert_cart_item(self, user_id, product_id, quantity) -> CartRow:
        row = CartItemRow(user_id=user_id, product_id=product_id, quantity=quantity)
        with self._writing("cart_items", "Failed to add to cart"):
            db.session.add(row)
        return CartRow.model_validate(row)

    def update_cart_item(self, user_id, item_id, quantity) -> Optional[CartRow]:
        with self._writing("cart_items", "Failed to update cart quantity"):
            row = CartItemRow.query.filter_by(id=item_id, user_id=user_id).first()
            if row:
                row.quantity = quantity
        return CartRow.model_validate(row) if row else None

    def delete_cart_item(self, user_id, item_id) -> bool:
        with self._writing("cart_items", "Failed to remove cart item"):
            deleted = CartItemRow.query.filter_by(id=item_id, user_id=user_id).delete()
        return deleted > 0

    def delete_cart(self, user_id) -> None:
        with self._writing("cart_items", "Failed to clear cart"):
            CartItemRow.query.filter_by(user_id=user_id).delete()

    # --- orders ---
    def insert_order(self, values) -> Order:
        row = OrderRow(**values)
        with self._writing("orders", "Failed to create order"):
            db.session.add(row)
        return Order.model_validate(row)

    def insert_order_items(self, rows) -> List[OrderLine]:
        items = [OrderItemRow(**r) for r in rows]
        with self._writing("order_items", "Failed to create order items"):
            db.session.add_all(items)
        return [OrderLine.model_validate(i) for i in items]

    def fetch_orders(self, user_id) -> List[Order]:
        with self._reading("orders"):
            rows = (
                OrderRow.query.filter_by(user_id=user_id)
                .order_by(OrderRow.created_at.desc())
                .all()
            )
            return [Order.model_validate(r) for r in rows]

    # --- profiles ---
    def get_profile(self, user_id) -> Optional[Profile]:
        with self._reading("profiles"):
            row = ProfileRow.query.filter_by(user_id=user_id).first()
            return Profile.model_validate(row) if row else None

    def upsert_profile(self, user_id, values) -> Profile:
        with self._writing("profiles", "Failed to update profile"):
            row = ProfileRow.query.filter_by(user_id=user_id).first()
            if row is None:
                row = ProfileRow(user_id=user_id)
                db.session.add(row)
            for key, value in values.items():
                setattr(row, key, value)
        return Profile.model_validate(row)
