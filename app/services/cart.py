import logging
from decimal import Decimal
from typing import List, Optional

from app.auth.session import Session, require_session
from app.errors import (
    CartItemNotFound,
    CartWriteFailed,
    FetchFailed,
    ProductUnavailable,
    ValidationFailed,
)
from app.schemas.shop import CartLine, CartSnapshot
from app.services.notifications import EventType, NotificationEvent, notify
from app.store import StoreError

logger = logging.getLogger(__name__)

CONFLICT = 409


class CartManager:
    """In-memory view of one user's cart, kept in sync with the data store.

    Every mutation is followed by a full reload, so the snapshot converges on
    whatever the store holds even when writes from another tab race ours.
    Prices are live: totals always use the product's current price.
    """

    def __init__(self, store, sink):
        self.store = store
        self.sink = sink
        self.items: List[CartLine] = []
        self.item_count = 0
        self.stale = False

    def _replace(self, items):
        self.items = list(items)
        self.item_count = sum(line.quantity for line in self.items)
        self.stale = False

    def load(self, session: Optional[Session]) -> List[CartLine]:
        """Fetch the cart; a guest simply has an empty one."""
        if session is None:
            self._replace([])
            return self.items
        try:
            items = self.store.for_session(session).fetch_cart(session.user_id)
        except StoreError as e:
            logger.error("Failed to load cart for %s: %s", session.user_id, e)
            self.stale = True
            raise FetchFailed("We couldn't load your cart. Please try again.") from e
        self._replace(items)
        return self.items

    def _resync(self, session):
        try:
            self.load(session)
        except FetchFailed:
            logger.warning("Cart for %s kept stale after a successful write", session.user_id)

    def total_price(self) -> Decimal:
        return sum((line.line_total for line in self.items), Decimal("0"))

    def snapshot(self) -> CartSnapshot:
        return CartSnapshot(
            items=self.items,
            item_count=self.item_count,
            total_price=self.total_price(),
            stale=self.stale,
        )

    @staticmethod
    def _merge(store, user_id, product_id, quantity):
        existing = store.find_cart_item(user_id, product_id)
        if existing:
            updated = store.update_cart_item(user_id, existing.id, existing.quantity + quantity)
            if updated is not None:
                return
        store.insert_cart_item(user_id, product_id, quantity)

    def add_item(self, session, product_id, quantity=1) -> List[CartLine]:
        """Add ``quantity`` of a product, merging with an existing row."""
        session = require_session(session)
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValidationFailed("quantity", "Quantity must be at least 1")

        store = self.store.for_session(session)
        try:
            product = store.get_product(product_id)
        except StoreError as e:
            logger.error("Product lookup for %s failed: %s", product_id, e)
            raise CartWriteFailed("We couldn't add this product to your cart.") from e
        if product is None:
            raise ProductUnavailable()

        user_id = session.user_id
        try:
            try:
                self._merge(store, user_id, product_id, quantity)
            except StoreError as e:
                if e.status != CONFLICT:
                    raise
                # Another add created the row between our lookup and insert.
                logger.info("Cart row for %s/%s appeared concurrently; merging", user_id, product_id)
                self._merge(store, user_id, product_id, quantity)
        except StoreError as e:
            logger.error("Failed to add %s to cart of %s: %s", product_id, user_id, e)
            raise CartWriteFailed("We couldn't add this product to your cart.") from e

        self._resync(session)
        notify(self.sink, NotificationEvent(
            type=EventType.ADD_TO_CART,
            user=session.display_name,
            payload={
                "user_id": user_id,
                "product_id": product.id,
                "product_name": product.name,
                "price": str(product.price),
                "quantity": quantity,
            },
        ))
        return self.items

    def update_quantity(self, session, item_id, new_quantity) -> List[CartLine]:
        session = require_session(session)
        if new_quantity <= 0:
            return self.remove_item(session, item_id)
        try:
            updated = self.store.for_session(session).update_cart_item(
                session.user_id, item_id, new_quantity
            )
        except StoreError as e:
            logger.error("Failed to update cart item %s: %s", item_id, e)
            raise CartWriteFailed("We couldn't update the quantity.") from e
        if updated is None:
            raise CartItemNotFound()
        self._resync(session)
        return self.items

    def remove_item(self, session, item_id) -> List[CartLine]:
        session = require_session(session)
        try:
            deleted = self.store.for_session(session).delete_cart_item(session.user_id, item_id)
        except StoreError as e:
            logger.error("Failed to remove cart item %s: %s", item_id, e)
            raise CartWriteFailed("We couldn't remove this product.") from e
        if not deleted:
            raise CartItemNotFound()
        self._resync(session)
        return self.items

    def clear(self, session) -> None:
        """Empty the cart without reloading it."""
        if session is None:
            self._replace([])
            return
        try:
            self.store.for_session(session).delete_cart(session.user_id)
        except StoreError as e:
            logger.error("Failed to clear cart of %s: %s", session.user_id, e)
            raise CartWriteFailed("We couldn't empty your cart.") from e
        self._replace([])
