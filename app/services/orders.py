import logging
from typing import List, Optional

from app.auth.session import Session
from app.errors import FetchFailed
from app.schemas.shop import Order
from app.store import StoreError

logger = logging.getLogger(__name__)


class OrderHistory:
    def __init__(self, store):
        self.store = store

    def list_orders(self, session: Optional[Session]) -> List[Order]:
        """Past orders of the user, newest first, with their line items."""
        if session is None:
            return []
        try:
            return self.store.for_session(session).fetch_orders(session.user_id)
        except StoreError as e:
            logger.error("Failed to fetch orders for %s: %s", session.user_id, e)
            raise FetchFailed("We couldn't load your orders. Please try again.") from e
