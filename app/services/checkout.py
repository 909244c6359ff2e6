import logging
from decimal import Decimal

from app.auth.session import require_session
from app.errors import CartWriteFailed, EmptyCart, OrderCreationFailed, OrderItemsWriteFailed
from app.schemas.checkout import ShippingForm
from app.schemas.shop import Order, OrderLine, OrderProduct, OrderStatus
from app.services.notifications import EventType, NotificationEvent, notify
from app.store import StoreError
from app.utils.validation import parse_model

logger = logging.getLogger(__name__)


class CheckoutService:
    """Turns the current cart into an order.

    The order header and its lines are two separate writes with no
    transaction around them; if the second one fails the header is left
    without items and ``OrderItemsWriteFailed`` says which order it was.
    """

    def __init__(self, store, sink):
        self.store = store
        self.sink = sink

    def submit(self, session, shipping_form, cart) -> Order:
        session = require_session(session)
        if not isinstance(shipping_form, ShippingForm):
            shipping_form = parse_model(ShippingForm, shipping_form)
        lines = list(cart.items)
        if not lines:
            raise EmptyCart()

        store = self.store.for_session(session)
        # Computed once from the snapshot; the lines below freeze the same prices.
        total = sum((line.product.price * line.quantity for line in lines), Decimal("0"))

        try:
            order = store.insert_order({
                "user_id": session.user_id,
                "total_amount": total,
                "status": OrderStatus.PENDING.value,
                **shipping_form.model_dump(),
            })
        except StoreError as e:
            logger.error("Order insert failed for %s: %s", session.user_id, e)
            raise OrderCreationFailed() from e

        rows = [
            {
                "order_id": order.id,
                "product_id": line.product_id,
                "quantity": line.quantity,
                "price": line.product.price,
            }
            for line in lines
        ]
        try:
            stored = store.insert_order_items(rows)
        except StoreError as e:
            logger.error(
                "Order %s (%s) stored without items: %s", order.id, order.order_number, e
            )
            raise OrderItemsWriteFailed(order) from e

        products = {
            line.product_id: OrderProduct(name=line.product.name, image_url=line.product.image_url)
            for line in lines
        }
        order = order.model_copy(update={
            "order_items": [
                OrderLine(
                    id=item.id,
                    order_id=item.order_id,
                    product_id=item.product_id,
                    quantity=item.quantity,
                    price=item.price,
                    product=products.get(item.product_id),
                )
                for item in stored
            ],
        })

        try:
            cart.clear(session)
        except CartWriteFailed:
            logger.error("Order %s placed but cart of %s was not cleared", order.id, session.user_id)

        logger.info("Order %s placed by %s", order.order_number, session.user_id)
        notify(self.sink, NotificationEvent(
            type=EventType.NEW_ORDER,
            user=session.display_name,
            payload={
                "order_id": order.id,
                "order_number": order.order_number,
                "customer": order.customer_name,
                "email": order.email,
                "phone": order.phone,
                "address": order.address,
                "city": order.city,
                "zip_code": order.zip_code,
                "total": str(total),
                "items": [
                    {
                        "name": line.product.name,
                        "quantity": line.quantity,
                        "price": str(line.product.price),
                        "subtotal": str(line.line_total),
                    }
                    for line in lines
                ],
            },
        ))
        return order
