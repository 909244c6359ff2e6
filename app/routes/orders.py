from flask import Blueprint, current_app, request, g
from flask_limiter.util import get_remote_address
from extensions import limiter
from app.version import API_PREFIX
from app.utils import ok
from app.utils.auth import auth_required, load_session
from app.utils.validation import validate_schema
from app.schemas.checkout import ShippingForm
from app.services import current_store, current_sink
from app.services.cart import CartManager
from app.services.checkout import CheckoutService
from app.services.orders import OrderHistory

orders_bp = Blueprint("orders", __name__, url_prefix=f"{API_PREFIX}/order")
orders_bp.before_request(load_session)


@orders_bp.route("/checkout", methods=["POST"])
@limiter.limit(
    lambda: current_app.config["ORDER_LIMIT_PER_IP"],
    key_func=get_remote_address,
    error_message="Too many orders from this IP",
)
@auth_required
@validate_schema(ShippingForm)
def checkout():
    """Place an order from the current cart
    ---
    tags:
      - Orders
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [firstName, lastName, email, phone, address, city, zipCode]
          properties:
            firstName: {type: string, minLength: 2}
            lastName: {type: string, minLength: 2}
            email: {type: string, format: email}
            phone: {type: string, minLength: 9}
            address: {type: string, minLength: 5}
            city: {type: string, minLength: 2}
            zipCode: {type: string, minLength: 4}
    responses:
      201:
        description: The created order with its order number
      400:
        description: Invalid shipping form or empty cart
    """
    form: ShippingForm = request.validated_data
    store, sink = current_store(), current_sink()
    cart = CartManager(store, sink)
    cart.load(g.session)
    order = CheckoutService(store, sink).submit(g.session, form, cart)
    return ok(order.model_dump(mode="json"), message="Order placed successfully", status=201)


@orders_bp.route("/history", methods=["GET"])
@auth_required
def order_history():
    orders = OrderHistory(current_store()).list_orders(g.session)
    return ok([o.model_dump(mode="json") for o in orders])
