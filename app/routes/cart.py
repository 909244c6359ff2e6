from flask import Blueprint, request, g
from app.version import API_PREFIX
from app.utils import ok
from app.utils.auth import auth_required, load_session
from app.utils.validation import validate_schema
from app.schemas.cart import AddToCartRequest, UpdateCartRequest, RemoveFromCartRequest
from app.services import current_store, current_sink
from app.services.cart import CartManager

cart_bp = Blueprint("cart", __name__, url_prefix=f"{API_PREFIX}/cart")
cart_bp.before_request(load_session)


def _manager():
    return CartManager(current_store(), current_sink())


def _snapshot(manager, message="success"):
    return ok(manager.snapshot().model_dump(mode="json"), message=message)


@cart_bp.route("/view", methods=["GET"])
def view_cart():
    """Current cart with live prices; empty for guests.
    ---
    tags:
      - Cart
    responses:
      200:
        description: Cart lines, item count and total price
    """
    manager = _manager()
    manager.load(g.session)
    return _snapshot(manager)


@cart_bp.route("/add", methods=["POST"])
@auth_required
@validate_schema(AddToCartRequest)
def add_to_cart():
    data: AddToCartRequest = request.validated_data
    manager = _manager()
    manager.add_item(g.session, data.product_id, data.quantity)
    return _snapshot(manager, "Item added to cart")


@cart_bp.route("/update", methods=["POST"])
@auth_required
@validate_schema(UpdateCartRequest)
def update_cart_quantity():
    data: UpdateCartRequest = request.validated_data
    manager = _manager()
    manager.update_quantity(g.session, data.item_id, data.quantity)
    return _snapshot(manager, "Cart quantity updated")


@cart_bp.route("/remove", methods=["POST"])
@auth_required
@validate_schema(RemoveFromCartRequest)
def remove_from_cart():
    data: RemoveFromCartRequest = request.validated_data
    manager = _manager()
    manager.remove_item(g.session, data.item_id)
    return _snapshot(manager, "Item removed from cart")


@cart_bp.route("/clear", methods=["POST"])
@auth_required
def clear_cart():
    manager = _manager()
    manager.clear(g.session)
    return _snapshot(manager, "Cart cleared")
