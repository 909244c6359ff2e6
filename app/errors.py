import logging
from flask import Blueprint
from werkzeug.exceptions import HTTPException
from app.utils.responses import error

errors_bp = Blueprint("errors_bp", __name__)


class ShopError(Exception):
    """Base for every failure the shop reports to its callers.

    ``message`` is short and safe to show to an end user; ``status`` is the
    HTTP status the API answers with.
    """

    status = 400
    message = "Something went wrong. Please try again."

    def __init__(self, message=None):
        if message:
            self.message = message
        super().__init__(self.message)


class AuthRequired(ShopError):
    status = 401
    message = "Please sign in to continue."


class AuthFailed(ShopError):
    status = 401
    message = "Invalid login credentials"


class AuthUnavailable(ShopError):
    status = 502
    message = "Authentication service is unavailable. Please try again later."


class ValidationFailed(ShopError):
    status = 400

    def __init__(self, field, message=None):
        self.field = field
        super().__init__(message or f"Invalid value for {field}")


class EmptyCart(ShopError):
    message = "Your cart is empty."


class ProductUnavailable(ShopError):
    status = 404
    message = "Product is not available."


class CartItemNotFound(ShopError):
    status = 404
    message = "Item not found in cart"


class CartWriteFailed(ShopError):
    status = 502
    message = "We couldn't update your cart. Please try again."


class OrderCreationFailed(ShopError):
    status = 502
    message = "Something went wrong while processing your order."


class OrderItemsWriteFailed(OrderCreationFailed):
    """The order header was stored but its line items were not."""

    def __init__(self, order, message=None):
        self.order = order
        super().__init__(message)


class FetchFailed(ShopError):
    status = 502
    message = "We couldn't load this data. Please try again."


class ProfileWriteFailed(ShopError):
    status = 502
    message = "It's not possible to update your profile right now."


class NotificationFailed(ShopError):
    status = 502
    message = "Notification could not be delivered."


@errors_bp.app_errorhandler(ShopError)
def handle_shop_error(e):
    payload = {"field": e.field} if isinstance(e, ValidationFailed) else None
    return error(e.message, status=e.status, data=payload)


@errors_bp.app_errorhandler(HTTPException)
def handle_http_exception(e):
    msg = e.description or getattr(e, "name", "HTTP Error")
    return error(msg, status=e.code, code=e.code)


@errors_bp.app_errorhandler(Exception)
def handle_unexpected_exception(e):
    logging.exception("Unhandled exception")
    return error(
        "An unexpected error occurred. Please try again later.",
        status=500,
        code=500,
    )
