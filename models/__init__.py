import uuid
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


def new_uuid() -> str:
    return str(uuid.uuid4())


# Re-export common models for convenience
from .product import Product  # noqa: E402,F401
from .cart import CartItem  # noqa: E402,F401
from .order import Order, OrderItem  # noqa: E402,F401
from .user import User, Profile  # noqa: E402,F401
