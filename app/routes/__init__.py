from .auth import auth_bp
from .shop import shop_bp
from .cart import cart_bp
from .orders import orders_bp
from .profile import profile_bp


__all__ = [
    'auth_bp',
    'shop_bp',
    'cart_bp',
    'orders_bp',
    'profile_bp',
]
