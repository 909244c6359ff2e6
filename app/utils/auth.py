from functools import wraps
from flask import request, g
from .responses import error
from .jwt import decode_token, TokenError
from app.auth.session import Session


def bearer_token():
    auth = request.headers.get("Authorization", "")
    if not auth:
        return None
    return auth.split(" ", 1)[1] if auth.startswith("Bearer ") else auth


def load_session():
    """Resolve ``g.session`` from the bearer token.

    Requests without a token are guests (``g.session`` is None); a token that
    fails verification is rejected outright.
    """
    g.session = None
    token = bearer_token()
    if not token:
        return None
    try:
        payload = decode_token(token, expected_type="access")
    except TokenError as e:
        return error(str(e), status=401)
    g.session = Session(
        user_id=payload["sub"],
        email=payload.get("email"),
        access_token=token,
    )
    return None


def auth_required(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        from app.errors import AuthRequired

        if getattr(g, "session", None) is None:
            raise AuthRequired()
        return func(*args, **kwargs)

    return wrapper
