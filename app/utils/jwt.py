import datetime as dt
from typing import Dict
import jwt
from flask import current_app


def _secret() -> str:
    return current_app.config["JWT_SECRET"]


def _audience() -> str:
    return current_app.config["JWT_AUDIENCE"]


def _utcnow():
    return dt.datetime.now(dt.timezone.utc)


def _exp(minutes: int = None, days: int = None):
    now = _utcnow()
    if minutes:
        return now + dt.timedelta(minutes=minutes)
    if days:
        return now + dt.timedelta(days=days)
    raise ValueError("must supply minutes or days")


def create_access_token(user_id: str, email: str = None) -> str:
    """Mint an access token carrying the same claims as the auth service's."""
    cfg = current_app.config
    payload: Dict = {
        "sub": user_id,
        "email": email,
        "aud": _audience(),
        "role": "authenticated",
        "type": "access",
        "exp": _exp(minutes=cfg["ACCESS_TOKEN_LIFETIME_MIN"]),
    }
    return jwt.encode(payload, _secret(), algorithm="HS256")


def create_refresh_token(user_id: str) -> str:
    cfg = current_app.config
    payload = {
        "sub": user_id,
        "aud": _audience(),
        "type": "refresh",
        "exp": _exp(days=cfg["REFRESH_TOKEN_LIFETIME_DAYS"]),
    }
    return jwt.encode(payload, _secret(), algorithm="HS256")


class TokenError(Exception):
    pass


def decode_token(token: str, expected_type: str = "access") -> Dict:
    try:
        data = jwt.decode(token, _secret(), algorithms=["HS256"], audience=_audience())
    except jwt.ExpiredSignatureError:
        raise TokenError("token expired")
    except jwt.InvalidTokenError:
        raise TokenError("invalid token")

    # Tokens issued by the remote auth service carry no "type" claim.
    if data.get("type", "access") != expected_type:
        raise TokenError(f"expected {expected_type} token")
    if not data.get("sub"):
        raise TokenError("invalid token")
    return data
