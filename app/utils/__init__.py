from .responses import ok, error
from .validation import parse_model, validate_schema
from .db import transactional
from .jwt import (
    create_access_token,
    create_refresh_token,
    decode_token,
    TokenError,
)

__all__ = [
    'ok',
    'error',
    'create_access_token',
    'create_refresh_token',
    'decode_token',
    'TokenError',
    'parse_model',
    'validate_schema',
    'transactional',
]
