from functools import wraps
from flask import request
from pydantic import ValidationError


def _field_label(schema, loc):
    """Public (aliased) name of the field a pydantic error points at."""
    if not loc:
        return "body"
    name = loc[0]
    field = schema.model_fields.get(name) if isinstance(name, str) else None
    if field is not None and field.alias:
        return field.alias
    return str(name)


def parse_model(schema, data):
    """Validate ``data`` against a pydantic schema.

    Raises ``ValidationFailed`` naming the first offending field; the message
    is the one declared on the schema (see ``messages``) when there is one.
    """
    from app.errors import ValidationFailed

    try:
        return schema.model_validate(data or {})
    except ValidationError as ve:
        first = ve.errors()[0]
        label = _field_label(schema, first.get("loc"))
        messages = getattr(schema, "messages", {}) or {}
        raise ValidationFailed(label, messages.get(label) or first.get("msg")) from ve


def validate_schema(schema):
    """Decorator to validate request JSON against a Pydantic schema."""

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            request.validated_data = parse_model(schema, request.get_json(silent=True))
            return fn(*args, **kwargs)
        return wrapper

    return decorator
