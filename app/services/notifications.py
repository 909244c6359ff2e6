"""
Best-effort outbound notifications for user and shop actions.

Services build a ``NotificationEvent`` and hand it to ``notify``; the sink
decides how it travels. ``notify`` never raises: a notification that cannot
be sent is counted, logged and dropped.
"""
import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, Field
from pydantic_core import to_jsonable_python

from app.errors import NotificationFailed
from app.metrics import NOTIFICATION_FAILURES
from app.schemas.shop import present_money

logger = logging.getLogger(__name__)

CURRENCY = "€"
FIELD_LIMIT = 1024  # webhook embed field values are capped


class EventType(str, Enum):
    SIGN_UP = "sign-up"
    LOGIN = "login"
    LOGOUT = "logout"
    PROFILE_EDIT = "profile-edit"
    ADD_TO_CART = "add-to-cart"
    NEW_ORDER = "new-order"


TITLES = {
    EventType.SIGN_UP: "👤 New user signed up",
    EventType.LOGIN: "🔑 User logged in",
    EventType.LOGOUT: "🚪 User logged out",
    EventType.PROFILE_EDIT: "✏️ User updated their profile",
    EventType.ADD_TO_CART: "🛒 Product added to cart",
    EventType.NEW_ORDER: "📦 New order received",
}


class NotificationEvent(BaseModel):
    type: EventType
    user: str
    payload: Dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


def format_money(value) -> str:
    return f"{CURRENCY}{present_money(Decimal(str(value))):.2f}"


def _field(name, value, inline=True):
    return {"name": name, "value": str(value)[:FIELD_LIMIT] or "-", "inline": inline}


def format_webhook_body(event: NotificationEvent) -> dict:
    """Render an event as a Discord-compatible webhook body."""
    payload = event.payload
    fields = []
    description = f"**User:** {event.user}"

    if event.type is EventType.ADD_TO_CART:
        fields = [
            _field("Product", payload.get("product_name")),
            _field("Price", format_money(payload.get("price", 0))),
            _field("Quantity", payload.get("quantity", 1)),
        ]
    elif event.type is EventType.NEW_ORDER:
        description = "\n".join([
            f"**Customer:** {payload.get('customer')}",
            f"**Email:** {payload.get('email')}",
            f"**Phone:** {payload.get('phone')}",
            f"**Address:** {payload.get('address')}, {payload.get('city')} ({payload.get('zip_code')})",
        ])
        items = payload.get("items", [])
        details = "\n".join(
            f"• **{i['name']}** x{i['quantity']} - {format_money(i['subtotal'])}"
            for i in items
        )
        fields = [
            _field("Order", payload.get("order_number")),
            _field("Items", len(items)),
            _field("Total", format_money(payload.get("total", 0))),
            _field("Order details", details, inline=False),
        ]
    elif event.type is EventType.SIGN_UP:
        fields = [_field("Username", payload.get("username"))]
    elif event.type is EventType.PROFILE_EDIT:
        changes = json.dumps(payload.get("changes", {}), indent=2, ensure_ascii=False)
        fields = [_field("Changed data", changes, inline=False)]

    embed = {
        "title": TITLES[event.type],
        "description": description,
        "fields": fields,
        "timestamp": event.timestamp.isoformat(),
        "footer": {"text": "Webshop notifications"},
    }
    return {"content": f"{TITLES[event.type]}: {event.user}", "embeds": [embed]}


class NotificationSink(ABC):
    @abstractmethod
    def emit(self, event: NotificationEvent) -> None:
        ...


class LogSink(NotificationSink):
    """Used when no webhook is configured."""

    def emit(self, event):
        logger.info("Notification %s for %s (no webhook configured)", event.type.value, event.user)


class WebhookSink(NotificationSink):
    """Queues delivery to the webhook on the Celery worker."""

    def __init__(self, url, timeout=5.0):
        self.url = url
        self.timeout = timeout

    def emit(self, event):
        from app.tasks.notifications import deliver_notification_task

        body = to_jsonable_python(format_webhook_body(event))
        try:
            deliver_notification_task.delay(self.url, body, self.timeout)
        except Exception as e:
            raise NotificationFailed(f"Could not queue {event.type.value} notification: {e}") from e


def build_sink(config) -> NotificationSink:
    url = config.get("NOTIFICATION_WEBHOOK_URL")
    if not url:
        return LogSink()
    return WebhookSink(url, timeout=config.get("NOTIFICATION_TIMEOUT_SECONDS", 5.0))


def notify(sink: NotificationSink, event: NotificationEvent) -> bool:
    """Hand ``event`` to ``sink``; failures are logged, never raised."""
    try:
        sink.emit(event)
    except Exception as e:
        NOTIFICATION_FAILURES.labels(event.type.value).inc()
        logger.warning("Notification %s failed: %s", event.type.value, e)
        return False
    return True
