import pytest
import requests

from app.errors import NotificationFailed
from app.services import notifications
from app.services.notifications import (
    EventType,
    LogSink,
    NotificationEvent,
    WebhookSink,
    build_sink,
    format_webhook_body,
    notify,
)
from app.tasks import notifications as tasks


def _order_event():
    return NotificationEvent(
        type=EventType.NEW_ORDER,
        user="ada@example.com",
        payload={
            "order_number": "ORD-20261017-ABC123",
            "customer": "Ada Lovelace",
            "email": "ada@example.com",
            "phone": "0612345678",
            "address": "Keizersgracht 1",
            "city": "Amsterdam",
            "zip_code": "1015",
            "total": "42.50",
            "items": [
                {"name": "Print", "quantity": 1, "price": "12.50", "subtotal": "12.50"},
                {"name": "Sticker", "quantity": 4, "price": "7.50", "subtotal": "30.00"},
            ],
        },
    )


def test_order_body_lists_items_and_total():
    body = format_webhook_body(_order_event())
    embed = body["embeds"][0]
    fields = {f["name"]: f["value"] for f in embed["fields"]}
    assert fields["Order"] == "ORD-20261017-ABC123"
    assert fields["Total"] == "€42.50"
    assert fields["Items"] == "2"
    assert "**Sticker** x4 - €30.00" in fields["Order details"]
    assert "Ada Lovelace" in embed["description"]
    assert embed["timestamp"]


def test_add_to_cart_body():
    event = NotificationEvent(
        type=EventType.ADD_TO_CART,
        user="ada@example.com",
        payload={"product_name": "Mug", "price": "9.99", "quantity": 2},
    )
    fields = {f["name"]: f["value"] for f in format_webhook_body(event)["embeds"][0]["fields"]}
    assert fields == {"Product": "Mug", "Price": "€9.99", "Quantity": "2"}


def test_notify_swallows_sink_errors():
    class Broken(LogSink):
        def emit(self, event):
            raise NotificationFailed("down")

    assert notify(Broken(), _order_event()) is False
    assert notify(LogSink(), _order_event()) is True


def test_build_sink_picks_webhook_when_configured():
    assert isinstance(build_sink({}), LogSink)
    sink = build_sink({"NOTIFICATION_WEBHOOK_URL": "https://hooks.test/x", "NOTIFICATION_TIMEOUT_SECONDS": 2})
    assert isinstance(sink, WebhookSink)
    assert sink.timeout == 2


def test_webhook_sink_queues_delivery(monkeypatch):
    queued = []
    monkeypatch.setattr(tasks.deliver_notification_task, "delay", lambda *a: queued.append(a))
    WebhookSink("https://hooks.test/x", timeout=2).emit(_order_event())
    url, body, timeout = queued[0]
    assert url == "https://hooks.test/x"
    assert body["embeds"][0]["title"] == notifications.TITLES[EventType.NEW_ORDER]
    assert timeout == 2


def test_webhook_sink_wraps_queue_errors(monkeypatch):
    def broken(*args):
        raise ConnectionError("broker down")

    monkeypatch.setattr(tasks.deliver_notification_task, "delay", broken)
    with pytest.raises(NotificationFailed):
        WebhookSink("https://hooks.test/x").emit(_order_event())


def test_delivery_task_posts_body(monkeypatch):
    sent = {}

    class Resp:
        status_code = 204

        def raise_for_status(self):
            return None

    def fake_post(url, json=None, timeout=None):
        sent.update(url=url, json=json, timeout=timeout)
        return Resp()

    monkeypatch.setattr(tasks.requests, "post", fake_post)
    assert tasks.deliver_notification_task("https://hooks.test/x", {"content": "hi"}, 3) == 204
    assert sent == {"url": "https://hooks.test/x", "json": {"content": "hi"}, "timeout": 3}


def test_delivery_task_raises_on_http_error(monkeypatch):
    class Resp:
        status_code = 500

        def raise_for_status(self):
            raise requests.HTTPError("500")

    monkeypatch.setattr(tasks.requests, "post", lambda *a, **k: Resp())
    with pytest.raises(requests.HTTPError):
        tasks.deliver_notification_task.run("https://hooks.test/x", {"content": "hi"})
