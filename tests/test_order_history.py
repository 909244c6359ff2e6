from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from models import db
from models.order import Order as OrderRow, OrderItem as OrderItemRow
from app.errors import FetchFailed
from app.services.orders import OrderHistory
from app.store import StoreError


def _order(user_id, created_at, product_id=None, total="10.00"):
    order = OrderRow(
        user_id=user_id,
        total_amount=Decimal(total),
        first_name="Ada",
        last_name="Lovelace",
        email="ada@example.com",
        phone="0612345678",
        address="Keizersgracht 1",
        city="Amsterdam",
        zip_code="1015",
        created_at=created_at,
    )
    db.session.add(order)
    db.session.flush()
    if product_id:
        db.session.add(OrderItemRow(order_id=order.id, product_id=product_id, quantity=2, price=Decimal("5.00")))
    db.session.commit()
    return order.id


def test_no_orders_is_empty_list(store, session):
    assert OrderHistory(store).list_orders(session) == []


def test_guest_has_no_orders(store):
    assert OrderHistory(store).list_orders(None) == []


def test_orders_newest_first_with_items(store, session, make_product):
    pid = make_product(name="Print", image_url="https://img.test/print.png")
    now = datetime.utcnow()
    old = _order(session.user_id, now - timedelta(days=2), pid)
    new = _order(session.user_id, now, pid)
    _order("someone-else", now + timedelta(hours=1))

    orders = OrderHistory(store).list_orders(session)

    assert [o.id for o in orders] == [new, old]
    line = orders[0].order_items[0]
    assert line.product.name == "Print"
    assert line.product.image_url == "https://img.test/print.png"
    assert line.subtotal == Decimal("10.00")


def test_fetch_failure_raises(store, session, monkeypatch):
    def boom(user_id):
        raise StoreError("down", table="orders")

    monkeypatch.setattr(store, "fetch_orders", boom)
    with pytest.raises(FetchFailed):
        OrderHistory(store).list_orders(session)
