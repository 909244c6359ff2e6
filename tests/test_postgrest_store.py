from decimal import Decimal

import pytest
import requests

from app.auth.session import Session
from app.errors import FetchFailed, OrderCreationFailed
from app.services.cart import CartManager
from app.services.checkout import CheckoutService
from app.services.notifications import LogSink
from app.store import PostgrestStore, StoreError


class FakeResponse:
    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        self._body = body if body is not None else []
        self.content = b"[]" if body is not None else b""
        self.text = str(body)

    def json(self):
        return self._body


class FakeHttp:
    def __init__(self, *responses):
        self.headers = {}
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        result = self.responses.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


def _store(*responses):
    http = FakeHttp(*responses)
    return PostgrestStore("https://shop.test/", "anon-key", timeout=3, http=http), http


CART_ROW = {
    "id": "c1",
    "product_id": "p1",
    "quantity": 2,
    "product": {"id": "p1", "name": "Print", "price": 12.5, "image_url": None},
}


def test_auth_headers_are_sent():
    store, http = _store()
    assert http.headers["apikey"] == "anon-key"
    assert http.headers["Authorization"] == "Bearer anon-key"


def test_fetch_cart_filters_by_user_and_joins_product():
    store, http = _store(FakeResponse(body=[CART_ROW]))
    lines = store.fetch_cart("u1")

    call = http.calls[0]
    assert call["method"] == "GET"
    assert call["url"] == "https://shop.test/rest/v1/cart_items"
    assert call["params"]["user_id"] == "eq.u1"
    assert "product:products(" in call["params"]["select"]
    assert call["timeout"] == 3
    assert lines[0].line_total == Decimal("25.0")


def test_list_products_filters_active_and_category():
    store, http = _store(FakeResponse(body=[]))
    store.list_products(category="prints")
    params = http.calls[0]["params"]
    assert params["is_active"] == "eq.true"
    assert params["category"] == "eq.prints"
    assert params["order"] == "created_at.desc"


def test_update_scoped_by_user_returns_none_when_no_row():
    store, http = _store(FakeResponse(body=[]))
    assert store.update_cart_item("u1", "c9", 3) is None
    call = http.calls[0]
    assert call["method"] == "PATCH"
    assert call["params"] == {"id": "eq.c9", "user_id": "eq.u1"}
    assert call["json"] == {"quantity": 3}
    assert call["headers"]["Prefer"] == "return=representation"


def test_insert_order_serializes_decimals():
    created = {
        "id": "o1", "order_number": "ORD-20261017-ABC123", "user_id": "u1",
        "total_amount": 42.5, "status": "pending", "first_name": "Ada",
        "last_name": "Lovelace", "email": "ada@example.com", "phone": "0612345678",
        "address": "Keizersgracht 1", "city": "Amsterdam", "zip_code": "1015",
        "created_at": "2026-10-17T10:00:00+00:00",
    }
    store, http = _store(FakeResponse(status_code=201, body=[created]))
    order = store.insert_order({"user_id": "u1", "total_amount": Decimal("42.50")})
    assert http.calls[0]["json"]["total_amount"] == "42.50"
    assert order.order_number == "ORD-20261017-ABC123"
    assert order.order_items == []


def test_error_status_becomes_store_error():
    store, _ = _store(FakeResponse(status_code=409, body={"message": "duplicate key"}))
    with pytest.raises(StoreError) as exc:
        store.insert_cart_item("u1", "p1", 1)
    assert exc.value.status == 409
    assert exc.value.table == "cart_items"
    assert "duplicate key" in str(exc.value)


def test_connection_error_becomes_store_error():
    store, _ = _store(requests.ConnectionError("refused"))
    with pytest.raises(StoreError):
        store.fetch_orders("u1")


def test_default_session_retries_reads_only():
    store = PostgrestStore("https://shop.test", "key", read_retries=1)
    retry = store.http.get_adapter("https://shop.test").max_retries
    assert retry.total == 1
    assert retry.allowed_methods == frozenset({"GET"})


class NotJson(FakeResponse):
    def __init__(self):
        super().__init__(200, [])
        self.content = b"<html>gateway</html>"
        self.text = "<html>gateway</html>"

    def json(self):
        raise ValueError("Expecting value")


SHIPPING = {
    "firstName": "Ada",
    "lastName": "Lovelace",
    "email": "ada@example.com",
    "phone": "0612345678",
    "address": "Keizersgracht 1",
    "city": "Amsterdam",
    "zipCode": "1015",
}


def test_session_token_is_the_bearer_for_owned_rows():
    store, http = _store(FakeResponse(body=[CART_ROW]))
    cart = CartManager(store, LogSink())
    cart.load(Session("u1", access_token="user.jwt"))

    assert http.calls[0]["headers"]["Authorization"] == "Bearer user.jwt"
    assert http.headers["apikey"] == "anon-key"
    assert store.user_token is None


def test_requests_without_user_token_use_project_key():
    store, http = _store(FakeResponse(body=[]))
    store.for_session(Session("u1")).list_products()
    assert "Authorization" not in http.calls[0]["headers"]


def test_cart_rows_without_product_are_skipped():
    hidden = {"id": "c2", "product_id": "p2", "quantity": 1, "product": None}
    store, _ = _store(FakeResponse(body=[CART_ROW, hidden]))
    lines = store.fetch_cart("u1")
    assert [line.id for line in lines] == ["c1"]


def test_malformed_cart_rows_fail_the_load():
    bad = dict(CART_ROW, quantity=0)
    store, _ = _store(FakeResponse(body=[bad]))
    cart = CartManager(store, LogSink())
    with pytest.raises(FetchFailed):
        cart.load(Session("u1"))
    assert cart.stale is True


def test_non_json_body_becomes_store_error():
    store, _ = _store(NotJson())
    with pytest.raises(StoreError) as exc:
        store.fetch_orders("u1")
    assert exc.value.table == "orders"


def test_object_body_becomes_store_error():
    store, _ = _store(FakeResponse(body={"unexpected": True}))
    with pytest.raises(StoreError):
        store.list_products()


def test_insert_without_representation_fails_checkout():
    store, http = _store(FakeResponse(body=[CART_ROW]), FakeResponse(status_code=201, body=[]))
    session = Session("u1", access_token="user.jwt")
    cart = CartManager(store, LogSink())
    cart.load(session)

    with pytest.raises(OrderCreationFailed):
        CheckoutService(store, LogSink()).submit(session, SHIPPING, cart)
    assert [c["method"] for c in http.calls] == ["GET", "POST"]
