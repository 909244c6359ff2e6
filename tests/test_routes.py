from app.version import API_PREFIX
from models.cart import CartItem
from models.order import Order


SHIPPING = {
    "firstName": "Ada",
    "lastName": "Lovelace",
    "email": "ada@example.com",
    "phone": "0612345678",
    "address": "Keizersgracht 1",
    "city": "Amsterdam",
    "zipCode": "1015",
}


def test_products_listing_and_details(client, make_product):
    mug = make_product(name="Mug", price="12.00", category="home")
    make_product(name="Shirt", price="25.00", category="apparel")
    make_product(name="Hidden", is_active=False)

    r = client.get(f"{API_PREFIX}/products")
    assert r.status_code == 200
    names = {p["name"] for p in r.get_json()["data"]}
    assert names == {"Mug", "Shirt"}

    r = client.get(f"{API_PREFIX}/products?category=home")
    assert [p["name"] for p in r.get_json()["data"]] == ["Mug"]

    r = client.get(f"{API_PREFIX}/products/{mug}")
    assert r.get_json()["data"]["price"] == 12.0

    r = client.get(f"{API_PREFIX}/products/unknown")
    assert r.status_code == 404
    assert r.get_json()["status"] == "error"


def test_guest_cart_view_is_empty(client):
    r = client.get(f"{API_PREFIX}/cart/view")
    assert r.status_code == 200
    data = r.get_json()["data"]
    assert data["items"] == []
    assert data["total_price"] == 0


def test_cart_mutations_require_auth(client, make_product):
    r = client.post(f"{API_PREFIX}/cart/add", json={"product_id": make_product()})
    assert r.status_code == 401
    assert r.get_json()["message"] == "Please sign in to continue."


def test_invalid_token_is_rejected(client):
    r = client.get(f"{API_PREFIX}/cart/view", headers={"Authorization": "Bearer nope"})
    assert r.status_code == 401


def test_cart_flow(client, auth_headers, make_product):
    headers = auth_headers()
    pid = make_product(price="10.00")

    r = client.post(f"{API_PREFIX}/cart/add", json={"product_id": pid, "quantity": 2}, headers=headers)
    assert r.status_code == 200
    data = r.get_json()["data"]
    assert data["item_count"] == 2
    assert data["total_price"] == 20.0
    item_id = data["items"][0]["id"]

    r = client.post(f"{API_PREFIX}/cart/update", json={"item_id": item_id, "quantity": 5}, headers=headers)
    assert r.get_json()["data"]["item_count"] == 5

    r = client.post(f"{API_PREFIX}/cart/remove", json={"item_id": item_id}, headers=headers)
    assert r.get_json()["data"]["items"] == []

    r = client.post(f"{API_PREFIX}/cart/remove", json={"item_id": item_id}, headers=headers)
    assert r.status_code == 404


def test_checkout_and_history(client, auth_headers, make_product, sink):
    headers = auth_headers()
    client.post(f"{API_PREFIX}/cart/add", json={"product_id": make_product(price="42.50")}, headers=headers)

    r = client.post(f"{API_PREFIX}/order/checkout", json=SHIPPING, headers=headers)
    assert r.status_code == 201
    order = r.get_json()["data"]
    assert order["total_amount"] == 42.5
    assert order["status"] == "pending"
    assert order["first_name"] == "Ada"
    assert CartItem.query.count() == 0
    assert "new-order" in sink.types()

    r = client.get(f"{API_PREFIX}/order/history", headers=headers)
    history = r.get_json()["data"]
    assert [o["order_number"] for o in history] == [order["order_number"]]
    assert history[0]["order_items"][0]["price"] == 42.5


def test_checkout_with_empty_cart(client, auth_headers):
    r = client.post(f"{API_PREFIX}/order/checkout", json=SHIPPING, headers=auth_headers())
    assert r.status_code == 400
    assert r.get_json()["message"] == "Your cart is empty."
    assert Order.query.count() == 0


def test_checkout_validation_names_field(client, auth_headers, make_product):
    headers = auth_headers()
    client.post(f"{API_PREFIX}/cart/add", json={"product_id": make_product()}, headers=headers)
    r = client.post(f"{API_PREFIX}/order/checkout", json=dict(SHIPPING, zipCode="123"), headers=headers)
    assert r.status_code == 400
    body = r.get_json()
    assert body["data"] == {"field": "zipCode"}
    assert body["message"] == "Zip code must be at least 4 characters"
    assert Order.query.count() == 0


def test_checkout_requires_auth(client):
    r = client.post(f"{API_PREFIX}/order/checkout", json=SHIPPING)
    assert r.status_code == 401


def test_order_history_empty(client, auth_headers):
    r = client.get(f"{API_PREFIX}/order/history", headers=auth_headers("fresh-user"))
    assert r.status_code == 200
    assert r.get_json()["data"] == []


def test_checkout_rate_limit(client, app, auth_headers):
    app.config["ORDER_LIMIT_PER_IP"] = "2 per hour"
    try:
        for _ in range(3):
            r = client.post(f"{API_PREFIX}/order/checkout", json=SHIPPING, headers=auth_headers())
        assert r.status_code == 429
        assert r.get_json()["message"] == "Too many orders from this IP"
    finally:
        app.config["ORDER_LIMIT_PER_IP"] = "20 per hour"
