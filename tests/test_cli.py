import json
from decimal import Decimal

from models.product import Product


def test_init_db(app):
    result = app.test_cli_runner().invoke(args=["init-db"])
    assert result.exit_code == 0
    assert "created" in result.output


def test_seed_products(app, tmp_path):
    path = tmp_path / "products.json"
    path.write_text(json.dumps([
        {"name": "Print", "price": 12.5, "category": "art", "stock_quantity": 3},
        {"name": "Sticker", "price": "2.00"},
    ]))
    result = app.test_cli_runner().invoke(args=["seed-products", str(path)])
    assert result.exit_code == 0, result.output
    assert "Seeded 2 products." in result.output
    prices = {p.name: p.price for p in Product.query.all()}
    assert prices == {"Print": Decimal("12.50"), "Sticker": Decimal("2.00")}


def test_seed_rejects_incomplete_entries(app, tmp_path):
    path = tmp_path / "products.json"
    path.write_text(json.dumps([{"name": "No price"}]))
    result = app.test_cli_runner().invoke(args=["seed-products", str(path)])
    assert result.exit_code != 0
    assert Product.query.count() == 0


def test_writes_refused_in_production(app, monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.delenv("ALLOW_DB_WRITES", raising=False)
    result = app.test_cli_runner().invoke(args=["init-db"])
    assert result.exit_code != 0
    assert "ALLOW_DB_WRITES" in result.output
