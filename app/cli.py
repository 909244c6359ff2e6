import json
import os
from decimal import Decimal

import click
from flask import current_app
from flask.cli import with_appcontext

from models import db
from models.product import Product
from app.utils import transactional


def _assert_safe_for_writes():
    # Prevent accidental prod writes unless explicitly allowed
    env = (current_app.config.get("ENV") or "").lower()
    app_env = (os.getenv("APP_ENV") or "").lower()
    if app_env == "production" or env == "production":
        if (os.getenv("ALLOW_DB_WRITES") or "").lower() not in ("1", "true", "yes"):
            raise click.ClickException("Refusing to write to the database in production without ALLOW_DB_WRITES=true")


@click.command("init-db")
@with_appcontext
def init_db():
    """Create the local tables."""
    _assert_safe_for_writes()
    db.create_all()
    click.echo("Database tables created.")


@click.command("seed-products")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@with_appcontext
def seed_products(path):
    """Load products from a JSON list into the local store."""
    _assert_safe_for_writes()
    with open(path, encoding="utf-8") as fh:
        entries = json.load(fh)
    if not isinstance(entries, list):
        raise click.ClickException("Expected a JSON list of products")

    created = 0
    with transactional("Failed to seed products"):
        for entry in entries:
            if not entry.get("name") or entry.get("price") is None:
                raise click.ClickException(f"Product needs a name and a price: {entry!r}")
            db.session.add(Product(
                name=entry["name"],
                description=entry.get("description"),
                price=Decimal(str(entry["price"])),
                image_url=entry.get("image_url"),
                category=entry.get("category"),
                stock_quantity=int(entry.get("stock_quantity", 0)),
                is_active=bool(entry.get("is_active", True)),
            ))
            created += 1
    click.echo(f"Seeded {created} products.")


def register_cli(app):
    app.cli.add_command(init_db)
    app.cli.add_command(seed_products)
