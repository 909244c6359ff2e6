import os
import sys
from decimal import Decimal
import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from models import db
from models.product import Product
from app.auth.session import Session
from app.services.notifications import NotificationSink


class RecordingSink(NotificationSink):
    """Keeps emitted events; can be told to fail."""

    def __init__(self):
        self.events = []
        self.fail = False

    def emit(self, event):
        if self.fail:
            raise RuntimeError("webhook down")
        self.events.append(event)

    def types(self):
        return [e.type.value for e in self.events]


@pytest.fixture(scope='session')
def recording_sink():
    return RecordingSink()


@pytest.fixture(scope='session')
def app_instance(recording_sink):
    os.environ.setdefault('APP_ENV', 'testing')
    from app import create_app
    from app.config import TestingConfig
    return create_app(TestingConfig, sink=recording_sink)


@pytest.fixture(scope='function')
def app(app_instance, recording_sink):
    recording_sink.events.clear()
    recording_sink.fail = False
    with app_instance.app_context():
        app_instance.limiter.reset()
        db.drop_all()
        db.create_all()
        yield app_instance
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    return app.test_client()


@pytest.fixture()
def sink(app, recording_sink):
    return recording_sink


@pytest.fixture()
def store(app):
    return app.extensions["webshop"]["store"]


@pytest.fixture()
def session():
    return Session(user_id="user-1", email="ada@example.com")


@pytest.fixture()
def make_product(app):
    def _make(name="Mug", price="10.00", **kwargs):
        product = Product(name=name, price=Decimal(price), **kwargs)
        db.session.add(product)
        db.session.commit()
        return product.id
    return _make


@pytest.fixture()
def auth_headers(app):
    from app.utils import create_access_token

    def _headers(user_id="user-1", email="ada@example.com"):
        return {"Authorization": f"Bearer {create_access_token(user_id, email)}"}
    return _headers
