from flask import current_app

from app.services.auth import build_auth_gateway
from app.services.notifications import build_sink
from app.store import build_store

EXTENSION_KEY = "webshop"


def init_services(app, store=None, sink=None, auth=None):
    """Attach the data store, notification sink and auth gateway to ``app``.

    Each collaborator can be passed in explicitly; otherwise it is built from
    the app config.
    """
    store = store or build_store(app.config)
    sink = sink or build_sink(app.config)
    auth = auth or build_auth_gateway(app.config, store, sink)
    app.extensions[EXTENSION_KEY] = {"store": store, "sink": sink, "auth": auth}
    app.logger.info(
        "Services ready: store=%s sink=%s auth=%s",
        type(store).__name__, type(sink).__name__, type(auth).__name__,
    )


def _get(name):
    return current_app.extensions[EXTENSION_KEY][name]


def current_store():
    return _get("store")


def current_sink():
    return _get("sink")


def current_auth():
    return _get("auth")
