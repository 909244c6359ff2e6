import copy
import logging
from typing import List, Optional

import requests
from pydantic import ValidationError
from pydantic_core import to_jsonable_python
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from app.metrics import STORE_REQUEST_DURATION
from app.schemas.profile import Profile
from app.schemas.shop import CartLine, CartRow, Order, OrderLine, Product
from .base import DataStore, StoreError

logger = logging.getLogger(__name__)

CART_SELECT = "id,product_id,quantity,product:products(id,name,price,image_url)"
ORDER_SELECT = (
    "*,order_items(id,order_id,product_id,quantity,price,"
    "product:products(name,image_url))"
)
RETURN_ROWS = "return=representation"


def _eq(value) -> str:
    if isinstance(value, bool):
        value = "true" if value else "false"
    return f"eq.{value}"


def _error_detail(resp) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:200]
    if isinstance(body, dict):
        return body.get("message") or body.get("hint") or str(body)
    return str(body)


class PostgrestStore(DataStore):
    """Data store client for a PostgREST endpoint (``<url>/rest/v1/<table>``).

    Reads (GET) are retried once on connection errors and gateway failures;
    writes are never retried. Every request carries an explicit timeout.

    ``apikey`` is always the project key. The ``Authorization`` bearer is the
    signed-in user's access token once the store is bound with
    ``for_session``, so the store's row-level policies see that user.
    """

    def __init__(self, base_url, api_key, *, timeout=10.0, read_retries=1, http=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.user_token = None
        self.http = http or requests.Session()
        self.http.headers.update({
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
        })
        if http is None:
            retry = Retry(
                total=read_retries,
                connect=read_retries,
                read=read_retries,
                status=read_retries,
                allowed_methods=frozenset({"GET"}),
                status_forcelist=(502, 503, 504),
                backoff_factor=0.2,
                raise_on_status=False,
            )
            adapter = HTTPAdapter(max_retries=retry)
            self.http.mount("https://", adapter)
            self.http.mount("http://", adapter)

    def for_session(self, session) -> "PostgrestStore":
        token = getattr(session, "access_token", None)
        if not token or token == self.user_token:
            return self
        bound = copy.copy(self)
        bound.user_token = token
        return bound

    def _request(self, method, table, *, params=None, json=None, prefer=None):
        url = f"{self.base_url}/rest/v1/{table}"
        headers = {"Prefer": prefer} if prefer else {}
        if self.user_token:
            headers["Authorization"] = f"Bearer {self.user_token}"
        with STORE_REQUEST_DURATION.labels(table, method).time():
            try:
                resp = self.http.request(
                    method,
                    url,
                    params=params,
                    json=to_jsonable_python(json) if json is not None else None,
                    headers=headers,
                    timeout=self.timeout,
                )
            except requests.RequestException as e:
                logger.error("Store request %s %s failed: %s", method, table, e)
                raise StoreError(f"{method} {table} failed: {e}", table=table) from e
        if resp.status_code >= 400:
            detail = _error_detail(resp)
            logger.error("Store request %s %s returned %s: %s", method, table, resp.status_code, detail)
            raise StoreError(
                f"{method} {table} returned {resp.status_code}: {detail}",
                table=table,
                status=resp.status_code,
            )
        if not resp.content:
            return []
        try:
            rows = resp.json()
        except ValueError as e:
            logger.error("Store request %s %s returned a non-JSON body", method, table)
            raise StoreError(f"{method} {table} returned a non-JSON body", table=table) from e
        if not isinstance(rows, list):
            logger.error("Store request %s %s returned %s instead of rows", method, table, type(rows).__name__)
            raise StoreError(f"{method} {table} did not return rows", table=table)
        return rows

    @staticmethod
    def _parse(table, model, rows) -> list:
        try:
            return [model.model_validate(r) for r in rows]
        except ValidationError as e:
            logger.error("Unexpected %s rows: %s", table, e)
            raise StoreError(f"Unexpected {table} rows: {e}", table=table) from e

    def _first(self, table, model, rows, *, required=False):
        if not rows:
            if required:
                raise StoreError(f"{table} write returned no rows", table=table)
            return None
        return self._parse(table, model, rows[:1])[0]

    def _select(self, table, *, columns="*", order=None, limit=None, **filters):
        params = {"select": columns}
        params.update({key: _eq(value) for key, value in filters.items()})
        if order:
            params["order"] = order
        if limit:
            params["limit"] = str(limit)
        return self._request("GET", table, params=params)

    # --- products ---
    def list_products(self, *, category=None) -> List[Product]:
        filters = {"is_active": True}
        if category:
            filters["category"] = category
        rows = self._select("products", order="created_at.desc", **filters)
        return self._parse("products", Product, rows)

    def get_product(self, product_id) -> Optional[Product]:
        rows = self._select("products", limit=1, id=product_id, is_active=True)
        return self._first("products", Product, rows)

    # --- cart ---
    def fetch_cart(self, user_id) -> List[CartLine]:
        rows = self._select("cart_items", columns=CART_SELECT, user_id=user_id)
        # Rows of products the store no longer shows us come back without the join.
        visible = [r for r in rows if not (isinstance(r, dict) and r.get("product") is None)]
        if len(visible) < len(rows):
            logger.warning(
                "Skipping %d cart rows of %s with unavailable products",
                len(rows) - len(visible),
                user_id,
            )
        return self._parse("cart_items", CartLine, visible)

    def find_cart_item(self, user_id, product_id) -> Optional[CartRow]:
        rows = self._select(
            "cart_items",
            columns="id,user_id,product_id,quantity",
            limit=1,
            user_id=user_id,
            product_id=product_id,
        )
        return self._first("cart_items", CartRow, rows)

    def insert_cart_item(self, user_id, product_id, quantity) -> CartRow:
        rows = self._request(
            "POST",
            "cart_items",
            json={"user_id": user_id, "product_id": product_id, "quantity": quantity},
            prefer=RETURN_ROWS,
        )
        return self._first("cart_items", CartRow, rows, required=True)

    def update_cart_item(self, user_id, item_id, quantity) -> Optional[CartRow]:
        rows = self._request(
            "PATCH",
            "cart_items",
            params={"id": _eq(item_id), "user_id": _eq(user_id)},
            json={"quantity": quantity},
            prefer=RETURN_ROWS,
        )
        return self._first("cart_items", CartRow, rows)

    def delete_cart_item(self, user_id, item_id) -> bool:
        rows = self._request(
            "DELETE",
            "cart_items",
            params={"id": _eq(item_id), "user_id": _eq(user_id)},
            prefer=RETURN_ROWS,
        )
        return bool(rows)

    def delete_cart(self, user_id) -> None:
        self._request("DELETE", "cart_items", params={"user_id": _eq(user_id)})

    # --- orders ---
    def insert_order(self, values) -> Order:
        rows = self._request("POST", "orders", json=values, prefer=RETURN_ROWS)
        return self._first("orders", Order, rows, required=True)

    def insert_order_items(self, rows) -> List[OrderLine]:
        created = self._request("POST", "order_items", json=rows, prefer=RETURN_ROWS)
        if len(created) != len(rows):
            raise StoreError(
                f"order_items write returned {len(created)} of {len(rows)} rows",
                table="order_items",
            )
        return self._parse("order_items", OrderLine, created)

    def fetch_orders(self, user_id) -> List[Order]:
        rows = self._select(
            "orders", columns=ORDER_SELECT, order="created_at.desc", user_id=user_id
        )
        return self._parse("orders", Order, rows)

    # --- profiles ---
    def get_profile(self, user_id) -> Optional[Profile]:
        rows = self._select("profiles", limit=1, user_id=user_id)
        return self._first("profiles", Profile, rows)

    def upsert_profile(self, user_id, values) -> Profile:
        rows = self._request(
            "POST",
            "profiles",
            params={"on_conflict": "user_id"},
            json={"user_id": user_id, **values},
            prefer=f"resolution=merge-duplicates,{RETURN_ROWS}",
        )
        return self._first("profiles", Profile, rows, required=True)
