from flask import Blueprint, request
from app.version import API_PREFIX
from app.utils import ok
from app.utils.auth import load_session
from app.services import current_store
from app.services.catalog import ProductCatalog

shop_bp = Blueprint("shop", __name__, url_prefix=API_PREFIX)
shop_bp.before_request(load_session)


# --- Product listing ---
@shop_bp.route("/products", methods=["GET"])
def list_products():
    """List active products
    ---
    tags:
      - Shop
    parameters:
      - name: category
        in: query
        type: string
        required: false
    responses:
      200:
        description: Active products, newest first
    """
    category = request.args.get("category") or None
    products = ProductCatalog(current_store()).list_products(category=category)
    return ok([p.model_dump(mode="json") for p in products])


# --- Product details ---
@shop_bp.route("/products/<product_id>", methods=["GET"])
def get_product(product_id):
    product = ProductCatalog(current_store()).get_product(product_id)
    return ok(product.model_dump(mode="json"))
