import logging

from app.errors import FetchFailed, ProductUnavailable
from app.store import StoreError

logger = logging.getLogger(__name__)


class ProductCatalog:
    def __init__(self, store):
        self.store = store

    def list_products(self, category=None):
        try:
            return self.store.list_products(category=category)
        except StoreError as e:
            logger.error("Failed to list products: %s", e)
            raise FetchFailed("We couldn't load the products. Please try again.") from e

    def get_product(self, product_id):
        try:
            product = self.store.get_product(product_id)
        except StoreError as e:
            logger.error("Failed to fetch product %s: %s", product_id, e)
            raise FetchFailed("We couldn't load this product. Please try again.") from e
        if product is None:
            raise ProductUnavailable()
        return product
