"""Order construction and product helpers."""

from .order_builder import OrderBuilder
from .product import Product, ensure_product, get_product_id

__all__ = ["OrderBuilder", "Product", "ensure_product", "get_product_id"]
