"""
Product helpers: product ID normalization and cached product metadata.
"""

from typing import TYPE_CHECKING, Optional
import logging

from ..exceptions import ValidationError
from ..models import PRODUCT_ID_PATTERN, Product as ProductInfo

if TYPE_CHECKING:
    from ..client import CoinbaseHelperClient

logger = logging.getLogger(__name__)

DEFAULT_PRODUCT = "btc"


def get_product_id(product: str, currency: str = "USD") -> str:
    """
    Convert a product ('btc') to a product ID ('BTC-USD').

    Raises:
        ValidationError: If the product is empty or the result is not a USD pair
    """
    if not product:
        raise ValidationError("get_product_id => missing product argument")

    product_id = product.upper()
    if "-" not in product_id:
        product_id = f"{product_id}-{currency.upper()}"

    if not PRODUCT_ID_PATTERN.match(product_id):
        raise ValidationError(f"Invalid product ID: {product_id}", {"product_id": product_id})
    return product_id


def ensure_product(product: Optional[str]) -> str:
    """Product name, or the default when none is given."""
    if not product:
        logger.warning(f"Defaulting to {DEFAULT_PRODUCT}")
        return DEFAULT_PRODUCT
    return product


class Product:
    """
    One trading pair with lazily loaded metadata.

    Increments are only available after update().
    """

    def __init__(self, product_id: str, client: "CoinbaseHelperClient"):
        self.product_id = product_id
        self.client = client
        self.info: Optional[ProductInfo] = None

    @classmethod
    def load(cls, product: str, client: "CoinbaseHelperClient") -> "Product":
        """Resolve a product name and load its metadata (cache first)."""
        instance = cls(get_product_id(product), client)
        instance.update()
        return instance

    @property
    def base_increment(self) -> str:
        if self.info is None:
            raise ValidationError(f"cannot read base_increment of {self.product_id} before update()")
        return self.info.base_increment

    @property
    def price_increment(self) -> str:
        if self.info is None:
            raise ValidationError(f"cannot read price_increment of {self.product_id} before update()")
        return self.info.price_increment

    def update(self, force: bool = False) -> ProductInfo:
        """
        Refresh metadata.

        Args:
            force: Bypass the disk cache

        Returns:
            Product metadata
        """
        self.info = self.client.get_product_info(self.product_id, force_update=force)
        return self.info
