"""
Shopify REST clients organized by responsibility.
"""

from .base_client import BaseShopifyRESTClient
from .fulfillment_client import ShopifyFulfillmentClient
from .product_client import ShopifyProductClient
from .unified_client import ShopifyRESTClient

__all__ = [
    "BaseShopifyRESTClient",
    "ShopifyProductClient",
    "ShopifyFulfillmentClient",
    "ShopifyRESTClient",
]
