"""
Base Shopify Admin REST client.

Builds endpoint URLs for the configured shop and API version and maps
failures to ShopifyAPIException.
"""

import logging
from typing import Dict

from esim_bridge.db.base_client import BaseRESTClient
from esim_bridge.utils.error_handler import ShopifyAPIException

logger = logging.getLogger(__name__)


class BaseShopifyRESTClient(BaseRESTClient):
    """
    Base client for Shopify Admin REST API operations.
    """

    service_name = "shopify"
    exception_class = ShopifyAPIException

    def _default_headers(self) -> Dict[str, str]:
        return self.settings.get_shopify_headers()

    def _url(self, path: str) -> str:
        """Absolute Admin API URL for a path like ``products.json``."""
        return f"{self.settings.shopify_api_base_url}/{path.lstrip('/')}"

    def __str__(self):
        return f"{self.__class__.__name__}(shop={self.settings.SHOPIFY_STORE_URL}, api_version={self.settings.SHOPIFY_API_VERSION})"
