"""
Unified Shopify REST client that combines the specialized clients.

All specialized clients share a single HTTP session owned by this client.
"""

import logging
from typing import Any, Dict, List, Optional

import aiohttp

from esim_bridge.api.v1.schemas.shopify_schemas import ShopifyFulfillmentOrder, ShopifyId, ShopifyProduct
from esim_bridge.core.config import Settings

from .base_client import BaseShopifyRESTClient
from .fulfillment_client import ShopifyFulfillmentClient
from .product_client import ShopifyProductClient

logger = logging.getLogger(__name__)


class ShopifyRESTClient(BaseShopifyRESTClient):
    """
    Unified Shopify client exposing ``products`` and ``fulfillments``.
    """

    def __init__(self, settings: Settings, session: Optional[aiohttp.ClientSession] = None):
        super().__init__(settings, session)
        self.products = ShopifyProductClient(settings, session)
        self.fulfillments = ShopifyFulfillmentClient(settings, session)
        self._share_session()

    def _share_session(self):
        for client in (self.products, self.fulfillments):
            client.session = self.session
            client._owns_session = False
            client._retry_base_delay = self._retry_base_delay

    async def initialize(self):
        """Initialize the shared session and hand it to the specialized clients."""
        await super().initialize()
        self._share_session()
        logger.info("✅ Shopify REST client initialized")

    async def close(self):
        await super().close()
        self._share_session()

    async def list_esim_products(self) -> List[ShopifyProduct]:
        """Delegate to product client with the configured eSIM product type."""
        return await self.products.list_products_by_type(self.settings.ESIM_PRODUCT_TYPE)

    async def create_product(self, product_data: Dict[str, Any]) -> Dict[str, Any]:
        """Delegate to product client."""
        return await self.products.create_product(product_data)

    async def list_fulfillment_orders(self, order_id: ShopifyId) -> List[ShopifyFulfillmentOrder]:
        """Delegate to fulfillment client."""
        return await self.fulfillments.list_fulfillment_orders(order_id)

    async def create_fulfillment(self, fulfillment_data: Dict[str, Any]) -> Dict[str, Any]:
        """Delegate to fulfillment client."""
        return await self.fulfillments.create_fulfillment(fulfillment_data)
