"""
Shopify REST client for fulfillment orders and fulfillments.
"""

import logging
from typing import Any, Dict, List

from esim_bridge.api.v1.schemas.shopify_schemas import ShopifyFulfillmentOrder, ShopifyId

from .base_client import BaseShopifyRESTClient

logger = logging.getLogger(__name__)


class ShopifyFulfillmentClient(BaseShopifyRESTClient):
    """
    Specialized client for the Shopify Fulfillment Orders API.
    """

    async def list_fulfillment_orders(self, order_id: ShopifyId) -> List[ShopifyFulfillmentOrder]:
        """
        Fetch the fulfillment orders of an order.

        Args:
            order_id: Shopify order id

        Returns:
            List of fulfillment orders
        """
        response = await self._request("GET", self._url(f"orders/{order_id}/fulfillment_orders.json"), retry=True)
        items = response.data.get("fulfillment_orders", []) if isinstance(response.data, dict) else []
        logger.info(f"Fetched {len(items)} fulfillment orders for order #{order_id}")
        return [ShopifyFulfillmentOrder.model_validate(item) for item in items]

    async def create_fulfillment(self, fulfillment_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a fulfillment. Never retried.

        Args:
            fulfillment_data: Body of the ``fulfillment`` object

        Returns:
            Created fulfillment (empty dict if Shopify returned no body)
        """
        response = await self._request("POST", self._url("fulfillments.json"), json_body={"fulfillment": fulfillment_data})
        if isinstance(response.data, dict):
            return response.data.get("fulfillment", {})
        return {}
