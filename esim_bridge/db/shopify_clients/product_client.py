"""
Shopify REST client for product operations.
"""

import logging
from typing import Any, Dict, List

from esim_bridge.api.v1.schemas.shopify_schemas import ShopifyProduct
from esim_bridge.utils.error_handler import ShopifyAPIException

from .base_client import BaseShopifyRESTClient

logger = logging.getLogger(__name__)

PRODUCTS_PAGE_LIMIT = 250


class ShopifyProductClient(BaseShopifyRESTClient):
    """
    Specialized client for Shopify product operations.
    """

    async def list_products_by_type(self, product_type: str) -> List[ShopifyProduct]:
        """
        Fetch every product of a product type, following Link pagination.

        Args:
            product_type: Shopify product_type filter (e.g. "eSIM")

        Returns:
            List of products across all pages
        """
        products: List[ShopifyProduct] = []
        url = self._url("products.json")
        params = {"product_type": product_type, "limit": PRODUCTS_PAGE_LIMIT}

        while url:
            response = await self._request("GET", url, params=params, retry=True)
            page = (response.data or {}).get("products", []) if isinstance(response.data, dict) else []
            products.extend(ShopifyProduct.model_validate(item) for item in page)

            # La URL de la siguiente página ya incluye page_info y limit
            url = response.next_url
            params = None

        logger.info(f"Fetched {len(products)} Shopify products with product_type={product_type}")
        return products

    async def create_product(self, product_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a product.

        Args:
            product_data: Body of the ``product`` object

        Returns:
            Created product as returned by Shopify
        """
        response = await self._request("POST", self._url("products.json"), json_body={"product": product_data})
        if not isinstance(response.data, dict) or "product" not in response.data:
            raise ShopifyAPIException(
                "Product creation returned an unexpected body",
                api_response_code=response.status,
                endpoint=self._url("products.json"),
                response_body=response.data,
            )
        return response.data["product"]
