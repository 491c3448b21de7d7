"""
Maya Mobile REST client.

Reads the product catalog and activates eSIMs. Catalog reads are retried;
activation provisions a paid resource and is sent exactly once, with its
own timeout.
"""

import logging
from typing import Any, Dict, List, Optional

import aiohttp
from aiohttp import ClientTimeout

from esim_bridge.api.v1.schemas.maya_schemas import EsimActivation
from esim_bridge.core.config import Settings
from esim_bridge.db.base_client import BaseRESTClient
from esim_bridge.utils.error_handler import MayaAPIException

logger = logging.getLogger(__name__)

PRODUCTS_PATH = "/product/v1/products"
ACTIVATION_PATH = "/connectivity/v1/esim"


class MayaMobileClient(BaseRESTClient):
    """
    Client for the Maya Mobile connectivity API.
    """

    service_name = "maya"
    exception_class = MayaAPIException

    def __init__(self, settings: Settings, session: Optional[aiohttp.ClientSession] = None):
        super().__init__(settings, session)
        self.base_url = settings.MAYA_BASE_URL

    def _default_headers(self):
        return self.settings.get_maya_headers()

    async def list_products(self) -> List[Dict[str, Any]]:
        """
        Fetch the full provider catalog.

        Items are returned as received; the catalog sync validates each one
        so a malformed entry does not discard the rest.

        Returns:
            List of raw Maya product records (found under the ``data`` field)
        """
        url = f"{self.base_url}{PRODUCTS_PATH}"
        response = await self._request("GET", url, retry=True)

        items = response.data.get("data") if isinstance(response.data, dict) else None
        if not isinstance(items, list):
            raise MayaAPIException(
                "Product catalog response has no 'data' list",
                api_response_code=response.status,
                endpoint=url,
                response_body=response.data,
            )

        logger.info(f"Found {len(items)} Maya Mobile products.")
        return items

    async def activate_esim(
        self,
        product_sku: str,
        customer_email: Optional[str],
        customer_id: Any,
        reference_id: Any,
    ) -> EsimActivation:
        """
        Activate an eSIM for a customer. Never retried.

        Args:
            product_sku: Maya product id to provision
            customer_email: Customer email
            customer_id: Shopify customer id
            reference_id: Shopify order id, used as reference token

        Returns:
            EsimActivation with QR code URL and activation code

        Raises:
            MayaAPIException: On failure; ``timed_out=True`` when the outcome is unknown
        """
        url = f"{self.base_url}{ACTIVATION_PATH}"
        payload = {
            "api_key": self.settings.MAYA_API_KEY,
            "product_sku": product_sku,
            "customer_email": customer_email,
            "customer_id": customer_id,
            "reference_id": reference_id,
        }

        response = await self._request(
            "POST",
            url,
            json_body=payload,
            retry=False,
            timeout=ClientTimeout(total=self.settings.MAYA_ACTIVATION_TIMEOUT_SECONDS),
        )

        try:
            activation = EsimActivation.from_response(response.data)
        except ValueError as e:
            # 2xx con cuerpo inesperado: la activación pudo ocurrir
            raise MayaAPIException(
                f"Activation response for reference {reference_id} is missing credentials: {e}",
                api_response_code=response.status,
                endpoint=url,
                response_body=response.data,
                is_retryable=False,
            ) from e

        logger.info(f"📲 eSIM provisioned for reference {reference_id}")
        return activation

    def _timeout_exception(self, method: str, url: str, error: Exception) -> MayaAPIException:
        if url.endswith(ACTIVATION_PATH):
            return MayaAPIException(
                f"Timeout on {method} {url}: activation outcome unknown, not retrying",
                endpoint=url,
                timed_out=True,
            )
        return MayaAPIException(f"Timeout on {method} {url}", endpoint=url)
