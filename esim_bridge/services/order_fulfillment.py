"""
Cumplimiento de pedidos eSIM: Shopify orders/paid → Maya → Shopify.

Flujo lineal por pedido:
1. Ubicar la línea eSIM (propiedad `maya.maya_product_id` no vacía).
2. Ubicar el fulfillment order que contiene esa línea.
3. Activar el eSIM en Maya (efecto real, nunca se reintenta).
4. Registrar el fulfillment en Shopify con el QR y el código de activación.

Si el paso 4 falla después de activar, el eSIM quedó aprovisionado sin
cumplimiento registrado: se lanza FulfillmentAfterActivationException y se
envía una alerta para cumplimiento manual.

Los webhooks repetidos del mismo pedido no se deduplican.
"""

import logging
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from esim_bridge.api.v1.schemas.maya_schemas import EsimActivation
from esim_bridge.api.v1.schemas.shopify_schemas import (
    MAYA_LINE_ITEM_PROPERTY,
    ShopifyFulfillmentOrder,
    ShopifyFulfillmentOrderLineItem,
    ShopifyLineItem,
    ShopifyOrder,
)
from esim_bridge.core.config import Settings
from esim_bridge.utils.error_handler import (
    AppException,
    DataInconsistencyException,
    FulfillmentAfterActivationException,
)
from esim_bridge.utils.notifications import send_error_alert

logger = logging.getLogger(__name__)


class FulfillmentStatus(str, Enum):
    """Resultado del procesamiento de un pedido."""

    FULFILLED = "fulfilled"
    SKIPPED = "skipped"


@dataclass
class FulfillmentResult:
    """Resultado devuelto al endpoint del webhook."""

    status: FulfillmentStatus
    order_id: Any
    message: str
    line_item_id: Any = None
    fulfillment_order_id: Any = None
    fulfillment_id: Any = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data


def _has_value(value: Any) -> bool:
    return value is not None and value != ""


def find_esim_line_item(order: ShopifyOrder) -> Optional[ShopifyLineItem]:
    """
    Retorna la primera línea con la propiedad `maya.maya_product_id` no vacía.
    """
    for line_item in order.line_items:
        if any(prop.name == MAYA_LINE_ITEM_PROPERTY and _has_value(prop.value) for prop in line_item.properties):
            return line_item
    return None


def get_maya_sku(line_item: ShopifyLineItem) -> str:
    """Valor de la primera propiedad `maya.maya_product_id` no vacía."""
    prop = next(
        p for p in line_item.properties if p.name == MAYA_LINE_ITEM_PROPERTY and _has_value(p.value)
    )
    return str(prop.value)


def find_fulfillment_order(
    fulfillment_orders: List[ShopifyFulfillmentOrder], line_item: ShopifyLineItem
) -> Optional[Tuple[ShopifyFulfillmentOrder, ShopifyFulfillmentOrderLineItem]]:
    """
    Busca el fulfillment order cuyas líneas referencian la línea del pedido.

    Returns:
        Tupla (fulfillment order, línea del fulfillment order) o None
    """
    target = str(line_item.id)
    for fulfillment_order in fulfillment_orders:
        for fo_line_item in fulfillment_order.line_items:
            if str(fo_line_item.order_line_item_id) == target:
                return fulfillment_order, fo_line_item
    return None


def build_customer_message(activation: EsimActivation) -> str:
    """Mensaje visible para el cliente en la notificación de envío."""
    return f"Your eSIM QR Code: {activation.qrcode_image_url}\nActivation Code: {activation.activation_code}"


def build_fulfillment_payload(
    fulfillment_order: ShopifyFulfillmentOrder,
    fo_line_item: ShopifyFulfillmentOrderLineItem,
    line_item: ShopifyLineItem,
    activation: EsimActivation,
) -> Dict[str, Any]:
    """
    Construye el cuerpo `fulfillment` para la Admin API.

    Args:
        fulfillment_order: Fulfillment order que contiene la línea eSIM
        fo_line_item: Línea del fulfillment order
        line_item: Línea eSIM del pedido (cantidad)
        activation: Credenciales devueltas por Maya

    Returns:
        Dict: Payload del fulfillment
    """
    payload: Dict[str, Any] = {
        "line_items_by_fulfillment_order": [
            {
                "fulfillment_order_id": fulfillment_order.id,
                "fulfillment_order_line_items": [{"id": fo_line_item.id, "quantity": line_item.quantity}],
            }
        ],
        "notify_customer": True,
        "message": build_customer_message(activation),
    }
    if fulfillment_order.location_id is not None:
        payload["location_id"] = fulfillment_order.location_id
    return payload


class EsimFulfillmentService:
    """
    Procesa pedidos pagados que contienen un eSIM de Maya Mobile.
    """

    def __init__(self, shopify_client, maya_client, settings: Settings):
        """
        Inicializa el servicio.

        Args:
            shopify_client: Cliente REST de Shopify (list_fulfillment_orders, create_fulfillment)
            maya_client: Cliente de Maya Mobile (activate_esim)
            settings: Configuración de la aplicación
        """
        self.shopify_client = shopify_client
        self.maya_client = maya_client
        self.settings = settings

    async def process_order(self, order: ShopifyOrder) -> FulfillmentResult:
        """
        Procesa un pedido ya verificado.

        Args:
            order: Pedido del webhook

        Returns:
            FulfillmentResult: fulfilled o skipped

        Raises:
            DataInconsistencyException: Línea eSIM sin fulfillment order
            ExternalAPIException: Falla antes de la activación o en la activación
            FulfillmentAfterActivationException: eSIM activado pero no cumplido en Shopify
        """
        logger.info(f"✅ Received paid order #{order.id}")

        esim_line_item = find_esim_line_item(order)
        if esim_line_item is None:
            logger.info(f"ℹ️ Order #{order.id} does not contain a Maya Mobile eSIM product. Skipping.")
            return FulfillmentResult(
                status=FulfillmentStatus.SKIPPED,
                order_id=order.id,
                message="No eSIM product found. Skipping.",
            )

        fulfillment_orders = order.fulfillment_orders
        if fulfillment_orders is None:
            fulfillment_orders = await self.shopify_client.list_fulfillment_orders(order.id)

        match = find_fulfillment_order(fulfillment_orders, esim_line_item)
        if match is None:
            raise DataInconsistencyException(
                f"Order #{order.id} has eSIM line item {esim_line_item.id} but no fulfillment order references it",
                order_id=order.id,
                line_item_id=esim_line_item.id,
            )
        fulfillment_order, fo_line_item = match

        maya_sku = get_maya_sku(esim_line_item)
        logger.info(f"Activating Maya SKU {maya_sku} for order #{order.id} (line item {esim_line_item.id})")

        activation = await self.maya_client.activate_esim(
            product_sku=maya_sku,
            customer_email=order.customer_email,
            customer_id=order.customer_id,
            reference_id=order.id,
        )
        logger.info(f"📲 eSIM provisioned for order #{order.id}.")

        # Desde aquí el eSIM ya está aprovisionado: toda falla requiere cumplimiento manual
        try:
            payload = build_fulfillment_payload(fulfillment_order, fo_line_item, esim_line_item, activation)
            fulfillment = await self.shopify_client.create_fulfillment(payload)
        except Exception as e:
            reason = e.message if isinstance(e, AppException) else f"{type(e).__name__}: {e}"
            error = FulfillmentAfterActivationException(
                f"eSIM for order #{order.id} was provisioned but the Shopify fulfillment failed: {reason}",
                order_id=order.id,
                fulfillment_order_id=fulfillment_order.id,
                activation=activation.model_dump(),
                cause=e,
            )
            await send_error_alert(self.settings, error.to_dict())
            raise error from e

        logger.info(f"✅ Order #{order.id} fulfilled in Shopify.")
        return FulfillmentResult(
            status=FulfillmentStatus.FULFILLED,
            order_id=order.id,
            message="eSIM provisioned and order fulfilled.",
            line_item_id=esim_line_item.id,
            fulfillment_order_id=fulfillment_order.id,
            fulfillment_id=fulfillment.get("id") if isinstance(fulfillment, dict) else None,
        )
