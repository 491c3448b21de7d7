"""
Endpoints para webhooks de Shopify.

El webhook orders/paid se procesa de forma síncrona: el código HTTP
devuelto refleja el resultado (200 procesado u omitido, 401 firma
inválida, 500 falla).
"""

import json
import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError

from esim_bridge.api.dependencies import get_app_settings, get_fulfillment_service
from esim_bridge.api.v1.schemas.shopify_schemas import ShopifyOrder
from esim_bridge.core.config import Settings
from esim_bridge.services.order_fulfillment import EsimFulfillmentService
from esim_bridge.services.webhook_verifier import HMAC_HEADER, verify_webhook_signature
from esim_bridge.utils.error_handler import ValidationException, WebhookAuthenticationException

logger = logging.getLogger(__name__)

# Crear router
router = APIRouter()


def parse_order(raw_body: bytes) -> ShopifyOrder:
    """
    Parsea el cuerpo crudo (ya verificado) como pedido de Shopify.

    Raises:
        ValidationException: Si el cuerpo no es JSON o no es un pedido válido
    """
    try:
        payload = json.loads(raw_body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise ValidationException(f"Webhook body is not valid JSON: {e}", field="body") from e

    try:
        return ShopifyOrder.model_validate(payload)
    except ValidationError as e:
        raise ValidationException(f"Webhook body is not a valid order: {e.error_count()} errors", field="order") from e


@router.post("/orders/paid", status_code=status.HTTP_200_OK, response_class=PlainTextResponse)
async def orders_paid_webhook(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    service: EsimFulfillmentService = Depends(get_fulfillment_service),
) -> PlainTextResponse:
    """
    Webhook orders/paid de Shopify.

    Args:
        request: Request HTTP con el webhook
        settings: Configuración de la aplicación
        service: Servicio de cumplimiento eSIM

    Returns:
        PlainTextResponse: Resultado legible del procesamiento
    """
    # La firma se verifica sobre los bytes crudos, antes de parsear
    raw_body = await request.body()
    signature = request.headers.get(HMAC_HEADER)

    if not verify_webhook_signature(settings.SHOPIFY_WEBHOOK_SECRET, raw_body, signature):
        raise WebhookAuthenticationException()

    order = parse_order(raw_body)
    result = await service.process_order(order)

    logger.info(f"Webhook processed for order #{result.order_id}: {result.status.value}")
    return PlainTextResponse(result.message, status_code=status.HTTP_200_OK)
