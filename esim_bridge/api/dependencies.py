"""
Dependencias de FastAPI.

Los servicios se construyen una vez en el lifespan y viven en app.state;
los tests reemplazan estas dependencias con app.dependency_overrides.
"""

import hmac
from typing import Optional

from fastapi import Header, Request

from esim_bridge.core.config import Settings
from esim_bridge.services.catalog_sync import CatalogSynchronizer
from esim_bridge.services.order_fulfillment import EsimFulfillmentService
from esim_bridge.utils.error_handler import UnauthorizedException


def get_app_settings(request: Request) -> Settings:
    """Configuración construida al iniciar la aplicación."""
    return request.app.state.settings


def get_fulfillment_service(request: Request) -> EsimFulfillmentService:
    """Servicio de cumplimiento de pedidos eSIM."""
    return request.app.state.fulfillment_service


def get_catalog_synchronizer(request: Request) -> CatalogSynchronizer:
    """Sincronizador del catálogo Maya → Shopify."""
    return request.app.state.catalog_synchronizer


async def verify_cron_secret(
    request: Request,
    authorization: Optional[str] = Header(default=None),
) -> None:
    """
    Exige `Authorization: Bearer <CRON_SECRET>` cuando CRON_SECRET está configurado.

    Raises:
        UnauthorizedException: Si la credencial falta o no coincide
    """
    secret = get_app_settings(request).CRON_SECRET
    if not secret:
        return

    expected = f"Bearer {secret}"
    if not authorization or not hmac.compare_digest(authorization.encode("utf-8"), expected.encode("utf-8")):
        raise UnauthorizedException()
