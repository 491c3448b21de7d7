"""
Gestión del ciclo de vida de la aplicación FastAPI.

Al iniciar construye los clientes HTTP y los servicios a partir de la
configuración guardada en app.state; al cerrar detiene el scheduler y
cierra las sesiones HTTP.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from esim_bridge.core.config import Settings
from esim_bridge.core.logging_config import setup_logging
from esim_bridge.core.scheduler import start_scheduler, stop_scheduler
from esim_bridge.db.maya_client import MayaMobileClient
from esim_bridge.db.shopify_clients import ShopifyRESTClient
from esim_bridge.services.catalog_sync import CatalogSynchronizer
from esim_bridge.services.order_fulfillment import EsimFulfillmentService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Gestión del ciclo de vida de la aplicación.

    Args:
        app: Instancia de FastAPI
    """
    settings: Settings = app.state.settings

    # === STARTUP ===
    setup_logging(settings)
    logger.info(f"🚀 Iniciando {settings.APP_NAME}...")

    shopify_client = ShopifyRESTClient(settings)
    maya_client = MayaMobileClient(settings)
    await shopify_client.initialize()
    await maya_client.initialize()

    app.state.shopify_client = shopify_client
    app.state.maya_client = maya_client
    app.state.fulfillment_service = EsimFulfillmentService(shopify_client, maya_client, settings)
    app.state.catalog_synchronizer = CatalogSynchronizer(shopify_client, maya_client, settings)

    if settings.ENABLE_SCHEDULED_SYNC:
        await start_scheduler(app.state.catalog_synchronizer, settings.SYNC_INTERVAL_MINUTES)

    logger.info("🎉 Aplicación iniciada correctamente")

    # === YIELD (aplicación corriendo) ===
    try:
        yield
    finally:
        # === SHUTDOWN ===
        logger.info(f"🛑 Cerrando {settings.APP_NAME}...")
        await stop_scheduler()
        await shopify_client.close()
        await maya_client.close()
        logger.info("👋 Aplicación cerrada correctamente")
