"""
Configuración centralizada de routers para la aplicación FastAPI.

Registra los endpoints raíz, de salud y los routers de la API v1. Las
rutas legadas (/shopify/webhooks/orders/paid y /api/sync-products) se
mantienen como alias para no reconfigurar Shopify ni el cron.
"""

import logging
from datetime import datetime, timezone

from fastapi import Depends, FastAPI
from fastapi.responses import PlainTextResponse

from esim_bridge.api.dependencies import verify_cron_secret
from esim_bridge.api.v1.endpoints.sync import router as sync_router
from esim_bridge.api.v1.endpoints.sync import sync_products
from esim_bridge.api.v1.endpoints.webhooks import router as webhooks_router
from esim_bridge.core.scheduler import get_scheduler_status
from esim_bridge.version import version_info

logger = logging.getLogger(__name__)


def create_root_endpoints(app: FastAPI) -> None:
    """
    Crea endpoints raíz de la aplicación.

    Args:
        app: Instancia de FastAPI
    """

    @app.get("/", tags=["Root"], summary="API Info")
    async def root():
        return {
            "message": app.title,
            "version": app.version,
            "status": "running",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "endpoints": {
                "health": "/health",
                "orders_paid_webhook": "/api/v1/webhooks/orders/paid",
                "product_sync": "/api/v1/sync/products",
            },
        }

    @app.get("/ping", tags=["Root"], summary="Simple Ping")
    async def ping():
        return {"message": "pong", "timestamp": datetime.now(timezone.utc).isoformat()}

    @app.get("/version", tags=["Root"], summary="Version Info")
    async def version():
        return version_info()


def create_health_endpoints(app: FastAPI) -> None:
    """
    Crea el endpoint de health check.

    No consulta las APIs externas: solo reporta el estado del proceso.
    """

    @app.get("/health", tags=["Health"], summary="Health Check")
    async def health_check():
        settings = app.state.settings
        return {
            "status": "healthy",
            "version": app.version,
            "environment": settings.ENVIRONMENT,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "scheduler": get_scheduler_status(),
        }


def configure_all_routers(app: FastAPI) -> None:
    """
    Registra todos los routers de la aplicación.

    Args:
        app: Instancia de FastAPI
    """
    create_root_endpoints(app)
    create_health_endpoints(app)

    app.include_router(webhooks_router, prefix="/api/v1/webhooks", tags=["Webhooks"])
    app.include_router(sync_router, prefix="/api/v1/sync", tags=["Sync"])

    # Alias legados
    app.include_router(webhooks_router, prefix="/shopify/webhooks", include_in_schema=False)
    app.add_api_route(
        "/api/sync-products",
        sync_products,
        methods=["GET", "POST"],
        dependencies=[Depends(verify_cron_secret)],
        response_class=PlainTextResponse,
        include_in_schema=False,
    )

    logger.info("✅ Routers configurados")
