"""
Maya Mobile ↔ Shopify eSIM Integration - FastAPI Application Entry Point

Recibe los webhooks `orders/paid` de Shopify, activa la eSIM en Maya Mobile
y cumple el pedido con el código QR; además sincroniza el catálogo de
productos eSIM de Maya hacia la tienda.

La aplicación se construye con `create_application()`; la configuración se
guarda en `app.state.settings` para que el lifespan y las dependencias la
lean desde ahí.
"""

import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI

from esim_bridge.core.config import Settings, get_settings
from esim_bridge.core.exception_handlers import configure_exception_handlers
from esim_bridge.core.lifespan import lifespan
from esim_bridge.core.routers import configure_all_routers
from esim_bridge.version import VERSION

logger = logging.getLogger(__name__)


def create_application(settings: Optional[Settings] = None) -> FastAPI:
    """
    Factory para crear y configurar la aplicación FastAPI.

    Args:
        settings: Configuración explícita; si es None se carga del entorno

    Returns:
        FastAPI: Instancia configurada de la aplicación
    """
    settings = settings or get_settings()
    logger.info("🏗️ Creando aplicación FastAPI...")

    app = FastAPI(
        title=settings.APP_NAME,
        description="Aprovisionamiento de eSIM Maya Mobile para pedidos de Shopify",
        version=VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # 1. Manejadores de excepciones
    configure_exception_handlers(app)

    # 2. Routers y endpoints
    configure_all_routers(app)

    logger.info("✅ Aplicación FastAPI creada y configurada")
    return app


def main() -> None:
    """
    Ejecuta la aplicación con uvicorn.

    Equivalente a:
    uvicorn esim_bridge.main:create_application --factory --port 3000
    """
    settings = get_settings()
    logger.info("🚀 Iniciando aplicación desde main.py...")

    try:
        uvicorn.run(
            "esim_bridge.main:create_application",
            factory=True,
            host=settings.HOST,
            port=settings.PORT,
            reload=settings.DEBUG,
            log_level=settings.LOG_LEVEL.lower(),
            access_log=True,
        )
    except KeyboardInterrupt:
        logger.info("🛑 Aplicación detenida por el usuario")


if __name__ == "__main__":
    main()
