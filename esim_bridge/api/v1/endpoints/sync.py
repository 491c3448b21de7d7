"""
Endpoint de sincronización del catálogo Maya → Shopify.

Pensado para ser invocado por un cron externo. Si CRON_SECRET está
configurado exige `Authorization: Bearer <CRON_SECRET>`.
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import PlainTextResponse

from esim_bridge.api.dependencies import get_catalog_synchronizer, verify_cron_secret
from esim_bridge.services.catalog_sync import CatalogSynchronizer

logger = logging.getLogger(__name__)

# Crear router
router = APIRouter()

DEFAULT_QUERY_DRY_RUN = Query(default=False, description="Calcular sin crear productos")


@router.api_route(
    "/products",
    methods=["GET", "POST"],
    status_code=status.HTTP_200_OK,
    response_class=PlainTextResponse,
    dependencies=[Depends(verify_cron_secret)],
)
async def sync_products(
    dry_run: bool = DEFAULT_QUERY_DRY_RUN,
    synchronizer: CatalogSynchronizer = Depends(get_catalog_synchronizer),
) -> PlainTextResponse:
    """
    Ejecuta la sincronización del catálogo.

    Returns:
        PlainTextResponse: 200 si no hubo fallas; SyncException (500) en otro caso
    """
    report = await synchronizer.sync_products(dry_run=dry_run)
    report.raise_if_failed()

    return PlainTextResponse(f"Product sync completed. {report.summary()}", status_code=status.HTTP_200_OK)
