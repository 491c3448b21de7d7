"""
Scheduler para la sincronización periódica del catálogo Maya → Shopify.

Alternativa al cron externo: cuando ENABLE_SCHEDULED_SYNC está activo, el
lifespan arranca un loop asyncio que ejecuta la sincronización cada
SYNC_INTERVAL_MINUTES. Una ejecución fallida se registra y el loop continúa.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from esim_bridge.services.catalog_sync import CatalogSynchronizer
from esim_bridge.utils.error_handler import AppException, log_error

logger = logging.getLogger(__name__)

# Global scheduler state
_scheduler_running = False
_scheduler_task: Optional[asyncio.Task] = None
_last_run: Optional[Dict[str, Any]] = None


async def start_scheduler(synchronizer: CatalogSynchronizer, interval_minutes: int) -> None:
    """
    Inicia el loop de sincronización programada.

    Args:
        synchronizer: Sincronizador del catálogo
        interval_minutes: Minutos entre ejecuciones
    """
    global _scheduler_running, _scheduler_task

    if _scheduler_running:
        logger.warning("Scheduler ya está ejecutándose")
        return

    logger.info(f"🕒 Iniciando scheduler de catálogo cada {interval_minutes} minutos")
    _scheduler_running = True
    _scheduler_task = asyncio.create_task(_scheduler_loop(synchronizer, interval_minutes))


async def stop_scheduler() -> None:
    """
    Detiene el scheduler.
    """
    global _scheduler_running, _scheduler_task

    if not _scheduler_running:
        return

    logger.info("🛑 Deteniendo scheduler")
    _scheduler_running = False

    if _scheduler_task and not _scheduler_task.done():
        _scheduler_task.cancel()
        try:
            await _scheduler_task
        except asyncio.CancelledError:
            pass

    _scheduler_task = None
    logger.info("✅ Scheduler detenido correctamente")


async def run_scheduled_sync(synchronizer: CatalogSynchronizer) -> Dict[str, Any]:
    """
    Ejecuta una sincronización y registra el resultado.

    Returns:
        Dict: Resumen de la ejecución
    """
    global _last_run

    started_at = datetime.now(timezone.utc).isoformat()
    try:
        report = await synchronizer.sync_products()
        report.raise_if_failed()
        _last_run = {"started_at": started_at, "success": True, "summary": report.summary()}
    except AppException as e:
        log_error(e, {"trigger": "scheduler"})
        _last_run = {"started_at": started_at, "success": False, "error": e.message}

    return _last_run


async def _scheduler_loop(synchronizer: CatalogSynchronizer, interval_minutes: int) -> None:
    """
    Loop principal del scheduler.
    """
    while _scheduler_running:
        try:
            await run_scheduled_sync(synchronizer)
            await asyncio.sleep(interval_minutes * 60)
        except asyncio.CancelledError:
            logger.info("Loop del scheduler cancelado")
            break
        except Exception as e:
            logger.error(f"Error en loop del scheduler: {e}")
            # Continuar ejecutándose a pesar del error
            await asyncio.sleep(60)


def get_scheduler_status() -> Dict[str, Any]:
    """
    Estado actual del scheduler.

    Returns:
        Dict: running y última ejecución
    """
    return {"running": _scheduler_running, "last_run": _last_run}
