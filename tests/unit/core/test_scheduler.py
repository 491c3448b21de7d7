"""Tests unitarios para el scheduler de sincronización."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from esim_bridge.core import scheduler
from esim_bridge.services.catalog_sync import CatalogSyncReport
from esim_bridge.utils.error_handler import SyncException


def make_synchronizer(result):
    synchronizer = MagicMock()
    if isinstance(result, Exception):
        synchronizer.sync_products = AsyncMock(side_effect=result)
    else:
        synchronizer.sync_products = AsyncMock(return_value=result)
    return synchronizer


class TestRunScheduledSync:
    """Tests para una ejecución programada."""

    @pytest.mark.asyncio
    async def test_successful_run_is_recorded(self):
        report = CatalogSyncReport(sync_id="catalog_test", provider_products=1, created=["P1"])

        last_run = await scheduler.run_scheduled_sync(make_synchronizer(report))

        assert last_run["success"] is True
        assert "created 1" in last_run["summary"]
        assert scheduler.get_scheduler_status()["last_run"] == last_run

    @pytest.mark.asyncio
    async def test_failed_run_does_not_raise(self):
        error = SyncException("Could not fetch catalogs", operation="fetch_catalogs")

        last_run = await scheduler.run_scheduled_sync(make_synchronizer(error))

        assert last_run["success"] is False
        assert last_run["error"] == "Could not fetch catalogs"

    @pytest.mark.asyncio
    async def test_partial_failures_are_reported(self):
        report = CatalogSyncReport(sync_id="catalog_test", failed=[{"maya_product_id": "P2"}])

        last_run = await scheduler.run_scheduled_sync(make_synchronizer(report))

        assert last_run["success"] is False


class TestSchedulerLifecycle:
    """Tests para el arranque y la detención del loop."""

    @pytest.mark.asyncio
    async def test_start_and_stop(self):
        synchronizer = make_synchronizer(CatalogSyncReport(sync_id="catalog_test"))

        await scheduler.start_scheduler(synchronizer, interval_minutes=60)
        await asyncio.sleep(0)
        assert scheduler.get_scheduler_status()["running"] is True

        await scheduler.stop_scheduler()

        assert scheduler.get_scheduler_status()["running"] is False
        synchronizer.sync_products.assert_awaited()
