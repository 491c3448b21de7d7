"""Fixtures compartidas: configuración y pedidos de ejemplo."""

from typing import Any, Dict

import pytest

from esim_bridge.core.config import Settings
from tests.fakes import build_settings


@pytest.fixture
def settings() -> Settings:
    return build_settings()


@pytest.fixture
def esim_order_payload() -> Dict[str, Any]:
    """Pedido pagado con una línea eSIM (P1) y su fulfillment order."""
    return {
        "id": 5001,
        "name": "#1001",
        "email": "buyer@example.com",
        "financial_status": "paid",
        "customer": {"id": 7001, "email": "buyer@example.com"},
        "line_items": [
            {"id": 9001, "title": "Travel adapter", "quantity": 1, "properties": []},
            {
                "id": 9002,
                "title": "5GB EU",
                "quantity": 1,
                "properties": [{"name": "maya.maya_product_id", "value": "P1"}],
            },
        ],
        "fulfillment_orders": [
            {
                "id": 3001,
                "status": "open",
                "assigned_location": {"location_id": 4001},
                "line_items": [
                    {"id": 8001, "line_item_id": 9001, "quantity": 1},
                    {"id": 8002, "line_item_id": 9002, "quantity": 1},
                ],
            }
        ],
    }


@pytest.fixture
def plain_order_payload() -> Dict[str, Any]:
    """Pedido pagado sin productos eSIM."""
    return {
        "id": 5002,
        "email": "buyer@example.com",
        "line_items": [{"id": 9101, "title": "T-shirt", "quantity": 2, "properties": []}],
        "fulfillment_orders": [],
    }
