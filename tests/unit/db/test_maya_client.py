"""Tests unitarios para el cliente de Maya Mobile."""

import asyncio

import aiohttp
import pytest

from esim_bridge.db.maya_client import MayaMobileClient
from esim_bridge.utils.error_handler import ErrorCode, MayaAPIException
from tests.fakes import FakeResponse, FakeSession, undecodable_response


def make_client(settings, responses):
    session = FakeSession(responses)
    client = MayaMobileClient(settings, session=session)
    client._retry_base_delay = 0
    return client, session


class TestListProducts:
    """Tests para la lectura del catálogo."""

    @pytest.mark.asyncio
    async def test_returns_raw_records_from_data_field(self, settings):
        client, session = make_client(
            settings,
            [
                FakeResponse(
                    200,
                    {
                        "data": [
                            {"id": "P1", "name": "5GB EU", "description": "Europe", "retail_price": "10.00"},
                            {"id": 42, "name": "1GB US", "retail_price": 4.5},
                        ]
                    },
                )
            ],
        )

        products = await client.list_products()

        assert session.calls[0]["method"] == "GET"
        assert session.calls[0]["url"] == "https://api.maya.test/product/v1/products"
        assert [p["id"] for p in products] == ["P1", 42]
        assert products[1]["retail_price"] == 4.5

    @pytest.mark.asyncio
    async def test_missing_data_field_raises(self, settings):
        client, _ = make_client(settings, [FakeResponse(200, {"products": []})])

        with pytest.raises(MayaAPIException):
            await client.list_products()

    @pytest.mark.asyncio
    async def test_retries_on_timeout(self, settings):
        client, session = make_client(settings, [asyncio.TimeoutError(), FakeResponse(200, {"data": []})])

        assert await client.list_products() == []
        assert len(session.calls) == 2

    @pytest.mark.asyncio
    async def test_rate_limit_is_retried(self, settings):
        client, session = make_client(
            settings,
            [FakeResponse(429, {"message": "slow down"}, headers={"Retry-After": "0"}), FakeResponse(200, {"data": []})],
        )

        assert await client.list_products() == []
        assert len(session.calls) == 2


class TestActivateEsim:
    """Tests para la activación de eSIM."""

    @pytest.mark.asyncio
    async def test_sends_activation_request(self, settings):
        client, session = make_client(
            settings,
            [FakeResponse(200, {"data": {"qrcode_image_url": "https://x/q.png", "activation_code": "ABC123"}})],
        )

        activation = await client.activate_esim("P1", "buyer@example.com", 7001, 5001)

        assert activation.qrcode_image_url == "https://x/q.png"
        assert activation.activation_code == "ABC123"
        call = session.calls[0]
        assert call["method"] == "POST"
        assert call["url"] == "https://api.maya.test/connectivity/v1/esim"
        assert call["json"] == {
            "api_key": "maya-key",
            "product_sku": "P1",
            "customer_email": "buyer@example.com",
            "customer_id": 7001,
            "reference_id": 5001,
        }
        assert call["timeout"].total == settings.MAYA_ACTIVATION_TIMEOUT_SECONDS

    @pytest.mark.asyncio
    async def test_server_error_is_not_retried(self, settings):
        client, session = make_client(settings, [FakeResponse(502, {"message": "bad gateway"})])

        with pytest.raises(MayaAPIException) as exc_info:
            await client.activate_esim("P1", "buyer@example.com", 7001, 5001)

        assert len(session.calls) == 1
        assert exc_info.value.api_response_code == 502
        assert exc_info.value.timed_out is False

    @pytest.mark.asyncio
    async def test_timeout_is_not_retried_and_flagged(self, settings):
        client, session = make_client(settings, [asyncio.TimeoutError()])

        with pytest.raises(MayaAPIException) as exc_info:
            await client.activate_esim("P1", "buyer@example.com", 7001, 5001)

        assert len(session.calls) == 1
        assert exc_info.value.timed_out is True
        assert exc_info.value.is_retryable is False
        assert exc_info.value.error_code == ErrorCode.MAYA_ACTIVATION_TIMEOUT

    @pytest.mark.asyncio
    async def test_network_error_is_not_retried(self, settings):
        client, session = make_client(settings, [aiohttp.ClientConnectionError("reset")])

        with pytest.raises(MayaAPIException):
            await client.activate_esim("P1", "buyer@example.com", 7001, 5001)

        assert len(session.calls) == 1

    @pytest.mark.asyncio
    async def test_success_without_credentials_raises_non_retryable(self, settings):
        client, _ = make_client(settings, [FakeResponse(200, {"data": {"iccid": "8901"}})])

        with pytest.raises(MayaAPIException) as exc_info:
            await client.activate_esim("P1", "buyer@example.com", 7001, 5001)

        assert exc_info.value.is_retryable is False

    @pytest.mark.asyncio
    async def test_undecodable_response_is_not_retried(self, settings):
        client, session = make_client(settings, [undecodable_response(200)])

        with pytest.raises(MayaAPIException) as exc_info:
            await client.activate_esim("P1", "buyer@example.com", 7001, 5001)

        assert len(session.calls) == 1
        assert exc_info.value.is_retryable is False
