"""Tests unitarios para la sincronización del catálogo Maya → Shopify."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from esim_bridge.api.v1.schemas.maya_schemas import MayaProduct
from esim_bridge.api.v1.schemas.shopify_schemas import ShopifyProduct
from esim_bridge.services.catalog_sync import (
    CatalogSynchronizer,
    build_store_product_payload,
    find_matching_store_product,
    index_store_products_by_maya_id,
    parse_maya_product,
    store_product_matches,
)
from esim_bridge.utils.error_handler import (
    MayaAPIException,
    ShopifyAPIException,
    SyncException,
    ValidationException,
)


def store_product(maya_id, product_id=1, key="maya_product_id"):
    return ShopifyProduct.model_validate(
        {
            "id": product_id,
            "title": f"Product {maya_id}",
            "variants": [{"id": product_id * 10, "metafields": [{"namespace": "maya", "key": key, "value": maya_id}]}],
        }
    )


def maya_product(product_id="P1", name="5GB EU", price="10.00"):
    return MayaProduct(id=product_id, name=name, description=f"<p>{name}</p>", retail_price=price)


def make_synchronizer(settings, maya_products, store_products):
    shopify_client = MagicMock()
    shopify_client.list_esim_products = AsyncMock(return_value=store_products)
    shopify_client.create_product = AsyncMock(side_effect=lambda payload: {"id": 999, **payload})
    maya_client = MagicMock()
    records = [p.model_dump() if isinstance(p, MayaProduct) else p for p in maya_products]
    maya_client.list_products = AsyncMock(return_value=records)
    return CatalogSynchronizer(shopify_client, maya_client, settings), shopify_client, maya_client


class TestStoreProductMatches:
    """Tests para la relación de pertenencia entre catálogos."""

    def test_matches_variant_metafield(self):
        assert store_product_matches("P1", store_product("P1")) is True

    def test_different_id_does_not_match(self):
        assert store_product_matches("P1", store_product("P2")) is False

    def test_other_metafield_key_does_not_match(self):
        assert store_product_matches("P1", store_product("P1", key="other")) is False

    def test_numeric_metafield_value_matches_string_id(self):
        assert store_product_matches("42", store_product(42)) is True

    def test_empty_store_has_no_match(self):
        assert find_matching_store_product(maya_product(), []) is None

    def test_match_in_any_variant(self):
        product = ShopifyProduct.model_validate(
            {
                "id": 1,
                "variants": [
                    {"id": 10, "metafields": []},
                    {"id": 11, "metafields": [{"key": "maya_product_id", "value": "P1"}]},
                ],
            }
        )
        assert find_matching_store_product(maya_product(), [store_product("P9"), product]) is product

    def test_index_agrees_with_linear_scan(self):
        products = [store_product("P1", 1), store_product("P2", 2), store_product("P1", 3)]
        index = index_store_products_by_maya_id(products)

        for maya_id in ("P1", "P2", "P3"):
            expected = find_matching_store_product(maya_product(maya_id), products)
            assert index.get(maya_id) is expected


class TestBuildStoreProductPayload:
    """Tests para el producto creado en Shopify."""

    def test_payload_fields(self, settings):
        payload = build_store_product_payload(maya_product(), settings)

        assert payload["title"] == "5GB EU"
        assert payload["body_html"] == "<p>5GB EU</p>"
        assert payload["vendor"] == "Maya Mobile"
        assert payload["product_type"] == "eSIM"
        assert payload["published"] is True

        variant = payload["variants"][0]
        assert variant["sku"] == "MAYA_ESIM_P1"
        assert variant["price"] == "10.00"
        assert variant["requires_shipping"] is False
        assert variant["inventory_management"] is None
        assert variant["metafields"][0]["key"] == "maya_product_id"
        assert variant["metafields"][0]["value"] == "P1"
        assert payload["metafields"][0]["namespace"] == "maya"

    def test_created_payload_matches_its_source(self, settings):
        """Un producto construido desde P debe ser reconocido como P."""
        payload = build_store_product_payload(maya_product("P7"), settings)
        assert store_product_matches("P7", ShopifyProduct.model_validate(payload)) is True


class TestCatalogSynchronizer:
    """Tests para la ejecución de la sincronización."""

    @pytest.mark.asyncio
    async def test_creates_missing_product_in_empty_store(self, settings):
        """Catálogo con P1 y tienda vacía: exactamente una creación."""
        synchronizer, shopify_client, _ = make_synchronizer(settings, [maya_product()], [])

        report = await synchronizer.sync_products()

        shopify_client.create_product.assert_awaited_once()
        payload = shopify_client.create_product.await_args.args[0]
        assert payload["variants"][0]["sku"] == "MAYA_ESIM_P1"
        assert payload["variants"][0]["price"] == "10.00"
        assert payload["variants"][0]["metafields"][0]["value"] == "P1"
        assert report.created == ["P1"]
        assert report.success is True

    @pytest.mark.asyncio
    async def test_existing_products_are_skipped(self, settings):
        synchronizer, shopify_client, _ = make_synchronizer(
            settings, [maya_product("P1"), maya_product("P2")], [store_product("P1")]
        )

        report = await synchronizer.sync_products()

        assert shopify_client.create_product.await_count == 1
        assert shopify_client.create_product.await_args.args[0]["variants"][0]["sku"] == "MAYA_ESIM_P2"
        assert report.skipped == ["P1"]
        assert report.created == ["P2"]

    @pytest.mark.asyncio
    async def test_second_run_creates_nothing(self, settings):
        """Sincronizar dos veces el mismo catálogo no duplica productos."""
        catalog = [maya_product("P1"), maya_product("P2")]
        synchronizer, shopify_client, _ = make_synchronizer(settings, catalog, [])
        await synchronizer.sync_products()

        created = [ShopifyProduct.model_validate(call.args[0]) for call in shopify_client.create_product.await_args_list]
        shopify_client.list_esim_products = AsyncMock(return_value=created)
        shopify_client.create_product.reset_mock()

        report = await synchronizer.sync_products()

        shopify_client.create_product.assert_not_awaited()
        assert report.created == []
        assert report.skipped == ["P1", "P2"]

    @pytest.mark.asyncio
    async def test_repeated_provider_id_is_created_once(self, settings):
        synchronizer, shopify_client, _ = make_synchronizer(settings, [maya_product("P1"), maya_product("P1")], [])

        report = await synchronizer.sync_products()

        shopify_client.create_product.assert_awaited_once()
        assert report.skipped == ["P1"]

    @pytest.mark.asyncio
    async def test_failed_creation_continues_with_remaining_products(self, settings):
        synchronizer, shopify_client, _ = make_synchronizer(
            settings, [maya_product("P1"), maya_product("P2"), maya_product("P3")], []
        )
        shopify_client.create_product = AsyncMock(
            side_effect=[
                {"id": 1},
                ShopifyAPIException("HTTP 422", api_response_code=422, response_body={"errors": "bad"}),
                {"id": 3},
            ]
        )

        report = await synchronizer.sync_products()

        assert shopify_client.create_product.await_count == 3
        assert report.created == ["P1", "P3"]
        assert len(report.failed) == 1
        assert report.failed[0]["maya_product_id"] == "P2"
        assert report.failed[0]["error_code"] == "SHOPIFY_API_ERROR"
        assert report.success is False

        with pytest.raises(SyncException) as exc_info:
            report.raise_if_failed()
        assert exc_info.value.operation == "create_products"
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_dry_run_creates_nothing(self, settings):
        synchronizer, shopify_client, _ = make_synchronizer(
            settings, [maya_product("P1"), maya_product("P2")], [store_product("P1")]
        )

        report = await synchronizer.sync_products(dry_run=True)

        shopify_client.create_product.assert_not_awaited()
        assert report.dry_run is True
        assert report.created == ["P2"]
        assert "would create 1" in report.summary()

    @pytest.mark.asyncio
    async def test_provider_catalog_failure_raises_sync_exception(self, settings):
        synchronizer, shopify_client, maya_client = make_synchronizer(settings, [], [])
        maya_client.list_products = AsyncMock(side_effect=MayaAPIException("HTTP 503", api_response_code=503))

        with pytest.raises(SyncException) as exc_info:
            await synchronizer.sync_products()

        assert exc_info.value.operation == "fetch_catalogs"
        shopify_client.create_product.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_provider_catalog(self, settings):
        synchronizer, shopify_client, _ = make_synchronizer(settings, [], [store_product("P1")])

        report = await synchronizer.sync_products()

        shopify_client.create_product.assert_not_awaited()
        assert report.success is True
        assert report.provider_products == 0
        assert report.store_products == 1

    @pytest.mark.asyncio
    async def test_invalid_provider_records_do_not_stop_the_sync(self, settings):
        """Un registro inválido se reporta y el resto del catálogo se procesa."""
        synchronizer, shopify_client, _ = make_synchronizer(
            settings,
            [
                maya_product("P1"),
                {"id": "P2", "retail_price": "4.00"},
                {"id": None, "name": "No id"},
                maya_product("P3"),
            ],
            [],
        )

        report = await synchronizer.sync_products()

        assert shopify_client.create_product.await_count == 2
        assert report.created == ["P1", "P3"]
        assert report.provider_products == 4
        assert [f["maya_product_id"] for f in report.failed] == ["P2", None]
        assert {f["error_code"] for f in report.failed} == {"VALIDATION_ERROR"}

        with pytest.raises(SyncException) as exc_info:
            report.raise_if_failed()
        assert exc_info.value.public_message == "Product sync failed."


class TestParseMayaProduct:
    """Tests para la validación de registros del catálogo."""

    def test_valid_record(self):
        product = parse_maya_product({"id": 42, "name": "1GB US", "retail_price": 4.5})

        assert product.id == "42"
        assert product.retail_price == "4.5"

    @pytest.mark.parametrize(
        "record,raw_id",
        [
            ({"id": "P2", "retail_price": "4.00"}, "P2"),
            ({"name": "No id"}, None),
            ("not-a-product", None),
        ],
    )
    def test_invalid_record_raises_validation_exception(self, record, raw_id):
        with pytest.raises(ValidationException) as exc_info:
            parse_maya_product(record)

        assert exc_info.value.invalid_value == raw_id
        assert exc_info.value.status_code == 400
