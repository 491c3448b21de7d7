"""
Sincronización del catálogo Maya Mobile → Shopify.

Por cada producto de Maya sin producto equivalente en Shopify se crea uno
nuevo. La sincronización solo crea: no actualiza precios ni descripciones
de productos existentes y no elimina productos cuyo origen desapareció.

La correspondencia entre ambos sistemas es el metafield `maya_product_id`
en alguna variante del producto de Shopify.
"""

import logging
import time
import uuid
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError

from esim_bridge.api.v1.schemas.maya_schemas import MayaProduct
from esim_bridge.api.v1.schemas.shopify_schemas import (
    MAYA_METAFIELD_NAMESPACE,
    MAYA_PRODUCT_ID_KEY,
    ShopifyProduct,
)
from esim_bridge.core.config import Settings
from esim_bridge.utils.error_handler import (
    ErrorAggregator,
    ExternalAPIException,
    SyncException,
    ValidationException,
)

logger = logging.getLogger(__name__)

SKU_PREFIX = "MAYA_ESIM_"


@dataclass
class CatalogSyncReport:
    """Resultado de una ejecución de sincronización."""

    sync_id: str
    dry_run: bool = False
    provider_products: int = 0
    store_products: int = 0
    created: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: List[Dict[str, Any]] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return not self.failed

    def to_dict(self) -> Dict[str, Any]:
        return {**asdict(self), "success": self.success}

    def summary(self) -> str:
        verb = "would create" if self.dry_run else "created"
        return (
            f"{verb} {len(self.created)}, skipped {len(self.skipped)}, "
            f"failed {len(self.failed)} of {self.provider_products} Maya products"
        )

    def raise_if_failed(self) -> None:
        """
        Lanza SyncException si alguna creación falló.

        Raises:
            SyncException: Con los registros fallidos y las estadísticas
        """
        if self.failed:
            raise SyncException(
                message=f"Product sync finished with {len(self.failed)} failures: {self.summary()}",
                operation="create_products",
                failed_records=self.failed,
                sync_stats=self.to_dict(),
            )


def store_product_matches(maya_product_id: str, store_product: ShopifyProduct) -> bool:
    """
    Indica si el producto de Shopify corresponde al producto de Maya.

    Args:
        maya_product_id: Id del producto en Maya
        store_product: Producto de Shopify

    Returns:
        bool: True si alguna variante tiene maya_product_id == maya_product_id
    """
    return str(maya_product_id) in store_product.maya_product_ids()


def find_matching_store_product(
    maya_product: MayaProduct, store_products: Iterable[ShopifyProduct]
) -> Optional[ShopifyProduct]:
    """
    Busca linealmente el producto de Shopify que corresponde al de Maya.

    Returns:
        ShopifyProduct o None si no existe
    """
    return next((p for p in store_products if store_product_matches(maya_product.id, p)), None)


def index_store_products_by_maya_id(store_products: Iterable[ShopifyProduct]) -> Dict[str, ShopifyProduct]:
    """
    Construye un índice maya_product_id → producto de Shopify.

    Si dos productos de Shopify declaran el mismo id se conserva el primero,
    igual que la búsqueda lineal.
    """
    index: Dict[str, ShopifyProduct] = {}
    for product in store_products:
        for maya_id in product.maya_product_ids():
            index.setdefault(maya_id, product)
    return index


def parse_maya_product(record: Any) -> MayaProduct:
    """
    Valida un registro crudo del catálogo de Maya.

    Raises:
        ValidationException: Si el registro no es un producto válido
    """
    raw_id = record.get("id") if isinstance(record, dict) else None
    try:
        return MayaProduct.model_validate(record)
    except ValidationError as e:
        raise ValidationException(
            f"Invalid Maya product record {raw_id!r}: {e.error_count()} errors",
            field="maya_product",
            invalid_value=raw_id,
        ) from e


def build_store_product_payload(maya_product: MayaProduct, settings: Settings) -> Dict[str, Any]:
    """
    Construye el producto de Shopify para un producto de Maya.

    El metafield va en la variante (usado por la sincronización para
    detectar el producto existente) y en el producto (leído por el tema
    para agregar la propiedad de línea `maya.maya_product_id`).

    Args:
        maya_product: Producto de Maya
        settings: Configuración (tipo de producto y vendor)

    Returns:
        Dict: Cuerpo del objeto `product` para la Admin API
    """
    metafield = {
        "namespace": MAYA_METAFIELD_NAMESPACE,
        "key": MAYA_PRODUCT_ID_KEY,
        "value": maya_product.id,
        "type": "single_line_text_field",
    }

    return {
        "title": maya_product.name,
        "body_html": maya_product.description,
        "vendor": settings.ESIM_VENDOR,
        "product_type": settings.ESIM_PRODUCT_TYPE,
        "published": True,
        "variants": [
            {
                "sku": f"{SKU_PREFIX}{maya_product.id}",
                "price": maya_product.retail_price,
                "inventory_management": None,
                "requires_shipping": False,
                "metafields": [dict(metafield)],
            }
        ],
        "metafields": [dict(metafield)],
    }


class CatalogSynchronizer:
    """
    Sincronizador de productos Maya Mobile → Shopify.

    Política ante errores: continuar con el resto de productos y reportar
    todas las fallas al final.
    """

    def __init__(self, shopify_client, maya_client, settings: Settings):
        """
        Inicializa el sincronizador.

        Args:
            shopify_client: Cliente REST de Shopify (list_esim_products, create_product)
            maya_client: Cliente de Maya Mobile (list_products)
            settings: Configuración de la aplicación
        """
        self.shopify_client = shopify_client
        self.maya_client = maya_client
        self.settings = settings

    async def sync_products(self, dry_run: bool = False) -> CatalogSyncReport:
        """
        Ejecuta la sincronización del catálogo.

        Args:
            dry_run: Solo calcula qué productos se crearían

        Returns:
            CatalogSyncReport: Resultado de la ejecución

        Raises:
            SyncException: Si no se pudieron leer los catálogos
        """
        report = CatalogSyncReport(sync_id=f"catalog_{uuid.uuid4().hex[:12]}", dry_run=dry_run)
        start_time = time.monotonic()
        logger.info(f"⏰ Starting Maya Mobile product sync ({report.sync_id}, dry_run={dry_run})")

        try:
            maya_records = await self.maya_client.list_products()
            store_products = await self.shopify_client.list_esim_products()
        except ExternalAPIException as e:
            raise SyncException(
                message=f"Could not fetch catalogs: {e.message}",
                operation="fetch_catalogs",
                sync_stats={"sync_id": report.sync_id, "upstream": e.details},
            ) from e

        report.provider_products = len(maya_records)
        report.store_products = len(store_products)
        existing = index_store_products_by_maya_id(store_products)
        errors = ErrorAggregator()

        for record in maya_records:
            try:
                maya_product = parse_maya_product(record)
            except ValidationException as e:
                logger.error(f"❌ Skipping invalid Maya product record: {e.message}")
                errors.add_error(e, {"maya_product_id": e.invalid_value})
                continue

            if maya_product.id in existing:
                logger.info(f"ℹ️ Shopify product for SKU {maya_product.id} already exists. Skipping.")
                report.skipped.append(maya_product.id)
                continue

            payload = build_store_product_payload(maya_product, self.settings)

            if dry_run:
                logger.info(f"[dry-run] Would create Shopify product for Maya SKU: {maya_product.id}")
                report.created.append(maya_product.id)
                continue

            try:
                created = await self.shopify_client.create_product(payload)
            except ExternalAPIException as e:
                logger.error(f"❌ Failed to create Shopify product for Maya SKU {maya_product.id}: {e.message} - {e.response_body}")
                errors.add_error(e, {"maya_product_id": maya_product.id})
                continue

            logger.info(f"✨ Created new Shopify product for Maya SKU: {maya_product.id}")
            report.created.append(maya_product.id)
            # Evita duplicados si el catálogo de Maya repite el id
            created_id = created.get("id") if isinstance(created, dict) else None
            existing[maya_product.id] = ShopifyProduct(id=created_id, title=maya_product.name)

        report.failed = errors.errors
        report.duration_seconds = round(time.monotonic() - start_time, 3)

        if report.success:
            logger.info(f"✅ Product sync finished successfully: {report.summary()}")
        else:
            logger.error(f"❌ Product sync finished with errors: {report.summary()}")

        return report
