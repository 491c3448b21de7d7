"""
Modelos Pydantic para datos de la Admin REST API de Shopify.

Este módulo define los schemas de productos, pedidos y fulfillment orders
que recibe o envía la integración. Los campos que no se usan se ignoran.
"""

from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

ShopifyId = Union[int, str]

MAYA_PRODUCT_ID_KEY = "maya_product_id"
MAYA_METAFIELD_NAMESPACE = "maya"
# Propiedad de línea que el tema de la tienda agrega al carrito
MAYA_LINE_ITEM_PROPERTY = "maya.maya_product_id"


class ShopifyBaseModel(BaseModel):
    """Base común: ignora campos desconocidos del payload."""

    model_config = ConfigDict(extra="ignore")


# Product Models


class ShopifyMetafield(ShopifyBaseModel):
    """Modelo para metafield (campo personalizado)."""

    key: str
    value: Any = None
    namespace: Optional[str] = None
    type: Optional[str] = None


class ShopifyVariant(ShopifyBaseModel):
    """Modelo para variante de producto."""

    id: Optional[ShopifyId] = None
    sku: Optional[str] = None
    price: Optional[str] = None
    metafields: List[ShopifyMetafield] = Field(default_factory=list)


class ShopifyProduct(ShopifyBaseModel):
    """Modelo para producto de Shopify."""

    id: Optional[ShopifyId] = None
    title: Optional[str] = None
    product_type: Optional[str] = None
    variants: List[ShopifyVariant] = Field(default_factory=list)

    def maya_product_ids(self) -> List[str]:
        """Ids de producto Maya marcados en los metafields de las variantes."""
        return [
            str(metafield.value)
            for variant in self.variants
            for metafield in variant.metafields
            if metafield.key == MAYA_PRODUCT_ID_KEY and metafield.value is not None
        ]


# Order Models


class ShopifyLineItemProperty(ShopifyBaseModel):
    """Propiedad personalizada de una línea de pedido."""

    name: str
    value: Any = None


class ShopifyLineItem(ShopifyBaseModel):
    """Modelo para línea de pedido."""

    id: ShopifyId
    quantity: int = 1
    title: Optional[str] = None
    sku: Optional[str] = None
    properties: List[ShopifyLineItemProperty] = Field(default_factory=list)


class ShopifyCustomer(ShopifyBaseModel):
    """Cliente asociado al pedido."""

    id: Optional[ShopifyId] = None
    email: Optional[str] = None


class ShopifyAssignedLocation(ShopifyBaseModel):
    """Ubicación asignada a un fulfillment order."""

    location_id: Optional[ShopifyId] = None
    name: Optional[str] = None


class ShopifyFulfillmentOrderLineItem(ShopifyBaseModel):
    """
    Línea de un fulfillment order.

    `line_item_id` referencia la línea del pedido; cuando falta se usa `id`.
    """

    id: ShopifyId
    line_item_id: Optional[ShopifyId] = None
    quantity: Optional[int] = None

    @property
    def order_line_item_id(self) -> ShopifyId:
        return self.line_item_id if self.line_item_id is not None else self.id


class ShopifyFulfillmentOrder(ShopifyBaseModel):
    """Agrupación de líneas pendientes de cumplimiento en una ubicación."""

    id: ShopifyId
    status: Optional[str] = None
    assigned_location: Optional[ShopifyAssignedLocation] = None
    line_items: List[ShopifyFulfillmentOrderLineItem] = Field(default_factory=list)

    @property
    def location_id(self) -> Optional[ShopifyId]:
        return self.assigned_location.location_id if self.assigned_location else None


class ShopifyOrder(ShopifyBaseModel):
    """
    Pedido recibido en el webhook orders/paid.

    `fulfillment_orders` es None cuando el payload no trae la llave; en ese
    caso el servicio los consulta a la API.
    """

    id: ShopifyId
    name: Optional[str] = None
    email: Optional[str] = None
    financial_status: Optional[str] = None
    customer: Optional[ShopifyCustomer] = None
    line_items: List[ShopifyLineItem] = Field(default_factory=list)
    fulfillment_orders: Optional[List[ShopifyFulfillmentOrder]] = None

    @property
    def customer_email(self) -> Optional[str]:
        if self.email:
            return self.email
        return self.customer.email if self.customer else None

    @property
    def customer_id(self) -> Optional[ShopifyId]:
        return self.customer.id if self.customer else None
