"""
Modelos Pydantic para datos de la API de Maya Mobile.
"""

from decimal import Decimal
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator


class MayaProduct(BaseModel):
    """Producto del catálogo de Maya Mobile."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    description: Optional[str] = None
    retail_price: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        """Normaliza el id a string (la API puede enviarlo numérico)."""
        if v is None:
            raise ValueError("id es requerido")
        return str(v)

    @field_validator("retail_price", mode="before")
    @classmethod
    def validate_price(cls, v: Union[str, int, float, Decimal, None]):
        """Convierte precios numéricos a string sin alterar su formato."""
        if v is None:
            return None
        if isinstance(v, (int, float, Decimal)):
            return str(v)
        return v


class EsimActivation(BaseModel):
    """Credenciales devueltas por Maya al activar un eSIM."""

    model_config = ConfigDict(extra="allow")

    qrcode_image_url: str
    activation_code: str
    iccid: Optional[str] = None

    @classmethod
    def from_response(cls, payload: Any) -> "EsimActivation":
        """Extrae la activación del campo anidado `data` de la respuesta."""
        data = payload.get("data") if isinstance(payload, dict) else None
        return cls.model_validate(data if data is not None else {})
