"""
Verificación de firmas HMAC de webhooks de Shopify.

La firma se calcula sobre los bytes crudos del cuerpo, antes de cualquier
parseo JSON: re-serializar el objeto cambia orden de llaves y espacios.
"""

import base64
import hashlib
import hmac
import logging
from typing import Optional, Union

logger = logging.getLogger(__name__)

HMAC_HEADER = "X-Shopify-Hmac-Sha256"


def compute_webhook_digest(secret: Union[str, bytes], raw_body: bytes) -> str:
    """
    Calcula el HMAC-SHA256 del cuerpo en base64.

    Args:
        secret: Secreto compartido del webhook
        raw_body: Bytes exactos recibidos

    Returns:
        str: Digest en base64
    """
    key = secret.encode("utf-8") if isinstance(secret, str) else secret
    digest = hmac.new(key, raw_body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_webhook_signature(
    secret: Optional[Union[str, bytes]],
    raw_body: Optional[bytes],
    signature: Optional[str],
) -> bool:
    """
    Verifica la firma HMAC del webhook.

    Cualquier falla (firma ausente, cuerpo ausente, secreto ausente o
    diferencia) retorna False sin distinguir el motivo.

    Args:
        secret: Secreto compartido configurado
        raw_body: Payload del webhook en bytes
        signature: Valor del header X-Shopify-Hmac-Sha256

    Returns:
        bool: True si la firma es válida
    """
    if not secret or not raw_body or not signature:
        return False

    expected_signature = compute_webhook_digest(secret, raw_body)

    # Comparación segura contra timing attacks
    return hmac.compare_digest(expected_signature.encode("ascii"), signature.encode("utf-8"))
