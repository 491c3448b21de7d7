"""
Sistema de manejo de errores personalizado.

Este módulo define todas las excepciones personalizadas de la aplicación
y proporciona utilidades para manejo consistente de errores.

Las fallas de APIs externas se separan según la fase del flujo de
cumplimiento: antes de activar el eSIM (seguro reintentar todo el webhook)
y después de activarlo (no reintentar, requiere cumplimiento manual).
"""

import logging
import traceback
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger(__name__)


class ErrorCode(Enum):
    """
    Códigos de error estandarizados para la aplicación.
    """

    # Errores generales
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Errores de webhooks
    INVALID_WEBHOOK_SIGNATURE = "INVALID_WEBHOOK_SIGNATURE"
    UNAUTHORIZED = "UNAUTHORIZED"

    # Errores de APIs externas
    SHOPIFY_API_ERROR = "SHOPIFY_API_ERROR"
    MAYA_API_ERROR = "MAYA_API_ERROR"
    MAYA_ACTIVATION_TIMEOUT = "MAYA_ACTIVATION_TIMEOUT"

    # Errores de datos
    FULFILLMENT_ORDER_NOT_FOUND = "FULFILLMENT_ORDER_NOT_FOUND"

    # Errores de cumplimiento y sincronización
    FULFILLMENT_AFTER_ACTIVATION_FAILED = "FULFILLMENT_AFTER_ACTIVATION_FAILED"
    SYNC_FAILED = "SYNC_FAILED"


class ErrorSeverity(Enum):
    """
    Niveles de severidad para errores.
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AppException(Exception):
    """
    Excepción base para todas las excepciones personalizadas de la aplicación.
    """

    # Texto plano devuelto al emisor del request
    public_message = "Internal Server Error"

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        is_retryable: bool = False,
        is_critical: bool = False,
    ):
        """
        Inicializa la excepción.

        Args:
            message: Mensaje de error
            error_code: Código de error estandarizado
            details: Información adicional del error
            status_code: Código HTTP asociado
            severity: Severidad del error
            is_retryable: Si la operación puede reintentarse
            is_critical: Si requiere alerta inmediata
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        self.severity = severity
        self.is_retryable = is_retryable
        self.is_critical = is_critical
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convierte la excepción a diccionario.

        Returns:
            Dict: Representación de la excepción
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code.value,
            "details": self.details,
            "status_code": self.status_code,
            "severity": self.severity.value,
            "is_retryable": self.is_retryable,
            "is_critical": self.is_critical,
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"


class WebhookAuthenticationException(AppException):
    """
    Firma de webhook ausente o inválida.

    El mensaje público es siempre el mismo para no revelar qué
    verificación falló.
    """

    public_message = "Unauthorized"

    def __init__(self, message: str = "Webhook verification failed", **kwargs):
        super().__init__(
            message=message,
            error_code=ErrorCode.INVALID_WEBHOOK_SIGNATURE,
            status_code=401,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )


class UnauthorizedException(AppException):
    """Credencial de cron ausente o inválida."""

    public_message = "Unauthorized"

    def __init__(self, message: str = "Invalid or missing cron credentials", **kwargs):
        super().__init__(
            message=message,
            error_code=ErrorCode.UNAUTHORIZED,
            status_code=401,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )


class ValidationException(AppException):
    """
    Excepción para errores de validación de datos.
    """

    public_message = "Bad Request"

    def __init__(
        self,
        message: str,
        field: str,
        invalid_value: Any = None,
        **kwargs,
    ):
        """
        Inicializa la excepción de validación.

        Args:
            message: Mensaje de error
            field: Campo que falló la validación
            invalid_value: Valor que causó el error
            **kwargs: Argumentos adicionales para AppException
        """
        super().__init__(
            message=message,
            error_code=ErrorCode.VALIDATION_ERROR,
            status_code=400,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )
        self.field = field
        self.invalid_value = invalid_value
        self.details.update(
            {
                "field": field,
                "invalid_value": str(invalid_value) if invalid_value is not None else None,
            }
        )


class DataInconsistencyException(AppException):
    """
    El pedido trae una línea eSIM pero ningún fulfillment order la referencia.

    No se intenta la activación: no habría forma de entregar el eSIM.
    """

    public_message = "Error processing order."

    def __init__(self, message: str, order_id: Any = None, line_item_id: Any = None, **kwargs):
        super().__init__(
            message=message,
            error_code=ErrorCode.FULFILLMENT_ORDER_NOT_FOUND,
            status_code=500,
            severity=ErrorSeverity.HIGH,
            is_retryable=True,
            **kwargs,
        )
        self.order_id = order_id
        self.line_item_id = line_item_id
        self.details.update({"order_id": order_id, "line_item_id": line_item_id})


class ExternalAPIException(AppException):
    """
    Base para fallas de APIs externas (respuesta no-2xx o error de red).
    """

    public_message = "Error processing order."
    service = "external"

    def __init__(
        self,
        message: str,
        api_response_code: Optional[int] = None,
        endpoint: Optional[str] = None,
        response_body: Any = None,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        is_retryable: bool = True,
        **kwargs,
    ):
        """
        Inicializa la excepción de API externa.

        Args:
            message: Mensaje de error
            api_response_code: Código HTTP devuelto por la API externa
            endpoint: Endpoint que falló
            response_body: Cuerpo de error devuelto por la API, si existe
            error_code: Código de error estandarizado
            is_retryable: Si es seguro repetir la operación
            **kwargs: Argumentos adicionales para AppException
        """
        severity = ErrorSeverity.MEDIUM
        if api_response_code is None or api_response_code >= 500:
            severity = ErrorSeverity.HIGH

        super().__init__(
            message=message,
            error_code=error_code,
            status_code=500,
            severity=severity,
            is_retryable=is_retryable,
            **kwargs,
        )
        self.api_response_code = api_response_code
        self.endpoint = endpoint
        self.response_body = response_body
        self.details.update(
            {
                "service": self.service,
                "api_response_code": api_response_code,
                "endpoint": endpoint,
                "response_body": response_body,
            }
        )


class ShopifyAPIException(ExternalAPIException):
    """
    Excepción para errores de la API de Shopify.
    """

    service = "shopify"

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("error_code", ErrorCode.SHOPIFY_API_ERROR)
        super().__init__(message, **kwargs)


class MayaAPIException(ExternalAPIException):
    """
    Excepción para errores de la API de Maya Mobile.

    Con timed_out=True el resultado de la activación es desconocido:
    no se debe reintentar porque podría aprovisionar dos veces.
    """

    service = "maya"

    def __init__(self, message: str, timed_out: bool = False, **kwargs):
        if timed_out:
            kwargs.setdefault("error_code", ErrorCode.MAYA_ACTIVATION_TIMEOUT)
            kwargs["is_retryable"] = False
        kwargs.setdefault("error_code", ErrorCode.MAYA_API_ERROR)
        super().__init__(message, **kwargs)
        self.timed_out = timed_out
        self.details["timed_out"] = timed_out


class FulfillmentAfterActivationException(AppException):
    """
    El eSIM quedó aprovisionado en Maya pero el cumplimiento en Shopify falló.

    Estado inconsistente que requiere cumplimiento manual.
    """

    public_message = "eSIM provisioned but order fulfillment failed. Manual fulfillment required."

    def __init__(
        self,
        message: str,
        order_id: Any,
        fulfillment_order_id: Any,
        activation: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        **kwargs,
    ):
        super().__init__(
            message=message,
            error_code=ErrorCode.FULFILLMENT_AFTER_ACTIVATION_FAILED,
            status_code=500,
            severity=ErrorSeverity.CRITICAL,
            is_retryable=False,
            is_critical=True,
            **kwargs,
        )
        self.order_id = order_id
        self.fulfillment_order_id = fulfillment_order_id
        self.activation = activation or {}
        self.details.update(
            {
                "order_id": order_id,
                "fulfillment_order_id": fulfillment_order_id,
                "activation": self.activation,
                "cause": str(cause) if cause else None,
            }
        )
        if isinstance(cause, AppException):
            self.details["upstream"] = cause.details


class SyncException(AppException):
    """
    Excepción para errores de sincronización del catálogo.
    """

    public_message = "Product sync failed."

    def __init__(
        self,
        message: str,
        operation: str,
        failed_records: Optional[List[Dict]] = None,
        sync_stats: Optional[Dict[str, Any]] = None,
        **kwargs,
    ):
        """
        Inicializa la excepción de sincronización.

        Args:
            message: Mensaje de error
            operation: Operación que falló
            failed_records: Registros que fallaron
            sync_stats: Estadísticas de la sincronización
            **kwargs: Argumentos adicionales para AppException
        """
        super().__init__(
            message=message,
            error_code=ErrorCode.SYNC_FAILED,
            status_code=500,
            severity=ErrorSeverity.HIGH,
            is_retryable=True,
            **kwargs,
        )
        self.operation = operation
        self.failed_records = failed_records or []
        self.sync_stats = sync_stats or {}
        self.details.update(
            {
                "operation": operation,
                "failed_count": len(self.failed_records),
                "failed_records": self.failed_records,
                "sync_stats": self.sync_stats,
            }
        )


# === FUNCIONES DE UTILIDAD ===


def log_error(
    exception: Exception,
    context: Optional[Dict[str, Any]] = None,
    level: int = logging.ERROR,
) -> None:
    """
    Loggea un error de manera consistente.

    Args:
        exception: Excepción a loggear
        context: Contexto adicional
        level: Nivel de logging
    """
    context = context or {}

    log_data = {
        "exception_type": type(exception).__name__,
        "exception_message": str(exception),
        **context,
    }

    if isinstance(exception, AppException):
        message = f"{exception.error_code.value}: {exception.message}"
        log_data.update(
            {
                "error_code": exception.error_code.value,
                "severity": exception.severity.value,
                "is_retryable": exception.is_retryable,
                "is_critical": exception.is_critical,
                "error_details": exception.details,
            }
        )
    else:
        message = f"Unhandled exception: {type(exception).__name__}: {str(exception)}"
        log_data["traceback"] = "".join(
            traceback.format_exception(type(exception), exception, exception.__traceback__)
        )

    logger.log(level, message, extra=log_data)


class ErrorAggregator:
    """
    Agregador de errores para procesos batch.
    """

    def __init__(self):
        """Inicializa el agregador."""
        self.errors: List[Dict[str, Any]] = []

    def add_error(self, exception: Union[AppException, Exception], context: Optional[Dict] = None):
        """
        Agrega un error al agregador.

        Args:
            exception: Excepción a agregar
            context: Contexto adicional (ej: id del producto)
        """
        record = {
            "error_type": type(exception).__name__,
            "message": exception.message if isinstance(exception, AppException) else str(exception),
            **(context or {}),
        }
        if isinstance(exception, AppException):
            record["error_code"] = exception.error_code.value
        self.errors.append(record)

        if isinstance(exception, AppException) and exception.is_critical:
            log_error(exception, context, logging.CRITICAL)
