"""
Manejadores de excepciones centralizados para la aplicación FastAPI.

Todas las fallas se convierten en un código HTTP y un cuerpo de texto
plano. El detalle (incluyendo el cuerpo de error de la API externa) solo
va al log.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from esim_bridge.utils.error_handler import (
    AppException,
    ErrorSeverity,
    log_error,
)

logger = logging.getLogger(__name__)


async def app_exception_handler(request: Request, exc: AppException) -> PlainTextResponse:
    """
    Manejador para excepciones personalizadas de la aplicación.

    Args:
        request: Request de FastAPI
        exc: Excepción personalizada de la app

    Returns:
        PlainTextResponse: Mensaje público y código HTTP de la excepción
    """
    if exc.is_critical:
        level = logging.CRITICAL
    elif exc.severity == ErrorSeverity.LOW:
        level = logging.WARNING
    else:
        level = logging.ERROR

    log_error(exc, {"path": str(request.url.path), "method": request.method}, level)
    return PlainTextResponse(exc.public_message, status_code=exc.status_code)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> PlainTextResponse:
    """
    Manejador para errores HTTP de enrutamiento (404, 405).
    """
    logger.warning(f"HTTP {exc.status_code} on {request.method} {request.url.path}: {exc.detail}")
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=getattr(exc, "headers", None))


async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> PlainTextResponse:
    """
    Manejador para parámetros de request inválidos.
    """
    logger.warning(f"Invalid request on {request.method} {request.url.path}: {exc.errors()}")
    return PlainTextResponse("Bad Request", status_code=400)


async def general_exception_handler(request: Request, exc: Exception) -> PlainTextResponse:
    """
    Manejador para excepciones no controladas.
    """
    log_error(exc, {"path": str(request.url.path), "method": request.method})
    return PlainTextResponse("Internal Server Error", status_code=500)


def configure_exception_handlers(app: FastAPI) -> None:
    """
    Registra todos los manejadores de excepciones.

    Args:
        app: Instancia de FastAPI
    """
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
    logger.info("✅ Manejadores de excepciones configurados")
