"""
Error Handler Utility for HTTP routes

Provides centralized error handling with:
- Automatic exception to HTTP status mapping
- Consistent {"error": message} response bodies
- Opaque bodies for internal faults, traced by a correlation id in the logs

Usage:
    from utils.error_handler import register_exception_handlers

    app = FastAPI()
    register_exception_handlers(app)

Routers let service exceptions propagate; the handlers registered here turn
them into responses.
"""

import logging
import uuid
from datetime import datetime

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from exceptions import (
    StorefrontException,
    UnauthorizedException,
    InvalidRequestException,
    OrderNotFoundException,
    InsufficientStockException,
    OrderAlreadyPaidException,
    AmountMismatchException,
    PaymentDeclinedException,
    ProductNotFoundException,
    ProductOwnershipException,
)

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"

# Most specific classes first: lookup walks the exception's MRO
STATUS_MAPPING: dict[type[StorefrontException], int] = {
    UnauthorizedException: status.HTTP_401_UNAUTHORIZED,
    ProductOwnershipException: status.HTTP_403_FORBIDDEN,
    OrderNotFoundException: status.HTTP_404_NOT_FOUND,
    ProductNotFoundException: status.HTTP_404_NOT_FOUND,
    InsufficientStockException: status.HTTP_400_BAD_REQUEST,
    OrderAlreadyPaidException: status.HTTP_400_BAD_REQUEST,
    AmountMismatchException: status.HTTP_400_BAD_REQUEST,
    PaymentDeclinedException: status.HTTP_400_BAD_REQUEST,
    InvalidRequestException: status.HTTP_400_BAD_REQUEST,
}


def generate_correlation_id() -> str:
    """Generate unique correlation ID for request tracing."""
    return f"{datetime.now().strftime('%Y%m%d-%H%M%S')}-{uuid.uuid4().hex[:8]}"


def get_status_code(exception: Exception) -> int:
    """
    Resolve the HTTP status for an exception.

    Subclasses without their own entry inherit the status of the nearest
    mapped base class; anything unmapped is an internal fault (500).
    """
    for cls in type(exception).__mro__:
        if cls in STATUS_MAPPING:
            return STATUS_MAPPING[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def handle_service_error(exception: Exception) -> tuple[int, dict]:
    """
    Convert an exception to an HTTP status code and JSON body.

    Example:
        >>> handle_service_error(OrderNotFoundException(7))
        (404, {'error': 'Order 7 not found'})
    """
    status_code = get_status_code(exception)
    if status_code == status.HTTP_500_INTERNAL_SERVER_ERROR:
        correlation_id = generate_correlation_id()
        logger.error(
            f"[{correlation_id}] Unhandled {type(exception).__name__}: {exception}",
            exc_info=exception
        )
        return status_code, {"error": INTERNAL_ERROR_MESSAGE, "correlationId": correlation_id}

    if status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN):
        logger.warning(f"Service error handled: {type(exception).__name__} - {exception!r}")
    else:
        logger.info(f"Service error handled: {type(exception).__name__} - {exception}")
    return status_code, {"error": str(exception)}


def format_validation_error(exception: RequestValidationError) -> str:
    """Name the first failing field of a request validation error."""
    errors = exception.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    # loc is ("body" | "query" | "path", field, ...)
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    message = first.get("msg", "Invalid value")
    return f"Invalid {field}: {message}" if field else message


async def storefront_exception_handler(request: Request, exc: StorefrontException) -> JSONResponse:
    status_code, body = handle_service_error(exc)
    return JSONResponse(status_code=status_code, content=body)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = format_validation_error(exc)
    logger.info(f"Request validation failed on {request.method} {request.url.path}: {message}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    status_code, body = handle_service_error(exc)
    return JSONResponse(status_code=status_code, content=body)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StorefrontException, storefront_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
