# dawazon/api/errors.py
import requests
from fastapi import Request
from fastapi.responses import JSONResponse

from dawazon.domain.errors import (
    CartError,
    ConcurrencyConflict,
    Forbidden,
    InsufficientStock,
    InvalidArgument,
    InvalidState,
    InvalidTransition,
    NotFound,
)
from dawazon.utils.logging import get_logger

logger = get_logger(__name__)

STATUS_CODES = {
    InvalidArgument: 400,
    Forbidden: 403,
    NotFound: 404,
    InvalidState: 409,
    InvalidTransition: 409,
    InsufficientStock: 409,
    ConcurrencyConflict: 409,
}


def status_code_for(exc: CartError) -> int:
    for cls in type(exc).__mro__:
        if cls in STATUS_CODES:
            return STATUS_CODES[cls]
    return 400


async def cart_error_handler(request: Request, exc: CartError) -> JSONResponse:
    status_code = status_code_for(exc)
    logger.info("Request rejected", path=request.url.path, error=type(exc).__name__, status_code=status_code)
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "error": type(exc).__name__},
    )


async def catalog_unavailable_handler(request: Request, exc: requests.RequestException) -> JSONResponse:
    logger.error("Product catalog unavailable", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=503,
        content={"detail": "Product catalog unavailable", "error": "CatalogUnavailable"},
    )
