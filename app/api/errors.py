# app/api/errors.py
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.domain.errors import (
    CartItemNotFound,
    CartNotFound,
    CartServiceError,
    ConcurrencyConflict,
    EmptyCart,
    InsufficientStock,
    InvalidQuantity,
    OrderNotCancellable,
    OrderNotFound,
    ProductInUse,
    ProductNotFound,
    StockUnderflow,
    StorageFailure,
)
from app.utils.logging import get_logger

logger = get_logger(__name__)

STATUS_BY_ERROR = {
    ProductNotFound: 404,
    CartNotFound: 404,
    CartItemNotFound: 404,
    OrderNotFound: 404,
    InvalidQuantity: 400,
    EmptyCart: 400,
    InsufficientStock: 409,
    StockUnderflow: 409,
    ProductInUse: 409,
    OrderNotCancellable: 409,
    ConcurrencyConflict: 409,
    StorageFailure: 503,
}


def status_for(exc: CartServiceError) -> int:
    return STATUS_BY_ERROR.get(type(exc), 400)


async def cart_service_error_handler(request: Request, exc: CartServiceError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} -> {exc.code}: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.code}")

    headers = {"Retry-After": "1"} if exc.retryable else None
    return JSONResponse(status_code=status_code, content=exc.to_dict(), headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CartServiceError, cart_service_error_handler)
