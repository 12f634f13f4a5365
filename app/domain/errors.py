# app/domain/errors.py
"""
Taksonomia bledow wspolna dla katalogu, koszyka i checkoutu.

Kazdy blad niesie message, code i details() - API renderuje je bez
ponownego liczenia czegokolwiek.
"""
from typing import Any, Dict


class CartServiceError(Exception):
    """Base exception for cart and catalog operations."""

    retryable = False

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)

    def details(self) -> Dict[str, Any]:
        return {}

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, "code": self.code, **self.details()}


class ProductNotFound(CartServiceError):
    def __init__(self, product_id: int):
        super().__init__(
            message=f"Product '{product_id}' not found",
            code="PRODUCT_NOT_FOUND",
        )
        self.product_id = product_id

    def details(self):
        return {"product_id": self.product_id}


class CartNotFound(CartServiceError):
    def __init__(self, customer_id: int):
        super().__init__(
            message=f"Customer '{customer_id}' has no cart",
            code="CART_NOT_FOUND",
        )
        self.customer_id = customer_id

    def details(self):
        return {"customer_id": self.customer_id}


class CartItemNotFound(CartServiceError):
    def __init__(self, customer_id: int, product_id: int):
        super().__init__(
            message=f"Product '{product_id}' is not in the cart of customer '{customer_id}'",
            code="CART_ITEM_NOT_FOUND",
        )
        self.customer_id = customer_id
        self.product_id = product_id

    def details(self):
        return {"customer_id": self.customer_id, "product_id": self.product_id}


class InsufficientStock(CartServiceError):
    """Requested quantity exceeds what the catalog currently holds."""

    def __init__(self, product_id: int, requested: int, available: int):
        super().__init__(
            message=(
                f"Insufficient stock for product '{product_id}': "
                f"requested {requested}, available {available}"
            ),
            code="INSUFFICIENT_STOCK",
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available

    def details(self):
        return {
            "product_id": self.product_id,
            "requested": self.requested,
            "available": self.available,
        }


class InvalidQuantity(CartServiceError):
    def __init__(self, quantity: Any, reason: str = "quantity must be a positive integer"):
        super().__init__(
            message=f"Invalid quantity {quantity!r}: {reason}",
            code="INVALID_QUANTITY",
        )
        self.quantity = quantity

    def details(self):
        # quantity moze byc czymkolwiek (np. "abc"), do JSONa tylko repr
        value = self.quantity if isinstance(self.quantity, int) else repr(self.quantity)
        return {"quantity": value}


class StockUnderflow(CartServiceError):
    """adjust_stock would drive stock_quantity below zero."""

    def __init__(self, product_id: int, available: int, delta: int):
        super().__init__(
            message=(
                f"Stock of product '{product_id}' cannot change by {delta}: "
                f"only {available} available"
            ),
            code="STOCK_UNDERFLOW",
        )
        self.product_id = product_id
        self.available = available
        self.delta = delta

    def details(self):
        return {
            "product_id": self.product_id,
            "available": self.available,
            "delta": self.delta,
        }


class EmptyCart(CartServiceError):
    def __init__(self, customer_id: int):
        super().__init__(
            message=f"Cart of customer '{customer_id}' is empty",
            code="EMPTY_CART",
        )
        self.customer_id = customer_id

    def details(self):
        return {"customer_id": self.customer_id}


class ProductInUse(CartServiceError):
    def __init__(self, product_id: int):
        super().__init__(
            message=f"Product '{product_id}' is referenced by a cart or a placed order",
            code="PRODUCT_IN_USE",
        )
        self.product_id = product_id

    def details(self):
        return {"product_id": self.product_id}


class OrderNotFound(CartServiceError):
    def __init__(self, order_id: int):
        super().__init__(
            message=f"Order '{order_id}' not found",
            code="ORDER_NOT_FOUND",
        )
        self.order_id = order_id

    def details(self):
        return {"order_id": self.order_id}


class OrderNotCancellable(CartServiceError):
    def __init__(self, order_id: int, status: str):
        super().__init__(
            message=f"Order '{order_id}' in status {status} cannot be cancelled",
            code="ORDER_NOT_CANCELLABLE",
        )
        self.order_id = order_id
        self.status = status

    def details(self):
        return {"order_id": self.order_id, "status": self.status}


class ConcurrencyConflict(CartServiceError):
    """Another call mutated the same cart first. Retried internally before surfacing."""

    retryable = True

    def __init__(self, customer_id: int, reason: str = "cart was modified concurrently"):
        super().__init__(
            message=f"Concurrency conflict on cart of customer '{customer_id}': {reason}",
            code="CONCURRENCY_CONFLICT",
        )
        self.customer_id = customer_id
        self.reason = reason

    def details(self):
        return {"customer_id": self.customer_id, "reason": self.reason}


class StorageFailure(CartServiceError):
    """Database or lock backend failed. Not retried by the service."""

    retryable = True

    def __init__(self, operation: str, cause: Exception | None = None):
        super().__init__(
            message=f"Storage failure during {operation}",
            code="STORAGE_FAILURE",
        )
        self.operation = operation
        self.cause = cause

    def details(self):
        return {"operation": self.operation}
