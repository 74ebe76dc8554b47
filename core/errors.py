"""
Business-level errors raised by the cart, checkout and order lifecycle
services. Each service entry point converts them into an ``ActionResult``
envelope instead of letting them escape to the caller.
"""
from typing import List, Optional

from fastapi import status


class ServiceError(Exception):
    """Base class for all service failures."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[dict]] = None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


# Authorization

class Unauthenticated(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"


class NotAuthorized(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not authorized"


class InvalidTransition(ServiceError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Cannot change order status from {current} to {target}")


# Validation

class ValidationFailed(ServiceError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Validation failed"

    def __init__(self, errors: List[dict]):
        super().__init__(self.default_message, errors=errors)


class PaymentMethodUnavailable(ServiceError):
    default_message = "Card payment is not yet available"


# Lookups

class TenantNotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Store not found"


class ProductNotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Product not found"


class CartLineNotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Cart item not found"


class OrderNotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Order not found"


# Checkout preconditions

class EmptyCart(ServiceError):
    default_message = "Cart is empty"


class ProductUnavailable(ServiceError):
    def __init__(self, product_name: Optional[str] = None):
        self.product_name = product_name or "unknown"
        super().__init__(f"Product {self.product_name} is no longer available")


class InsufficientStock(ServiceError):
    def __init__(self, product_name: str, available: int):
        self.product_name = product_name
        self.available = available
        super().__init__(f"Insufficient stock for {product_name}. Available: {available}")


class BelowMinimumOrder(ServiceError):
    def __init__(self, minimum_order, currency: str):
        self.minimum_order = minimum_order
        super().__init__(f"Minimum order amount is {minimum_order} {currency}")


# Storage failures

class StorageFailure(ServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class OrderCreateFailed(StorageFailure):
    default_message = "Failed to create order"


class OrderItemsFailed(StorageFailure):
    default_message = "Failed to add order items"


class OrderUpdateFailed(StorageFailure):
    default_message = "Failed to update order status"


class CartWriteFailed(StorageFailure):
    default_message = "Failed to update cart"
