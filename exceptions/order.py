"""
Order-related exceptions.
"""

from decimal import Decimal

from .base import StorefrontException, InvalidRequestException


class OrderException(StorefrontException):
    """Base exception for order-related errors."""
    pass


class OrderNotFoundException(OrderException):
    """Raised when order is not found or not owned by the caller."""

    def __init__(self, order_id: int):
        super().__init__(
            f"Order {order_id} not found",
            details={'order_id': order_id}
        )
        self.order_id = order_id


class EmptyOrderException(InvalidRequestException):
    """Raised when an order is requested without items."""

    def __init__(self):
        super().__init__("Order items are required", field="items")


class InvalidTotalAmountException(InvalidRequestException):
    """Raised when the claimed total is not positive or disagrees with the items."""

    def __init__(self, claimed: Decimal, expected: Decimal | None = None):
        if expected is None:
            message = "Valid total amount is required"
        else:
            message = f"Total amount {claimed} does not match order items total {expected}"
        super().__init__(message, field="totalAmount")
        self.details.update({'claimed': str(claimed), 'expected': str(expected) if expected is not None else None})
        self.claimed = claimed
        self.expected = expected


class PriceChangedException(InvalidRequestException):
    """Raised when a requested unit price no longer matches the product price."""

    def __init__(self, product_id: int, product_name: str, requested: Decimal, current: Decimal):
        super().__init__(
            f"Price changed for {product_name}: requested {requested}, current {current}",
            field="items.price"
        )
        self.details.update({
            'product_id': product_id,
            'requested': str(requested),
            'current': str(current),
        })
        self.product_id = product_id
        self.requested = requested
        self.current = current


class InsufficientStockException(OrderException):
    """Raised when a product has less stock than requested."""

    def __init__(self, product_id: int, product_name: str, requested: int, available: int):
        super().__init__(
            f"Insufficient stock for {product_name}: requested {requested}, available {available}",
            details={'product_id': product_id, 'requested': requested, 'available': available}
        )
        self.product_id = product_id
        self.product_name = product_name
        self.requested = requested
        self.available = available


class InvalidOrderStateException(InvalidRequestException):
    """Raised when order is in invalid state for requested operation."""

    def __init__(self, order_id: int, current_state: str, required_state: str):
        super().__init__(
            f"Order {order_id} is in state '{current_state}', required '{required_state}'"
        )
        self.details.update({
            'order_id': order_id,
            'current_state': current_state,
            'required_state': required_state,
        })
        self.order_id = order_id
        self.current_state = current_state
        self.required_state = required_state
