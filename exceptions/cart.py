"""
Cart-related exceptions.
"""

from .base import InvalidRequestException


class EmptyCartException(InvalidRequestException):
    """Raised when trying to checkout with empty cart."""

    def __init__(self, cart_key: str):
        super().__init__(f"Cart is empty for {cart_key}", field="items")
        self.details['cart_key'] = cart_key
        self.cart_key = cart_key


class InvalidCartItemsException(InvalidRequestException):
    """Raised when cart lines cannot form an order (e.g. zero quantity)."""

    def __init__(self, cart_key: str, product_ids: list[int]):
        super().__init__(f"Cart {cart_key} has items that cannot be ordered: {product_ids}", field="items")
        self.details['cart_key'] = cart_key
        self.details['product_ids'] = product_ids
        self.cart_key = cart_key
        self.product_ids = product_ids
