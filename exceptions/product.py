"""
Product-related exceptions.
"""

from .base import StorefrontException, InvalidRequestException


class ProductException(StorefrontException):
    """Base exception for product-related errors."""
    pass


class ProductNotFoundException(ProductException):
    """Raised when one or more products are not found in database."""

    def __init__(self, product_ids: list[int] | int):
        if isinstance(product_ids, int):
            product_ids = [product_ids]
        if len(product_ids) == 1:
            message = f"Product {product_ids[0]} not found"
        else:
            message = f"Products not found: {', '.join(str(pid) for pid in product_ids)}"
        super().__init__(message, details={'product_ids': product_ids})
        self.product_ids = product_ids


class ProductOwnershipException(ProductException):
    """Raised when user attempts to modify a product they don't own."""

    def __init__(self, product_id: int, user_id: str, action: str = "update"):
        super().__init__(
            f"Not authorized to {action} this product",
            details={'product_id': product_id, 'user_id': user_id}
        )
        self.product_id = product_id
        self.user_id = user_id
        self.action = action


class ProductInUseException(InvalidRequestException):
    """Raised when deleting a product that order items still reference."""

    def __init__(self, product_id: int):
        super().__init__(f"Product {product_id} is referenced by existing orders and cannot be deleted")
        self.details['product_id'] = product_id
        self.product_id = product_id
