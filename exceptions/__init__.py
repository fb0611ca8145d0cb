"""
Custom exceptions for the storefront backend.

Exception Hierarchy:
--------------------
StorefrontException (base)
├── UnauthorizedException
├── InvalidRequestException
│   ├── EmptyOrderException
│   ├── InvalidTotalAmountException
│   ├── PriceChangedException
│   ├── InvalidOrderStateException
│   ├── InvalidPaymentMethodException
│   ├── ProductInUseException
│   ├── EmptyCartException
│   └── InvalidCartItemsException
├── OrderException
│   ├── OrderNotFoundException
│   └── InsufficientStockException
├── PaymentException
│   ├── OrderAlreadyPaidException
│   ├── AmountMismatchException
│   └── PaymentDeclinedException
└── ProductException
    ├── ProductNotFoundException
    └── ProductOwnershipException

Usage:
------
Services raise specific exceptions:
    raise OrderNotFoundException(order_id=123)

Routers let them propagate; utils.error_handler maps them to HTTP responses.
"""

from .base import StorefrontException, UnauthorizedException, InvalidRequestException
from .cart import EmptyCartException, InvalidCartItemsException
from .order import (
    OrderException,
    OrderNotFoundException,
    EmptyOrderException,
    InvalidTotalAmountException,
    PriceChangedException,
    InsufficientStockException,
    InvalidOrderStateException
)
from .payment import (
    PaymentException,
    OrderAlreadyPaidException,
    AmountMismatchException,
    InvalidPaymentMethodException,
    PaymentDeclinedException
)
from .product import ProductException, ProductNotFoundException, ProductOwnershipException, ProductInUseException

__all__ = [
    # Base
    'StorefrontException',
    'UnauthorizedException',
    'InvalidRequestException',

    # Cart
    'EmptyCartException',
    'InvalidCartItemsException',

    # Order
    'OrderException',
    'OrderNotFoundException',
    'EmptyOrderException',
    'InvalidTotalAmountException',
    'PriceChangedException',
    'InsufficientStockException',
    'InvalidOrderStateException',

    # Payment
    'PaymentException',
    'OrderAlreadyPaidException',
    'AmountMismatchException',
    'InvalidPaymentMethodException',
    'PaymentDeclinedException',

    # Product
    'ProductException',
    'ProductNotFoundException',
    'ProductOwnershipException',
    'ProductInUseException',
]
