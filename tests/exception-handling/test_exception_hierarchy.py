"""
Tests for the storefront exception hierarchy.
"""

from decimal import Decimal

from exceptions import (
    StorefrontException,
    InvalidRequestException,
    EmptyOrderException,
    InvalidTotalAmountException,
    PriceChangedException,
    InvalidPaymentMethodException,
    ProductInUseException,
    OrderException,
    InsufficientStockException,
    PaymentException,
    AmountMismatchException,
    ProductNotFoundException,
    UnauthorizedException,
)


class TestExceptionHierarchy:

    def test_everything_is_a_storefront_exception(self):
        for exc in (UnauthorizedException(), EmptyOrderException(), InsufficientStockException(1, "Mug", 2, 1),
                    AmountMismatchException(1, Decimal("1"), Decimal("2")), ProductNotFoundException(1)):
            assert isinstance(exc, StorefrontException)

    def test_invalid_request_family(self):
        for exc in (EmptyOrderException(), InvalidTotalAmountException(None),
                    PriceChangedException(1, "Mug", Decimal("1"), Decimal("2")),
                    InvalidPaymentMethodException("X"), ProductInUseException(1)):
            assert isinstance(exc, InvalidRequestException)

    def test_domain_families(self):
        assert isinstance(InsufficientStockException(1, "Mug", 2, 1), OrderException)
        assert isinstance(AmountMismatchException(1, Decimal("1"), Decimal("2")), PaymentException)


class TestExceptionDetails:

    def test_insufficient_stock_names_product(self):
        exc = InsufficientStockException(7, "Mug", 3, 1)
        assert str(exc) == "Insufficient stock for Mug: requested 3, available 1"
        assert exc.details == {'product_id': 7, 'requested': 3, 'available': 1}

    def test_field_is_reported(self):
        assert EmptyOrderException().field == "items"
        assert InvalidTotalAmountException(Decimal("0")).field == "totalAmount"
        assert InvalidPaymentMethodException("X").field == "paymentMethod"

    def test_product_not_found_single_and_many(self):
        assert str(ProductNotFoundException(3)) == "Product 3 not found"
        assert str(ProductNotFoundException([3, 4])) == "Products not found: 3, 4"

    def test_repr_includes_details(self):
        assert repr(AmountMismatchException(5, Decimal("19.99"), Decimal("20.00"))) == (
            "AmountMismatchException('Amount mismatch', order_id=5, submitted=19.99, required=20.00)"
        )
