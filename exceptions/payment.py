"""
Payment-related exceptions.
"""

from decimal import Decimal

from .base import StorefrontException, InvalidRequestException


class PaymentException(StorefrontException):
    """Base exception for payment-related errors."""
    pass


class OrderAlreadyPaidException(PaymentException):
    """Raised when trying to pay an order that is already PAID."""

    def __init__(self, order_id: int):
        super().__init__(
            "Order is already paid",
            details={'order_id': order_id}
        )
        self.order_id = order_id


class AmountMismatchException(PaymentException):
    """Raised when the submitted amount differs from the order total."""

    def __init__(self, order_id: int, submitted: Decimal, required: Decimal):
        super().__init__(
            "Amount mismatch",
            details={'order_id': order_id, 'submitted': str(submitted), 'required': str(required)}
        )
        self.order_id = order_id
        self.submitted = submitted
        self.required = required


class InvalidPaymentMethodException(InvalidRequestException):
    """Raised when the payment method tag is not registered."""

    def __init__(self, payment_method: str | None):
        super().__init__("Invalid payment method", field="paymentMethod")
        self.details['payment_method'] = payment_method
        self.payment_method = payment_method


class PaymentDeclinedException(PaymentException):
    """Raised when the gateway rejected the charge. Not a system fault."""

    def __init__(self, order_id: int, gateway_message: str):
        super().__init__(
            gateway_message,
            details={'order_id': order_id}
        )
        self.order_id = order_id
        self.gateway_message = gateway_message
