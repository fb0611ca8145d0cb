from enum import Enum


class PaymentMethod(str, Enum):
    MOCK = "MOCK"
    STRIPE = "STRIPE"
    PAYOS = "PAYOS"

    @classmethod
    def from_string(cls, value: str | None) -> 'PaymentMethod':
        """
        Convert a request tag to PaymentMethod.

        Matching is exact: tags are upper-case identifiers on the wire.

        Raises:
            ValueError: If value is not a known payment method
        """
        if not value:
            raise ValueError("Payment method cannot be empty")
        try:
            return cls(value)
        except ValueError:
            valid_methods = [m.value for m in cls]
            raise ValueError(
                f"Invalid payment method '{value}'. Valid methods: {', '.join(valid_methods)}"
            )
