from decimal import Decimal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from models.order import OrderDTO


class PaymentRequestDTO(BaseModel):
    """
    Payment attempt for one order.

    Fields are optional on purpose: PaymentService reports missing or
    malformed values as InvalidRequest with a field name.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    order_id: int | None = None
    amount: Decimal | None = None
    payment_method: str | None = None


class PaymentResultDTO(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = True
    message: str
    order_id: int
    payment_id: str | None = None
    order: OrderDTO | None = None


class GatewayResultDTO(BaseModel):
    """Outcome of one charge attempt, as reported by a payment gateway adapter."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool
    payment_id: str | None = None
    message: str
