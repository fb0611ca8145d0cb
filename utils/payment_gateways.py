"""Payment gateway adapters.

Every supported payment method is served by an adapter with the same
interface: charge(order_id, amount) -> GatewayResultDTO. A declined charge is
a normal result (success=False), never an exception; exceptions raised by an
adapter are treated as system faults by PaymentService.
"""

import asyncio
import logging
import random
import time
from abc import ABC, abstractmethod
from decimal import Decimal

import config
from enums.payment_method import PaymentMethod
from exceptions.payment import InvalidPaymentMethodException
from models.payment import GatewayResultDTO

logger = logging.getLogger(__name__)


def _epoch_millis() -> int:
    return int(time.time() * 1000)


class PaymentGateway(ABC):
    """Abstract base class for payment gateway adapters."""

    method: PaymentMethod

    @abstractmethod
    async def charge(self, order_id: int, amount: Decimal) -> GatewayResultDTO:
        """Attempt to charge amount for order_id.

        Args:
            order_id: Order being paid
            amount: Exact order total

        Returns:
            GatewayResultDTO with success flag, payment reference and message
        """
        pass


class MockGateway(PaymentGateway):
    """Simulated gateway for development and tests.

    Waits delay_seconds, then succeeds with probability success_rate.
    """

    method = PaymentMethod.MOCK

    def __init__(self,
                 delay_seconds: float | None = None,
                 success_rate: float | None = None,
                 rng: random.Random | None = None):
        self.delay_seconds = config.MOCK_PAYMENT_DELAY_SECONDS if delay_seconds is None else delay_seconds
        self.success_rate = config.MOCK_PAYMENT_SUCCESS_RATE if success_rate is None else success_rate
        self.rng = rng or random.Random()

    async def charge(self, order_id: int, amount: Decimal) -> GatewayResultDTO:
        if self.delay_seconds > 0:
            await asyncio.sleep(self.delay_seconds)
        if self.rng.random() < self.success_rate:
            logger.debug(f"[MockGateway] Charged {amount} for order {order_id}")
            return GatewayResultDTO(
                success=True,
                payment_id=f"mock_payment_{_epoch_millis()}",
                message="Mock payment successful"
            )
        logger.debug(f"[MockGateway] Declined {amount} for order {order_id}")
        return GatewayResultDTO(success=False, message="Mock payment failed")


class StripeGateway(PaymentGateway):
    """Placeholder adapter: always succeeds, no external call is made."""

    method = PaymentMethod.STRIPE

    async def charge(self, order_id: int, amount: Decimal) -> GatewayResultDTO:
        logger.warning(f"[StripeGateway] Placeholder charge of {amount} for order {order_id}")
        return GatewayResultDTO(
            success=True,
            payment_id=f"stripe_payment_{_epoch_millis()}",
            message="Stripe payment successful (placeholder)"
        )


class PayOSGateway(PaymentGateway):
    """Placeholder adapter: always succeeds, no external call is made."""

    method = PaymentMethod.PAYOS

    async def charge(self, order_id: int, amount: Decimal) -> GatewayResultDTO:
        logger.warning(f"[PayOSGateway] Placeholder charge of {amount} for order {order_id}")
        return GatewayResultDTO(
            success=True,
            payment_id=f"payos_payment_{_epoch_millis()}",
            message="PayOS payment successful (placeholder)"
        )


def default_gateways() -> dict[PaymentMethod, PaymentGateway]:
    return {
        PaymentMethod.MOCK: MockGateway(),
        PaymentMethod.STRIPE: StripeGateway(),
        PaymentMethod.PAYOS: PayOSGateway(),
    }


def get_payment_gateway(payment_method: str | None,
                        gateways: dict[PaymentMethod, PaymentGateway] | None = None) -> PaymentGateway:
    """Factory function to get the adapter for a payment method tag.

    Args:
        payment_method: Tag from the request (MOCK, STRIPE, PAYOS)
        gateways: Optional registry override (tests inject fakes here)

    Returns:
        PaymentGateway instance

    Raises:
        InvalidPaymentMethodException: If the tag is unknown or has no adapter
    """
    try:
        method = PaymentMethod.from_string(payment_method)
    except ValueError:
        raise InvalidPaymentMethodException(payment_method)
    registry = gateways if gateways is not None else default_gateways()
    gateway = registry.get(method)
    if gateway is None:
        raise InvalidPaymentMethodException(payment_method)
    logger.debug(f"Using {type(gateway).__name__} for {method.value}")
    return gateway
