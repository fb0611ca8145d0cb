import logging

from sqlalchemy.ext.asyncio import AsyncSession

from enums.order_status import OrderStatus
from enums.payment_method import PaymentMethod
from exceptions.base import UnauthorizedException, InvalidRequestException
from exceptions.order import OrderNotFoundException, InvalidOrderStateException
from exceptions.payment import OrderAlreadyPaidException, AmountMismatchException, PaymentDeclinedException
from models.payment import PaymentRequestDTO, PaymentResultDTO
from repositories.order import OrderRepository
from utils.order_state_machine import OrderStateMachine
from utils.payment_gateways import PaymentGateway, get_payment_gateway
from utils.transaction_manager import TransactionManager

logger = logging.getLogger(__name__)


class PaymentService:

    @staticmethod
    async def process_payment(user_id: str | None,
                              request: PaymentRequestDTO,
                              session: AsyncSession,
                              gateways: dict[PaymentMethod, PaymentGateway] | None = None) -> PaymentResultDTO:
        """
        Pay a PENDING order in full through the selected gateway.

        The order row stays locked from the guard checks until the status
        update, so two concurrent payments for the same order end in exactly
        one PAID transition and one OrderAlreadyPaidException. A declined
        charge changes nothing.

        Raises:
            UnauthorizedException: No caller identity
            InvalidRequestException: Missing order id or non-positive amount
            OrderNotFoundException: Order missing or owned by someone else
            OrderAlreadyPaidException: Order is PAID (or was paid concurrently)
            AmountMismatchException: Amount differs from the order total
            InvalidOrderStateException: Order is SHIPPED, DELIVERED or CANCELLED
            InvalidPaymentMethodException: Unknown payment method tag
            PaymentDeclinedException: Gateway declined the charge
        """
        if not user_id:
            raise UnauthorizedException()
        if request.order_id is None or request.amount is None or request.amount <= 0:
            raise InvalidRequestException(
                "Valid order ID and amount are required",
                field="orderId" if request.order_id is None else "amount"
            )

        async with TransactionManager.atomic(session, "process_payment"):
            order = await OrderRepository.get_for_update(request.order_id, user_id, session)
            if order is None:
                raise OrderNotFoundException(request.order_id)
            if order.status == OrderStatus.PAID:
                raise OrderAlreadyPaidException(order.id)
            if request.amount != order.total_amount:
                logger.warning(
                    f"[Payment] Amount mismatch for order {order.id}: "
                    f"submitted {request.amount}, required {order.total_amount}"
                )
                raise AmountMismatchException(order.id, request.amount, order.total_amount)
            if not OrderStateMachine.is_valid_transition(order.status, OrderStatus.PAID):
                raise InvalidOrderStateException(order.id, order.status.value, OrderStatus.PENDING.value)

            gateway = get_payment_gateway(request.payment_method, gateways)
            logger.info(f"[Payment] Charging {order.total_amount} for order {order.id} via {gateway.method.value}")
            result = await gateway.charge(order.id, order.total_amount)
            if not result.success:
                logger.warning(f"[Payment] Gateway declined order {order.id}: {result.message}")
                raise PaymentDeclinedException(order.id, result.message)

            if not await OrderRepository.mark_paid_if_pending(order.id, session):
                raise OrderAlreadyPaidException(order.id)
            OrderStateMachine.log_transition(order.id, order.status, OrderStatus.PAID)
            paid_order = await OrderRepository.get_with_items(order.id, session)

        return PaymentResultDTO(
            message="Payment processed successfully",
            order_id=order.id,
            payment_id=result.payment_id,
            order=paid_order
        )
