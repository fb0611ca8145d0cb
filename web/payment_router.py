import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from exceptions.base import StorefrontException
from exceptions.payment import PaymentDeclinedException
from models.payment import PaymentRequestDTO
from services.payment import PaymentService
from utils.error_handler import generate_correlation_id
from web.dependencies import get_current_user_id, get_session

logger = logging.getLogger(__name__)

payment_router = APIRouter(prefix="/api/payment", tags=["payment"])


@payment_router.post("")
async def process_payment(payload: PaymentRequestDTO,
                          user_id: str = Depends(get_current_user_id),
                          session: AsyncSession = Depends(get_session)):
    """
    Pay a PENDING order in full.

    Request Body:
        {"orderId": 42, "amount": 20.00, "paymentMethod": "MOCK"}

    Returns:
        200: {"success": true, "message", "orderId", "paymentId", "order"}
        400: Validation failure, already paid, amount mismatch, unknown method,
             or gateway decline ({"success": false, "error", "orderId"})
        401: No valid bearer token
        404: Order not found
        500: {"success": false, "error": "Payment processing failed"}
    """
    correlation_id = generate_correlation_id()
    logger.info(f"[{correlation_id}] Processing payment for order {payload.order_id} via {payload.payment_method}")
    try:
        result = await PaymentService.process_payment(user_id, payload, session)
        logger.info(f"[{correlation_id}] Order {result.order_id} paid, payment id {result.payment_id}")
        return JSONResponse(content=result.model_dump(mode="json", by_alias=True))

    except PaymentDeclinedException as e:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "error": e.gateway_message, "orderId": e.order_id}
        )

    except StorefrontException:
        raise

    except Exception:
        logger.error(f"[{correlation_id}] Unexpected error", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "error": "Payment processing failed"}
        )
