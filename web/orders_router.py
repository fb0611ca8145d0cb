from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from models.order import CreateOrderRequestDTO, OrderDTO
from services.order import OrderService
from web.dependencies import get_current_user_id, get_session

orders_router = APIRouter(prefix="/api/orders", tags=["orders"])


@orders_router.post("", response_model=OrderDTO, response_model_by_alias=True,
                    status_code=status.HTTP_201_CREATED)
async def create_order(payload: CreateOrderRequestDTO,
                       user_id: str = Depends(get_current_user_id),
                       session: AsyncSession = Depends(get_session)):
    """
    Create a PENDING order from cart items and reserve their stock.

    Request Body:
        {
            "items": [{"productId": 1, "quantity": 2, "price": 10.00}],
            "totalAmount": 20.00
        }

    Returns:
        201: Created order with items and product summaries
        400: Missing items or total, price changed, insufficient stock
        401: No valid bearer token
        404: A referenced product does not exist
    """
    return await OrderService.create_order(user_id, payload, session)


@orders_router.get("", response_model=list[OrderDTO], response_model_by_alias=True)
async def list_orders(user_id: str = Depends(get_current_user_id),
                      session: AsyncSession = Depends(get_session)):
    return await OrderService.list_orders(user_id, session)


@orders_router.get("/{order_id}", response_model=OrderDTO, response_model_by_alias=True)
async def get_order(order_id: int,
                    user_id: str = Depends(get_current_user_id),
                    session: AsyncSession = Depends(get_session)):
    return await OrderService.get_order(user_id, order_id, session)
