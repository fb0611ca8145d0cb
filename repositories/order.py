from datetime import datetime
from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from db import session_execute, session_flush
from enums.order_status import OrderStatus
from models.order import Order, OrderDTO
from models.orderItem import OrderItem


class OrderRepository:

    @staticmethod
    async def create(user_id: str, total_amount: Decimal, session: AsyncSession) -> int:
        order = Order(user_id=user_id, total_amount=total_amount, status=OrderStatus.PENDING)
        session.add(order)
        await session_flush(session)
        return order.id

    @staticmethod
    async def get_with_items(order_id: int, session: AsyncSession, user_id: str | None = None) -> OrderDTO | None:
        """
        Load an order with its items and each item's product summary.

        When user_id is given, orders owned by someone else are treated as absent.
        """
        stmt = (select(Order)
                .where(Order.id == order_id)
                .options(selectinload(Order.order_items).selectinload(OrderItem.product))
                .execution_options(populate_existing=True))
        if user_id is not None:
            stmt = stmt.where(Order.user_id == user_id)
        order = await session_execute(stmt, session)
        order = order.scalar()
        if order is not None:
            return OrderDTO.model_validate(order, from_attributes=True)
        return None

    @staticmethod
    async def get_for_update(order_id: int, user_id: str, session: AsyncSession) -> OrderDTO | None:
        stmt = (select(Order)
                .where(Order.id == order_id, Order.user_id == user_id)
                .with_for_update()
                .execution_options(populate_existing=True))
        order = await session_execute(stmt, session)
        order = order.scalar()
        if order is not None:
            # Items are not needed for the payment guards
            return OrderDTO(
                id=order.id,
                user_id=order.user_id,
                total_amount=order.total_amount,
                status=order.status,
                created_at=order.created_at,
                updated_at=order.updated_at,
            )
        return None

    @staticmethod
    async def list_by_user(user_id: str, session: AsyncSession) -> list[OrderDTO]:
        stmt = (select(Order)
                .where(Order.user_id == user_id)
                .options(selectinload(Order.order_items).selectinload(OrderItem.product))
                .order_by(Order.created_at.desc(), Order.id.desc()))
        orders = await session_execute(stmt, session)
        return [OrderDTO.model_validate(order, from_attributes=True) for order in orders.scalars().all()]

    @staticmethod
    async def mark_paid_if_pending(order_id: int, session: AsyncSession) -> bool:
        """
        PENDING -> PAID as a single conditional update.

        Returns:
            False if another request already moved the order out of PENDING
        """
        stmt = (update(Order)
                .where(Order.id == order_id, Order.status == OrderStatus.PENDING)
                .values(status=OrderStatus.PAID, updated_at=datetime.now()))
        result = await session_execute(stmt, session)
        return result.rowcount == 1

    @staticmethod
    async def update_status(order_id: int, status: OrderStatus, session: AsyncSession) -> None:
        stmt = update(Order).where(Order.id == order_id).values(status=status, updated_at=datetime.now())
        await session_execute(stmt, session)
