from sqlalchemy.ext.asyncio import AsyncSession

from db import session_flush
from models.orderItem import OrderItem, OrderItemDTO


class OrderItemRepository:

    @staticmethod
    async def create_many(order_items: list[OrderItemDTO], session: AsyncSession) -> None:
        """
        Insert order line items in one flush.

        Each item carries the unit price snapshot taken at order creation.
        """
        session.add_all([
            OrderItem(
                order_id=item.order_id,
                product_id=item.product_id,
                quantity=item.quantity,
                price=item.price,
            )
            for item in order_items
        ])
        await session_flush(session)

