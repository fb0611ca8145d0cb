import logging
from collections import Counter
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy.ext.asyncio import AsyncSession

import config
from enums.order_price_source import OrderPriceSource
from exceptions.base import UnauthorizedException
from exceptions.order import (
    EmptyOrderException,
    InvalidTotalAmountException,
    InsufficientStockException,
    OrderNotFoundException,
    PriceChangedException,
)
from exceptions.product import ProductNotFoundException
from models.order import CreateOrderRequestDTO, OrderDTO
from models.orderItem import OrderItemDTO
from repositories.order import OrderRepository
from repositories.orderItem import OrderItemRepository
from repositories.product import ProductRepository
from utils.transaction_manager import TransactionManager

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


class OrderService:

    @staticmethod
    async def create_order(user_id: str | None,
                           request: CreateOrderRequestDTO,
                           session: AsyncSession,
                           price_source: OrderPriceSource | None = None) -> OrderDTO:
        """
        Create a PENDING order from the caller's cart and reserve stock.

        Validation runs completely before any write. Inside one transaction the
        order row, its items and every stock decrement are written together;
        any failure leaves no order, no items and untouched stock.

        Args:
            user_id: Authenticated caller
            request: Items with product id, quantity and unit price, plus the claimed total
            session: Database session
            price_source: Overrides config.ORDER_PRICE_SOURCE (where the unit price snapshot comes from)

        Returns:
            The created order with items and product summaries

        Raises:
            UnauthorizedException: No caller identity
            EmptyOrderException: No items
            InvalidTotalAmountException: Total missing, not positive or not equal to the item sum
                (the claimed total is rounded to cents first)
            ProductNotFoundException: Any referenced product is missing
            InsufficientStockException: Any product has less stock than requested
            PriceChangedException: Request price differs from the catalog (server price mode)
        """
        if not user_id:
            raise UnauthorizedException()
        if not request.items:
            raise EmptyOrderException()
        if request.total_amount is None:
            raise InvalidTotalAmountException(request.total_amount)
        # Clients add up prices in floating point: compare whole cents
        claimed_total = request.total_amount.quantize(CENT, rounding=ROUND_HALF_UP)
        if claimed_total <= 0:
            raise InvalidTotalAmountException(request.total_amount)
        price_source = price_source or config.ORDER_PRICE_SOURCE

        async with TransactionManager.atomic(session, "create_order"):
            product_ids = [item.product_id for item in request.items]
            products = await ProductRepository.get_by_ids_for_update(product_ids, session)

            missing_ids = [product_id for product_id in dict.fromkeys(product_ids) if product_id not in products]
            if missing_ids:
                raise ProductNotFoundException(missing_ids)

            # Same product on several lines counts against one stock
            requested = Counter()
            for item in request.items:
                requested[item.product_id] += item.quantity
            for product_id, quantity in requested.items():
                product = products[product_id]
                if product.stock < quantity:
                    raise InsufficientStockException(product.id, product.name, quantity, product.stock)

            snapshot_items = []
            for item in request.items:
                product = products[item.product_id]
                if price_source == OrderPriceSource.SERVER:
                    if item.price != product.price:
                        raise PriceChangedException(product.id, product.name, item.price, product.price)
                    unit_price = product.price
                else:
                    unit_price = item.price
                snapshot_items.append(OrderItemDTO(
                    product_id=item.product_id,
                    quantity=item.quantity,
                    price=unit_price
                ))

            items_total = sum((item.price * item.quantity for item in snapshot_items), Decimal("0"))
            items_total = items_total.quantize(CENT)
            if claimed_total != items_total:
                raise InvalidTotalAmountException(request.total_amount, items_total)

            order_id = await OrderRepository.create(user_id, items_total, session)
            for item in snapshot_items:
                item.order_id = order_id
            await OrderItemRepository.create_many(snapshot_items, session)

            for product_id, quantity in requested.items():
                decremented = await ProductRepository.decrement_stock_if_available(product_id, quantity, session)
                if not decremented:
                    # Stock changed between the read and the write
                    current = await ProductRepository.get_by_id(product_id, session)
                    raise InsufficientStockException(
                        product_id, products[product_id].name, quantity,
                        current.stock if current else 0
                    )

            created_order = await OrderRepository.get_with_items(order_id, session)

        logger.info(
            f"[Order] Created order {order_id} for user {user_id}: "
            f"{len(snapshot_items)} item(s), total {items_total}"
        )
        return created_order

    @staticmethod
    async def list_orders(user_id: str | None, session: AsyncSession) -> list[OrderDTO]:
        if not user_id:
            raise UnauthorizedException()
        return await OrderRepository.list_by_user(user_id, session)

    @staticmethod
    async def get_order(user_id: str | None, order_id: int, session: AsyncSession) -> OrderDTO:
        if not user_id:
            raise UnauthorizedException()
        order = await OrderRepository.get_with_items(order_id, session, user_id=user_id)
        if order is None:
            raise OrderNotFoundException(order_id)
        return order
