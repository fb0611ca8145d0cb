import math
from datetime import datetime

from sqlalchemy import select, func, update, delete, or_, exists
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from enums.product_sort import ProductSortField, SortOrder
from models.orderItem import OrderItem
from models.product import Product, ProductDTO, ProductFilterDTO, ProductPageDTO, ProductWriteDTO


class ProductRepository:

    @staticmethod
    async def get_by_id(product_id: int, session: AsyncSession) -> ProductDTO | None:
        stmt = (select(Product)
                .where(Product.id == product_id)
                .execution_options(populate_existing=True))
        product = await session_execute(stmt, session)
        product = product.scalar()
        if product is not None:
            return ProductDTO.model_validate(product, from_attributes=True)
        return None

    @staticmethod
    async def get_by_ids_for_update(product_ids: list[int], session: AsyncSession) -> dict[int, ProductDTO]:
        """
        Load products by id in one query, locking the rows where the backend supports it.

        Returns:
            Dict mapping product_id -> ProductDTO (missing ids are simply absent)
        """
        if not product_ids:
            return {}
        stmt = (select(Product)
                .where(Product.id.in_(set(product_ids)))
                .with_for_update()
                .execution_options(populate_existing=True))
        result = await session_execute(stmt, session)
        return {
            product.id: ProductDTO.model_validate(product, from_attributes=True)
            for product in result.scalars().all()
        }

    @staticmethod
    async def get_filtered(filters: ProductFilterDTO, session: AsyncSession) -> ProductPageDTO:
        conditions = []
        if filters.search:
            pattern = f"%{filters.search}%"
            conditions.append(or_(Product.name.ilike(pattern), Product.description.ilike(pattern)))
        if filters.categories:
            conditions.append(Product.category.in_(filters.categories))
        if filters.in_stock is True:
            conditions.append(Product.stock > 0)
        elif filters.in_stock is False:
            conditions.append(Product.stock == 0)
        if filters.min_stock is not None:
            conditions.append(Product.stock >= filters.min_stock)

        count_stmt = select(func.count()).select_from(Product).where(*conditions)
        total = await session_execute(count_stmt, session)
        total = total.scalar_one()

        column = {
            ProductSortField.NAME: Product.name,
            ProductSortField.PRICE: Product.price,
            ProductSortField.STOCK: Product.stock,
            ProductSortField.NEWEST: Product.created_at,
        }[filters.sort_by]
        # id breaks ties so pages never overlap
        if filters.sort_order == SortOrder.DESC:
            order_by = [column.desc(), Product.id.desc()]
        else:
            order_by = [column.asc(), Product.id.asc()]

        stmt = (select(Product)
                .where(*conditions)
                .order_by(*order_by)
                .limit(filters.page_size)
                .offset((filters.page - 1) * filters.page_size))
        products = await session_execute(stmt, session)
        return ProductPageDTO(
            items=[ProductDTO.model_validate(product, from_attributes=True) for product in products.scalars().all()],
            total=total,
            page=filters.page,
            page_size=filters.page_size,
            total_pages=math.ceil(total / filters.page_size) if total else 0,
        )

    @staticmethod
    async def create(product_dto: ProductWriteDTO, user_id: str, session: AsyncSession) -> ProductDTO:
        product = Product(**product_dto.model_dump(), user_id=user_id)
        session.add(product)
        await session_flush(session)
        await session.refresh(product)
        return ProductDTO.model_validate(product, from_attributes=True)

    @staticmethod
    async def update(product_id: int, product_dto: ProductWriteDTO, session: AsyncSession) -> ProductDTO:
        stmt = (update(Product)
                .where(Product.id == product_id)
                .values(**product_dto.model_dump(), updated_at=datetime.now()))
        await session_execute(stmt, session)
        stmt = select(Product).where(Product.id == product_id).execution_options(populate_existing=True)
        product = await session_execute(stmt, session)
        return ProductDTO.model_validate(product.scalar_one(), from_attributes=True)

    @staticmethod
    async def delete(product_id: int, session: AsyncSession) -> None:
        stmt = delete(Product).where(Product.id == product_id)
        await session_execute(stmt, session)

    @staticmethod
    async def is_referenced_by_orders(product_id: int, session: AsyncSession) -> bool:
        stmt = select(exists().where(OrderItem.product_id == product_id))
        result = await session_execute(stmt, session)
        return bool(result.scalar())

    @staticmethod
    async def decrement_stock_if_available(product_id: int, quantity: int, session: AsyncSession) -> bool:
        """
        Atomically decrement stock only if enough is left.

        The stock check lives in the WHERE clause, so two concurrent orders can
        never both take the last units.

        Returns:
            True if the row was decremented, False if stock was insufficient
        """
        stmt = (update(Product)
                .where(Product.id == product_id, Product.stock >= quantity)
                .values(stock=Product.stock - quantity, updated_at=datetime.now()))
        result = await session_execute(stmt, session)
        return result.rowcount == 1

    @staticmethod
    async def get_categories(session: AsyncSession) -> list[str]:
        stmt = (select(Product.category)
                .where(Product.category.is_not(None))
                .distinct()
                .order_by(Product.category))
        result = await session_execute(stmt, session)
        return list(result.scalars().all())
