import logging

from sqlalchemy.ext.asyncio import AsyncSession

from exceptions.base import UnauthorizedException
from exceptions.product import ProductNotFoundException, ProductOwnershipException, ProductInUseException
from models.product import ProductDTO, ProductFilterDTO, ProductPageDTO, ProductWriteDTO
from repositories.product import ProductRepository
from utils.transaction_manager import TransactionManager

logger = logging.getLogger(__name__)


class ProductService:

    @staticmethod
    async def list_products(filters: ProductFilterDTO, session: AsyncSession) -> ProductPageDTO:
        return await ProductRepository.get_filtered(filters, session)

    @staticmethod
    async def get_product(product_id: int, session: AsyncSession) -> ProductDTO:
        product = await ProductRepository.get_by_id(product_id, session)
        if product is None:
            raise ProductNotFoundException(product_id)
        return product

    @staticmethod
    async def get_categories(session: AsyncSession) -> list[str]:
        return await ProductRepository.get_categories(session)

    @staticmethod
    async def create_product(user_id: str | None, product_dto: ProductWriteDTO, session: AsyncSession) -> ProductDTO:
        if not user_id:
            raise UnauthorizedException()
        async with TransactionManager.atomic(session, "create_product"):
            product = await ProductRepository.create(product_dto, user_id, session)
        logger.info(f"[Product] User {user_id} created product {product.id} ({product.name})")
        return product

    @staticmethod
    async def _get_owned(user_id: str, product_id: int, action: str, session: AsyncSession) -> ProductDTO:
        product = await ProductRepository.get_by_id(product_id, session)
        if product is None:
            raise ProductNotFoundException(product_id)
        if product.user_id != user_id:
            logger.warning(f"[Product] User {user_id} tried to {action} product {product_id} owned by {product.user_id}")
            raise ProductOwnershipException(product_id, user_id, action)
        return product

    @staticmethod
    async def update_product(user_id: str | None,
                             product_id: int,
                             product_dto: ProductWriteDTO,
                             session: AsyncSession) -> ProductDTO:
        if not user_id:
            raise UnauthorizedException()
        async with TransactionManager.atomic(session, "update_product"):
            await ProductService._get_owned(user_id, product_id, "update", session)
            product = await ProductRepository.update(product_id, product_dto, session)
        logger.info(f"[Product] User {user_id} updated product {product_id}")
        return product

    @staticmethod
    async def delete_product(user_id: str | None, product_id: int, session: AsyncSession) -> None:
        """
        Delete an owned product.

        Products referenced by order items are kept so order history stays intact.
        """
        if not user_id:
            raise UnauthorizedException()
        async with TransactionManager.atomic(session, "delete_product"):
            await ProductService._get_owned(user_id, product_id, "delete", session)
            if await ProductRepository.is_referenced_by_orders(product_id, session):
                raise ProductInUseException(product_id)
            await ProductRepository.delete(product_id, session)
        logger.info(f"[Product] User {user_id} deleted product {product_id}")
