"""
Catalog routes.

Reads are public; writes require a caller and are restricted to the
product's owner.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from models.product import ProductDTO, ProductFilterDTO, ProductPageDTO, ProductWriteDTO
from services.product import ProductService
from web.dependencies import get_current_user_id, get_session

products_router = APIRouter(prefix="/api/products", tags=["products"])


@products_router.get("", response_model=ProductPageDTO, response_model_by_alias=True)
async def list_products(filters: Annotated[ProductFilterDTO, Query()],
                        session: AsyncSession = Depends(get_session)):
    """
    Query parameters: search, categories (repeatable), inStock, minStock,
    sortBy (name|price|stock|newest), sortOrder (asc|desc), page, pageSize.
    """
    return await ProductService.list_products(filters, session)


@products_router.get("/categories", response_model=list[str])
async def list_categories(session: AsyncSession = Depends(get_session)):
    return await ProductService.get_categories(session)


@products_router.get("/{product_id}", response_model=ProductDTO, response_model_by_alias=True)
async def get_product(product_id: int, session: AsyncSession = Depends(get_session)):
    return await ProductService.get_product(product_id, session)


@products_router.post("", response_model=ProductDTO, response_model_by_alias=True,
                      status_code=status.HTTP_201_CREATED)
async def create_product(payload: ProductWriteDTO,
                         user_id: str = Depends(get_current_user_id),
                         session: AsyncSession = Depends(get_session)):
    return await ProductService.create_product(user_id, payload, session)


@products_router.put("/{product_id}", response_model=ProductDTO, response_model_by_alias=True)
async def update_product(product_id: int,
                         payload: ProductWriteDTO,
                         user_id: str = Depends(get_current_user_id),
                         session: AsyncSession = Depends(get_session)):
    return await ProductService.update_product(user_id, product_id, payload, session)


@products_router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(product_id: int,
                         user_id: str = Depends(get_current_user_id),
                         session: AsyncSession = Depends(get_session)):
    await ProductService.delete_product(user_id, product_id, session)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
