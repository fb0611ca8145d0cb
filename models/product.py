from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from sqlalchemy import Column, Integer, String, Text, Numeric, DateTime, CheckConstraint, Index

import config
from enums.product_sort import ProductSortField, SortOrder
from models.base import Base
from models.types import Money


# Product is a catalog entry with a stock counter; only its owner may change it
class Product(Base):
    __tablename__ = 'products'

    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    category = Column(String(100), nullable=True)
    image = Column(String(2048), nullable=True)  # Opaque URL returned by the media host
    user_id = Column(String(191), nullable=False)  # Owner, as issued by the identity provider
    created_at = Column(DateTime, default=datetime.now, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)

    __table_args__ = (
        CheckConstraint('price >= 0', name='check_product_price_non_negative'),
        CheckConstraint('stock >= 0', name='check_product_stock_non_negative'),
        Index('ix_products_user_id', 'user_id'),
        Index('ix_products_category', 'category'),
    )


class ProductDTO(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: int | None = None
    name: str | None = None
    description: str | None = None
    price: Money | None = None
    stock: int | None = None
    category: str | None = None
    image: str | None = None
    user_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ProductSummaryDTO(BaseModel):
    """Display-only view of a product nested inside order items."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: int
    name: str
    image: str | None = None


class ProductWriteDTO(BaseModel):
    """Payload for product create and update."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    price: Decimal = Field(..., ge=0, decimal_places=2)
    stock: int = Field(0, ge=0)
    image: str | None = None
    category: str | None = None

    @field_validator('image', 'category', mode='before')
    @classmethod
    def empty_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator('stock', mode='before')
    @classmethod
    def null_stock_to_zero(cls, v):
        return 0 if v is None else v


class ProductFilterDTO(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    search: str | None = None
    categories: list[str] = Field(default_factory=list)
    in_stock: bool | None = None
    min_stock: int | None = Field(None, ge=0)
    sort_by: ProductSortField = ProductSortField.NAME
    sort_order: SortOrder = SortOrder.ASC
    page: int = Field(1, ge=1)
    page_size: int = Field(default_factory=lambda: config.PAGE_ENTRIES, ge=1, le=100)


class ProductPageDTO(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    items: list[ProductDTO]
    total: int
    page: int
    page_size: int
    total_pages: int
