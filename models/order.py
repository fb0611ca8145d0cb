from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from sqlalchemy import Column, Integer, String, Numeric, DateTime, CheckConstraint, Index, Enum as SQLEnum
from sqlalchemy.orm import relationship

from enums.order_status import OrderStatus
from models.base import Base
from models.orderItem import OrderItemDTO, OrderItemRequestDTO
from models.types import Money


class Order(Base):
    __tablename__ = 'orders'

    id = Column(Integer, primary_key=True)
    user_id = Column(String(191), nullable=False)
    # Fixed at creation: sum of order_items price * quantity, never recomputed
    total_amount = Column(Numeric(12, 2), nullable=False)
    status = Column(SQLEnum(OrderStatus), nullable=False, default=OrderStatus.PENDING)
    created_at = Column(DateTime, default=datetime.now, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)

    # Relations
    order_items = relationship('OrderItem', back_populates='order', cascade='all, delete-orphan',
                               order_by='OrderItem.id')

    __table_args__ = (
        CheckConstraint('total_amount > 0', name='check_order_total_amount_positive'),
        Index('ix_orders_user_created', 'user_id', 'created_at'),
    )


class OrderDTO(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: int | None = None
    user_id: str | None = None
    total_amount: Money | None = None
    status: OrderStatus | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    order_items: list[OrderItemDTO] = Field(default_factory=list)


class CreateOrderRequestDTO(BaseModel):
    """
    Checkout payload built from the client cart.

    items and totalAmount are optional here so that missing values surface as
    the order engine's own validation errors instead of a generic schema error.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    items: list[OrderItemRequestDTO] = Field(default_factory=list)
    total_amount: Decimal | None = None
