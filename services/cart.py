"""
Client cart state container.

The cart lives next to the shopper (browser storage in the web client, or a
Redis key for server-rendered sessions). It never touches the catalog: item
snapshots keep the name, price, image and stock seen at add time, and the
order engine re-validates everything at checkout.
"""

import json
import logging
from abc import ABC, abstractmethod
from decimal import Decimal

from pydantic import ValidationError
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

import config
from exceptions.cart import EmptyCartException, InvalidCartItemsException
from models.cartItem import CartItemDTO
from models.order import CreateOrderRequestDTO, OrderDTO
from models.orderItem import OrderItemRequestDTO
from services.order import OrderService

logger = logging.getLogger(__name__)


class CartStorage(ABC):
    """Persistence port for cart snapshots."""

    @abstractmethod
    async def load(self, key: str) -> str | None:
        """Return the raw JSON snapshot stored under key, or None."""
        pass

    @abstractmethod
    async def save(self, key: str, snapshot: str) -> None:
        pass


class MemoryCartStorage(CartStorage):

    def __init__(self):
        self._snapshots: dict[str, str] = {}

    async def load(self, key: str) -> str | None:
        return self._snapshots.get(key)

    async def save(self, key: str, snapshot: str) -> None:
        self._snapshots[key] = snapshot


class RedisCartStorage(CartStorage):
    """
    Stores each cart as a JSON string under cart:<key>.

    Args:
        redis: Redis client (decode_responses may be on or off)
        ttl_seconds: Optional expiry refreshed on every save
    """

    KEY_PREFIX = "cart"

    def __init__(self, redis: Redis, ttl_seconds: int | None = None):
        self.redis = redis
        self.ttl_seconds = ttl_seconds

    def _key(self, key: str) -> str:
        return f"{self.KEY_PREFIX}:{key}"

    async def load(self, key: str) -> str | None:
        snapshot = await self.redis.get(self._key(key))
        if isinstance(snapshot, bytes):
            snapshot = snapshot.decode("utf-8")
        return snapshot

    async def save(self, key: str, snapshot: str) -> None:
        await self.redis.set(self._key(key), snapshot, ex=self.ttl_seconds)


def build_cart_storage() -> CartStorage:
    """Redis storage when REDIS_HOST is configured, otherwise process memory."""
    if config.REDIS_HOST:
        logger.info(f"[Cart] Using Redis cart storage at {config.REDIS_HOST}:{config.REDIS_PORT}")
        redis = Redis(host=config.REDIS_HOST, port=config.REDIS_PORT, password=config.REDIS_PASSWORD)
        return RedisCartStorage(redis)
    logger.info("[Cart] REDIS_HOST not set, using in-memory cart storage")
    return MemoryCartStorage()


class Cart:
    """
    Cart items plus derived totals. Every mutation is written to storage.

    Usage:
        cart = await Cart.load(storage, "session-42")
        await cart.add_item(CartItemDTO(id=1, name="Mug", price=Decimal("10.00"), stock=3, quantity=2))
    """

    def __init__(self, storage: CartStorage, key: str, items: list[CartItemDTO] | None = None):
        self.storage = storage
        self.key = key
        self.items: list[CartItemDTO] = items or []

    @classmethod
    async def load(cls, storage: CartStorage, key: str) -> 'Cart':
        snapshot = await storage.load(key)
        items = []
        if snapshot:
            try:
                items = [CartItemDTO.model_validate(item) for item in json.loads(snapshot)]
            except (ValueError, TypeError, ValidationError) as e:
                # Corrupt snapshot: start with an empty cart
                logger.warning(f"[Cart] Discarding unreadable cart {key}: {e}")
                items = []
        return cls(storage, key, items)

    @property
    def total_amount(self) -> Decimal:
        return sum((item.price * item.quantity for item in self.items), Decimal("0"))

    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self.items)

    def get_item(self, product_id: int) -> CartItemDTO | None:
        return next((item for item in self.items if item.id == product_id), None)

    async def add_item(self, item: CartItemDTO) -> None:
        """Add a product; quantities are summed per line and capped at stock, empty lines are dropped."""
        existing = self.get_item(item.id)
        if existing is not None:
            existing.quantity = min(existing.quantity + item.quantity, existing.stock)
        else:
            self.items.append(item.model_copy(update={"quantity": min(item.quantity, item.stock)}))
        self.items = [i for i in self.items if i.quantity > 0]
        await self._save()

    async def update_quantity(self, product_id: int, quantity: int) -> None:
        """Set a line quantity clamped to [0, stock]; 0 removes the line."""
        item = self.get_item(product_id)
        if item is None:
            return
        item.quantity = max(0, min(quantity, item.stock))
        self.items = [i for i in self.items if i.quantity > 0]
        await self._save()

    async def remove_item(self, product_id: int) -> None:
        self.items = [item for item in self.items if item.id != product_id]
        await self._save()

    async def clear(self) -> None:
        self.items = []
        await self._save()

    def to_order_request(self) -> CreateOrderRequestDTO:
        return CreateOrderRequestDTO(
            items=[
                OrderItemRequestDTO(product_id=item.id, quantity=item.quantity, price=item.price)
                for item in self.items
            ],
            total_amount=self.total_amount
        )

    async def _save(self) -> None:
        snapshot = json.dumps([item.model_dump(mode="json") for item in self.items])
        await self.storage.save(self.key, snapshot)


class CartService:

    @staticmethod
    async def checkout(cart: Cart, user_id: str | None, session: AsyncSession) -> OrderDTO:
        """
        Submit the cart to the order engine.

        The cart is cleared only after the order was created; on any error it
        is left as it was so the shopper can fix it and retry.
        """
        if not cart.items:
            raise EmptyCartException(cart.key)
        try:
            order_request = cart.to_order_request()
        except ValidationError as e:
            logger.warning(f"[Cart] Cart {cart.key} cannot be checked out: {e}")
            raise InvalidCartItemsException(cart.key, [item.id for item in cart.items if item.quantity <= 0])
        order = await OrderService.create_order(user_id, order_request, session)
        await cart.clear()
        logger.info(f"[Cart] Checked out cart {cart.key} into order {order.id}")
        return order
