"""
Order State Machine for validating order status transitions.

Only PENDING -> PAID is driven by this service (payment processing). The
fulfillment transitions are listed so that the payment guard and the order
views agree on what is final; nothing here mutates stock.
"""

import logging
from typing import Dict, List, Set

from enums.order_status import OrderStatus

logger = logging.getLogger(__name__)


class OrderStatusTransition:
    """Represents a valid status transition with metadata"""

    def __init__(self, from_status: OrderStatus, to_status: OrderStatus, description: str = ""):
        self.from_status = from_status
        self.to_status = to_status
        self.description = description

    def __repr__(self):
        return f"{self.from_status.value} -> {self.to_status.value}"


class OrderStateMachine:
    """
    Valid status transitions:
    - PENDING -> PAID (successful gateway charge, handled by PaymentService)
    - PENDING -> CANCELLED (fulfillment, stock is not restored)
    - PAID -> SHIPPED (fulfillment)
    - PAID -> CANCELLED (fulfillment, stock is not restored)
    - SHIPPED -> DELIVERED (fulfillment)

    DELIVERED and CANCELLED are final.
    """

    VALID_TRANSITIONS: List[OrderStatusTransition] = [
        OrderStatusTransition(OrderStatus.PENDING, OrderStatus.PAID, "Payment confirmed by gateway"),
        OrderStatusTransition(OrderStatus.PENDING, OrderStatus.CANCELLED, "Order cancelled before payment"),
        OrderStatusTransition(OrderStatus.PAID, OrderStatus.SHIPPED, "Order handed to carrier"),
        OrderStatusTransition(OrderStatus.PAID, OrderStatus.CANCELLED, "Paid order cancelled"),
        OrderStatusTransition(OrderStatus.SHIPPED, OrderStatus.DELIVERED, "Order delivered"),
    ]

    _transition_map: Dict[OrderStatus, Set[OrderStatus]] = {}
    _transition_descriptions: Dict[tuple, str] = {}

    @classmethod
    def _build_transition_map(cls):
        if cls._transition_map:
            return

        for transition in cls.VALID_TRANSITIONS:
            cls._transition_map.setdefault(transition.from_status, set()).add(transition.to_status)
            cls._transition_descriptions[(transition.from_status, transition.to_status)] = transition.description

    @classmethod
    def is_valid_transition(cls, from_status: OrderStatus, to_status: OrderStatus) -> bool:
        """
        Check if a status transition is valid according to the state machine.

        Unlike a no-op update, staying in the same status is NOT a valid
        transition: PAID -> PAID would be a second charge.
        """
        cls._build_transition_map()
        return to_status in cls._transition_map.get(from_status, set())

    @classmethod
    def get_valid_transitions(cls, from_status: OrderStatus) -> List[OrderStatus]:
        cls._build_transition_map()
        return sorted(cls._transition_map.get(from_status, set()), key=lambda s: s.value)

    @classmethod
    def get_transition_description(cls, from_status: OrderStatus, to_status: OrderStatus) -> str:
        cls._build_transition_map()
        return cls._transition_descriptions.get(
            (from_status, to_status),
            f"Transition from {from_status.value} to {to_status.value}"
        )

    @classmethod
    def is_final_status(cls, status: OrderStatus) -> bool:
        cls._build_transition_map()
        return not cls._transition_map.get(status)

    @classmethod
    def log_transition(cls, order_id: int, from_status: OrderStatus, to_status: OrderStatus):
        logger.info(
            f"Order {order_id}: {from_status.value} -> {to_status.value} "
            f"({cls.get_transition_description(from_status, to_status)})"
        )
