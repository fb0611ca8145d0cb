from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "PENDING"        # Created at checkout, waiting for payment
    PAID = "PAID"              # Gateway confirmed the charge
    SHIPPED = "SHIPPED"        # Set by fulfillment
    DELIVERED = "DELIVERED"    # Set by fulfillment
    CANCELLED = "CANCELLED"    # Set by fulfillment, stock is NOT restored
