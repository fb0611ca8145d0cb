from enum import Enum


class OrderPriceSource(str, Enum):
    """
    Where the OrderItem unit price snapshot is taken from at checkout.

    SERVER: current Product.price (request price must match it)
    CLIENT: price from the request payload, trusted as-is
    """
    SERVER = "server"
    CLIENT = "client"
