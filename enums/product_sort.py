from enum import Enum


class ProductSortField(str, Enum):
    NAME = "name"
    PRICE = "price"
    STOCK = "stock"
    NEWEST = "newest"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"
