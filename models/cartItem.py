# A cart item is a client-local snapshot of a product: name, price, image and
# stock are copied at add time and are NOT refreshed from the catalog. The
# order engine re-checks stock (and, in server price mode, price) at checkout.
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from models.types import Money


class CartItemDTO(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: int  # Product id
    name: str
    price: Money = Field(..., ge=0)
    image: str | None = None
    stock: int = Field(..., ge=0)
    quantity: int = Field(..., ge=0)
