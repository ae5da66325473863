from typing import Optional

from pydantic import Field

from .base import CamelModel


class CartItemCreate(CamelModel):
    food_id: int
    quantity: int = Field(1, ge=1)
    size: Optional[str] = Field(None, max_length=32)


class CartItemUpdate(CamelModel):
    quantity: int = Field(ge=1)


class CartItemRead(CamelModel):
    id: int
    food_id: int
    name: str
    category: Optional[str] = None
    price: float
    image: Optional[str] = None
    prep_time: Optional[str] = None
    size: str
    quantity: int
    total_price: float
