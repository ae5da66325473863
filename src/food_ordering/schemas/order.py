from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field

from food_ordering.models.order import OrderStatusEnum, PaymentMethodEnum
from .base import CamelModel


class SelectedItem(CamelModel):
    """
    Выбранная позиция. Незаполненные поля берутся из корзины или каталога.
    """

    food_id: int
    quantity: Optional[int] = Field(None, ge=1)
    size: Optional[str] = Field(None, max_length=32)
    price: Optional[Decimal] = Field(None, ge=0)


class PricingIn(CamelModel):
    subtotal: Optional[Decimal] = Field(None, ge=0)
    tax: Decimal = Field(Decimal("0"), ge=0)
    delivery_fee: Decimal = Field(Decimal("0"), ge=0)
    discount: Decimal = Field(Decimal("0"), ge=0)
    total_price: Optional[Decimal] = Field(None, ge=0)


class OrderOptions(CamelModel):
    payment_method: PaymentMethodEnum = PaymentMethodEnum.cod
    delivery_address: Optional[str] = Field(None, max_length=255)
    pricing: Optional[PricingIn] = None
    applied_promo: Optional[str] = Field(None, max_length=64)


class OrderCreate(OrderOptions):
    selected_items: List[SelectedItem] = []


class OrderStatusUpdate(CamelModel):
    status: Optional[OrderStatusEnum] = None


class OrderItemRead(CamelModel):
    food_id: int
    name: str
    image: Optional[str] = None
    category: Optional[str] = None
    size: str
    quantity: int
    price: float
    total_item_price: float


class OrderRead(CamelModel):
    id: int
    user_id: int
    user_name: str
    items: List[OrderItemRead] = []
    subtotal: float
    tax: float
    delivery_fee: float
    discount: float
    total_price: float
    applied_promo: Optional[str] = None
    delivery_address: str
    status: OrderStatusEnum
    payment_method: PaymentMethodEnum
    created_at: datetime
    updated_at: datetime


class OrderPlaced(CamelModel):
    message: str
    order: OrderRead
