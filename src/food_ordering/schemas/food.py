from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import Field

from .base import CamelModel


class FoodBase(CamelModel):
    long_description: Optional[str] = None
    image: Optional[str] = None
    images: List[str] = []
    prep_time: Optional[str] = None
    is_available: bool = True
    nutrition_info: Optional[Dict[str, Any]] = None
    ingredients: List[str] = []
    sizes: List[Any] = []
    allergens: List[str] = []


class FoodCreate(FoodBase):
    name: str = Field(min_length=1, max_length=128)
    description: str = Field(min_length=1)
    category: str = Field(min_length=1, max_length=64)
    price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)


class FoodUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=128)
    description: Optional[str] = Field(None, min_length=1)
    long_description: Optional[str] = None
    category: Optional[str] = Field(None, min_length=1, max_length=64)
    price: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    image: Optional[str] = None
    images: Optional[List[str]] = None
    prep_time: Optional[str] = None
    is_available: Optional[bool] = None
    nutrition_info: Optional[Dict[str, Any]] = None
    ingredients: Optional[List[str]] = None
    sizes: Optional[List[Any]] = None
    allergens: Optional[List[str]] = None


class FoodRead(FoodBase):
    id: int
    name: str
    description: str
    category: str
    price: float
    rating: float
    reviews: int
    created_at: datetime
    updated_at: datetime


class FoodCreated(CamelModel):
    message: str
    food: FoodRead
