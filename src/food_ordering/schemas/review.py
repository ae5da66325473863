from datetime import datetime
from typing import List, Optional

from pydantic import Field

from .base import CamelModel


class ReviewCreate(CamelModel):
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=2000)


class ReviewRead(CamelModel):
    id: int
    food_id: int
    user_id: int
    user_name: Optional[str] = None
    rating: int
    comment: Optional[str] = None
    created_at: datetime


class ReviewAdded(CamelModel):
    message: str
    reviews: List[ReviewRead]
    average_rating: float
