from sqlalchemy import Boolean, Column, DateTime, Float, Integer, JSON, Numeric, String, Text
from sqlalchemy.orm import relationship
from ..db.base import Base
from ._time import utcnow


class FoodItem(Base):
    __tablename__ = "foods"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(128), nullable=False)
    description = Column(Text, nullable=False)
    long_description = Column(Text, nullable=True)
    category = Column(String(64), nullable=False, index=True)  # пицца, бургеры, напитки и т.д.
    price = Column(Numeric(10, 2), nullable=False)
    image = Column(String(512), nullable=True)
    images = Column(JSON, nullable=False, default=list)
    prep_time = Column(String(32), nullable=True)
    is_available = Column(Boolean, nullable=False, default=True)

    nutrition_info = Column(JSON, nullable=True)
    ingredients = Column(JSON, nullable=False, default=list)
    sizes = Column(JSON, nullable=False, default=list)
    allergens = Column(JSON, nullable=False, default=list)

    # агрегаты по отзывам, пересчитываются при добавлении отзыва
    rating = Column(Float, nullable=False, default=0.0)
    reviews = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    reviews_list = relationship(
        "Review",
        back_populates="food",
        cascade="all, delete-orphan",
        order_by="Review.id",
        passive_deletes=True,
    )
