from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship
from ..db.base import Base
from ._time import utcnow


class CartItem(Base):
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    food_id = Column(Integer, ForeignKey("foods.id", ondelete="CASCADE"), nullable=False)

    # снимок данных блюда на момент добавления в корзину
    name = Column(String(128), nullable=False)
    category = Column(String(64), nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    image = Column(String(512), nullable=True)
    prep_time = Column(String(32), nullable=True)
    size = Column(String(32), nullable=False, default="Regular")
    quantity = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    user = relationship("User", back_populates="cart")

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_cart_items_quantity_positive"),
    )

    @property
    def total_price(self):
        return self.price * self.quantity
