from sqlalchemy import Column, Integer, Numeric, ForeignKey, String
from sqlalchemy.orm import relationship
from ..db.base import Base


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    # без внешнего ключа: позиция заказа переживает удаление блюда из каталога
    food_id = Column(Integer, nullable=False, index=True)

    # всё фиксируется на момент заказа
    name = Column(String(128), nullable=False)
    image = Column(String(512), nullable=True)
    category = Column(String(64), nullable=True)
    size = Column(String(32), nullable=False, default="Regular")
    quantity = Column(Integer, nullable=False, default=1)
    price = Column(Numeric(10, 2), nullable=False)
    total_item_price = Column(Numeric(10, 2), nullable=False)

    order = relationship("Order", back_populates="items")
