import enum
from sqlalchemy import Column, DateTime, Enum as SAEnum, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship
from ..db.base import Base
from ._time import utcnow


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class OrderStatusEnum(str, enum.Enum):
    pending = "Pending"
    confirmed = "Confirmed"
    delivered = "Delivered"
    cancelled = "Cancelled"


class PaymentMethodEnum(str, enum.Enum):
    cod = "COD"
    online = "Online"


# допустимые переходы статусов; Delivered и Cancelled - конечные
STATUS_TRANSITIONS = {
    OrderStatusEnum.pending: {OrderStatusEnum.confirmed, OrderStatusEnum.cancelled},
    OrderStatusEnum.confirmed: {OrderStatusEnum.delivered, OrderStatusEnum.cancelled},
    OrderStatusEnum.delivered: set(),
    OrderStatusEnum.cancelled: set(),
}


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    user_name = Column(String(100), nullable=False)

    # разбивка стоимости
    subtotal = Column(Numeric(10, 2), nullable=False)
    tax = Column(Numeric(10, 2), nullable=False, default=0)
    delivery_fee = Column(Numeric(10, 2), nullable=False, default=0)
    discount = Column(Numeric(10, 2), nullable=False, default=0)
    total_price = Column(Numeric(10, 2), nullable=False)

    applied_promo = Column(String(64), nullable=True)
    delivery_address = Column(String(255), nullable=False)
    status = Column(
        SAEnum(OrderStatusEnum, name="order_status", values_callable=_enum_values),
        nullable=False,
        default=OrderStatusEnum.pending,
    )
    payment_method = Column(
        SAEnum(PaymentMethodEnum, name="payment_method", values_callable=_enum_values),
        nullable=False,
        default=PaymentMethodEnum.cod,
    )
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # связи
    user = relationship("User", back_populates="orders")
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )
