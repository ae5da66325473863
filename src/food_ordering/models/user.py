import enum
from sqlalchemy import Boolean, Column, DateTime, Enum, Integer, String
from sqlalchemy.orm import relationship
from ..db.base import Base
from ._time import utcnow


class RoleEnum(str, enum.Enum):
    user = "user"
    admin = "admin"
    moderator = "moderator"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    address = Column(String(255), nullable=True)
    role = Column(Enum(RoleEnum, name="user_role"), nullable=False, default=RoleEnum.user)

    # мягкое удаление и блокировка - независимые флаги
    is_active = Column(Boolean, nullable=False, default=True)
    is_deleted = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # связи
    orders = relationship("Order", back_populates="user")
    cart = relationship(
        "CartItem",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="CartItem.id",
    )
