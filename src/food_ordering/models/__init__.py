from .user import User, RoleEnum
from .food import FoodItem
from .review import Review
from .cart_item import CartItem
from .order import Order, OrderStatusEnum, PaymentMethodEnum, STATUS_TRANSITIONS
from .order_item import OrderItem
from .audit_log import AuditLog, AuditStatusEnum

__all__ = [
    "User",
    "RoleEnum",
    "FoodItem",
    "Review",
    "CartItem",
    "Order",
    "OrderStatusEnum",
    "PaymentMethodEnum",
    "STATUS_TRANSITIONS",
    "OrderItem",
    "AuditLog",
    "AuditStatusEnum",
]
