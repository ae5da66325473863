from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from food_ordering.api.deps import get_current_user, parse_id, require_admin
from food_ordering.config import settings
from food_ordering.crud.order import create_order, get_order_by_id, get_orders, update_order_status
from food_ordering.db.session import get_async_session
from food_ordering.exceptions import NotFound, error_message
from food_ordering.models import OrderStatusEnum, RoleEnum, User
from food_ordering.schemas.order import OrderCreate, OrderOptions, OrderPlaced, OrderRead, OrderStatusUpdate
from food_ordering.services.audit import RequestMeta, audit_logger


router = APIRouter(prefix="/orders", tags=["orders"])


async def _place_order(db, user, request, order_in, selections=None, whole_cart=False):
    meta = RequestMeta.from_request(request, user)
    try:
        order = await create_order(
            db,
            user.id,
            order_in,
            selections,
            whole_cart=whole_cart,
            price_tolerance=settings.PRICE_TOLERANCE,
            fallback_address=settings.DEFAULT_DELIVERY_ADDRESS,
        )
    except Exception as exc:
        audit_logger.failed(meta, "Order Creation", f"Order failed - {error_message(exc)}")
        raise

    audit_logger.success(
        meta,
        "Order Placed",
        f"Order placed successfully - {len(order.items)} items, total {order.total_price}",
    )
    return OrderPlaced(message="Order placed successfully", order=OrderRead.model_validate(order))


@router.post("/", response_model=OrderPlaced, status_code=201)
async def create_order_endpoint(
    order_in: OrderCreate,
    request: Request,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Оформляет заказ из выбранных позиций.
    Заказанные блюда удаляются из корзины, остальные остаются.
    """
    return await _place_order(db, user, request, order_in, order_in.selected_items)


@router.post("/cart", response_model=OrderPlaced, status_code=201)
async def checkout_cart_endpoint(
    order_in: OrderOptions,
    request: Request,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Оформляет заказ из всей корзины и очищает её.
    """
    return await _place_order(db, user, request, order_in, whole_cart=True)


@router.get("/my", response_model=List[OrderRead])
async def my_orders(
    request: Request,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    meta = RequestMeta.from_request(request, user)
    try:
        orders = await get_orders(db, user_id=user.id)
    except Exception as exc:
        audit_logger.failed(meta, "View My Orders", f"Failed to load orders - {error_message(exc)}")
        raise

    audit_logger.success(meta, "View My Orders", f"User viewed {len(orders)} orders")
    return orders


@router.get("/", response_model=List[OrderRead])
async def list_orders(
    status: Optional[OrderStatusEnum] = Query(None, description="Фильтр по статусу"),
    limit: Optional[int] = Query(None, ge=1, description="Количество записей для вывода"),
    offset: Optional[int] = Query(None, ge=0, description="Смещение для пагинации"),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Все заказы (только для админа), новые первыми.
    """
    return await get_orders(db, status=status, limit=limit, offset=offset)


@router.get("/{order_id}", response_model=OrderRead)
async def get_order(
    order_id: str,
    request: Request,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Детализация заказа. Владелец видит свой заказ, админ - любой.
    """
    meta = RequestMeta.from_request(request, user)
    try:
        order = await get_order_by_id(db, parse_id(order_id, "order"))
        if not order or (order.user_id != user.id and user.role != RoleEnum.admin):
            raise NotFound("Order not found")
    except Exception as exc:
        audit_logger.failed(meta, "View Order", f"Failed - {error_message(exc)} ({order_id})")
        raise

    audit_logger.success(meta, "View Order", f"Viewed order {order.id}")
    return order


@router.put("/{order_id}", response_model=OrderPlaced)
async def update_order_status_endpoint(
    order_id: str,
    order_in: OrderStatusUpdate,
    request: Request,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Смена статуса заказа админом.
    Без status в теле - заказ возвращается без изменений.
    """
    meta = RequestMeta.from_request(request, admin)
    try:
        order = await update_order_status(
            db,
            parse_id(order_id, "order"),
            order_in.status,
            enforce_transitions=settings.ENFORCE_STATUS_TRANSITIONS,
        )
    except Exception as exc:
        audit_logger.failed(meta, "Update Order Status Attempt", f"Failed - {error_message(exc)} ({order_id})")
        raise

    audit_logger.success(meta, "Update Order Status", f"Order {order.id} marked as {order.status.value}")
    return OrderPlaced(message="Order status updated", order=OrderRead.model_validate(order))
