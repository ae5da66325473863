import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional

from sqlalchemy import delete, desc, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from food_ordering.exceptions import Conflict, InvalidRequest, NotFound, PersistenceError
from food_ordering.models import (
    CartItem,
    FoodItem,
    Order,
    OrderItem,
    OrderStatusEnum,
    STATUS_TRANSITIONS,
    User,
)
from food_ordering.schemas.order import OrderOptions, PricingIn, SelectedItem

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
DEFAULT_SIZE = "Regular"
DEFAULT_DELIVERY_ADDRESS = "No address provided"


def _money(value) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def _within_tolerance(value: Decimal, reference: Decimal, tolerance: Optional[Decimal]) -> bool:
    if tolerance is None:
        return True
    return abs(value - reference) <= abs(reference) * tolerance + CENT / 2


async def _fetch(db: AsyncSession, stmt, what: str):
    try:
        return await db.execute(stmt)
    except SQLAlchemyError as exc:
        await db.rollback()
        raise PersistenceError(f"Failed to load {what}") from exc


async def get_orders(
    db: AsyncSession,
    user_id: Optional[int] = None,
    status: Optional[OrderStatusEnum] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
) -> List[Order]:
    """
    Возвращает список заказов (новые первыми) с подгруженными позициями.
    """
    stmt = (
        select(Order)
        .options(selectinload(Order.items))
        .order_by(Order.created_at.desc(), Order.id.desc())
    )

    if user_id is not None:
        stmt = stmt.where(Order.user_id == user_id)
    if status:
        stmt = stmt.where(Order.status == status)
    if limit:
        stmt = stmt.limit(limit)
    if offset:
        stmt = stmt.offset(offset)

    result = await _fetch(db, stmt, "orders")
    return result.scalars().unique().all()


async def get_order_by_id(db: AsyncSession, order_id: int) -> Optional[Order]:
    """
    Возвращает заказ по ID с подгруженными items.
    populate_existing нужен, чтобы после commit в той же сессии не отдать устаревшие данные.
    """
    stmt = (
        select(Order)
        .where(Order.id == order_id)
        .options(selectinload(Order.items))
        .execution_options(populate_existing=True)
    )
    result = await _fetch(db, stmt, "order")
    return result.scalars().unique().first()


async def _load_customer(db: AsyncSession, user_id: int) -> User:
    """
    Загружает покупателя с корзиной.
    Строка пользователя блокируется до конца транзакции (FOR UPDATE),
    поэтому параллельные оформления одной корзины идут по очереди.
    """
    stmt = (
        select(User)
        .where(User.id == user_id)
        .options(selectinload(User.cart))
        .with_for_update(of=User)
        .execution_options(populate_existing=True)
    )
    user = (await _fetch(db, stmt, "customer")).scalars().first()
    if user is None or user.is_deleted:
        raise NotFound("User not found")
    return user


def _build_items(
    selections: Iterable[SelectedItem],
    foods: dict,
    cart: List[CartItem],
    price_tolerance: Optional[Decimal],
) -> List[OrderItem]:
    """
    Превращает выбранные позиции в снимки OrderItem.
    Отсутствующие в каталоге или недоступные блюда молча отбрасываются.
    """
    cart_by_food = {}
    for entry in cart:
        cart_by_food.setdefault(entry.food_id, entry)

    items = []
    for selection in selections:
        food = foods.get(selection.food_id)
        if food is None or not food.is_available:
            continue

        entry = cart_by_food.get(food.id)
        quantity = selection.quantity or (entry.quantity if entry else 1)
        size = selection.size or (entry.size if entry and entry.size else DEFAULT_SIZE)

        catalog_price = _money(food.price)
        if selection.price is not None:
            unit_price = _money(selection.price)
            if not _within_tolerance(unit_price, catalog_price, price_tolerance):
                raise InvalidRequest(f"Price mismatch for {food.name}")
        else:
            unit_price = catalog_price

        items.append(
            OrderItem(
                food_id=food.id,
                name=food.name,
                image=food.image,
                category=food.category,
                size=size,
                quantity=quantity,
                price=unit_price,
                total_item_price=_money(unit_price * quantity),
            )
        )
    return items


def calculate_pricing(
    items: List[OrderItem],
    pricing: Optional[PricingIn] = None,
    price_tolerance: Optional[Decimal] = None,
) -> dict:
    """
    Считает разбивку стоимости заказа.
    total = subtotal + tax + delivery_fee - discount, если клиент не передал итог сам.
    Переданные клиентом subtotal/total сверяются с серверным расчётом.
    """
    computed_subtotal = _money(sum((item.total_item_price for item in items), Decimal("0")))

    if pricing is None:
        return {
            "subtotal": computed_subtotal,
            "tax": _money(0),
            "delivery_fee": _money(0),
            "discount": _money(0),
            "total_price": computed_subtotal,
        }

    subtotal = computed_subtotal
    if pricing.subtotal is not None:
        subtotal = _money(pricing.subtotal)
        if not _within_tolerance(subtotal, computed_subtotal, price_tolerance):
            raise InvalidRequest("Subtotal does not match item prices")

    tax = _money(pricing.tax)
    delivery_fee = _money(pricing.delivery_fee)
    discount = _money(pricing.discount)
    computed_total = subtotal + tax + delivery_fee - discount

    if pricing.total_price is not None:
        total_price = _money(pricing.total_price)
        if not _within_tolerance(total_price, computed_total, price_tolerance):
            raise InvalidRequest("Total price does not match pricing breakdown")
    else:
        total_price = computed_total

    if total_price < 0:
        raise InvalidRequest("Discount exceeds order amount")

    return {
        "subtotal": subtotal,
        "tax": tax,
        "delivery_fee": delivery_fee,
        "discount": discount,
        "total_price": total_price,
    }


async def create_order(
    db: AsyncSession,
    user_id: int,
    order_in: OrderOptions,
    selections: Optional[List[SelectedItem]] = None,
    *,
    whole_cart: bool = False,
    price_tolerance: Optional[Decimal] = None,
    fallback_address: str = DEFAULT_DELIVERY_ADDRESS,
) -> Order:
    """
    Оформляет заказ из выбранных позиций (или всей корзины при whole_cart=True).

    Цены пересчитываются на сервере, заказ и удаление использованных позиций
    корзины фиксируются одной транзакцией.
    """
    user = await _load_customer(db, user_id)

    if whole_cart:
        selections = [
            SelectedItem(food_id=entry.food_id, quantity=entry.quantity, size=entry.size)
            for entry in user.cart
        ]
        if not selections:
            raise InvalidRequest("Cart is empty")

    if not selections:
        raise InvalidRequest("No items selected")

    food_ids = {selection.food_id for selection in selections}
    result = await _fetch(db, select(FoodItem).where(FoodItem.id.in_(food_ids)), "food items")
    foods = {food.id: food for food in result.scalars().all()}

    items = _build_items(selections, foods, user.cart, price_tolerance)
    if not items:
        raise InvalidRequest("No valid items found to order")

    pricing = calculate_pricing(items, order_in.pricing, price_tolerance)

    order = Order(
        user_id=user.id,
        user_name=user.name,
        items=items,
        applied_promo=order_in.applied_promo or None,
        delivery_address=order_in.delivery_address or user.address or fallback_address,
        status=OrderStatusEnum.pending,
        payment_method=order_in.payment_method,
        **pricing,
    )
    db.add(order)

    # удаляем из корзины только заказанные блюда (или всё при заказе всей корзины)
    ordered_food_ids = {item.food_id for item in items}
    consumed_ids = [
        entry.id for entry in user.cart
        if whole_cart or entry.food_id in ordered_food_ids
    ]

    try:
        await db.flush()
        removed = 0
        if consumed_ids:
            cleanup = await db.execute(
                delete(CartItem)
                .where(CartItem.user_id == user.id, CartItem.id.in_(consumed_ids))
                .execution_options(synchronize_session=False)
            )
            removed = cleanup.rowcount
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("Failed to persist order for user %s", user_id)
        raise PersistenceError("Failed to save order") from exc

    # позиции уже забрал параллельный заказ
    if removed != len(consumed_ids):
        await db.rollback()
        logger.warning(
            "Cart of user %s changed during checkout: expected %s entries, removed %s",
            user_id, len(consumed_ids), removed,
        )
        raise Conflict("Cart was changed by another checkout, please try again")

    try:
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("Failed to persist order for user %s", user_id)
        raise PersistenceError("Failed to save order") from exc

    logger.info(
        "Order %s created for user %s: %s items, total %s",
        order.id, user.id, len(items), pricing["total_price"],
    )
    return await get_order_by_id(db, order.id)


async def update_order_status(
    db: AsyncSession,
    order_id: int,
    status: Optional[OrderStatusEnum],
    *,
    enforce_transitions: bool = False,
) -> Order:
    """
    Меняет статус заказа.
    Пустой status - допустимая no-op операция, возвращает заказ без изменений.
    """
    order = await get_order_by_id(db, order_id)
    if not order:
        raise NotFound("Order not found")

    if status is None or status == order.status:
        return order

    if enforce_transitions and status not in STATUS_TRANSITIONS[order.status]:
        raise InvalidRequest(f"Cannot change order status from {order.status.value} to {status.value}")

    previous = order.status
    order.status = status
    try:
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        raise PersistenceError("Failed to update order") from exc

    logger.info("Order %s status changed: %s -> %s", order_id, previous.value, status.value)
    return await get_order_by_id(db, order_id)


async def get_dashboard_stats(db: AsyncSession, days: int = 7, top_limit: int = 5) -> dict:
    """
    Сводка для админ-панели:
    - количество пользователей, блюд и заказов
    - выручка по неотменённым заказам
    - заказы по статусам
    - топ блюд по количеству проданных порций
    - выручка по дням за последние days дней
    """
    users_count = await db.scalar(
        select(func.count(User.id)).where(User.is_deleted.is_(False))
    )
    foods_count = await db.scalar(select(func.count(FoodItem.id)))
    orders_count = await db.scalar(select(func.count(Order.id)))
    revenue = await db.scalar(
        select(func.sum(Order.total_price)).where(Order.status != OrderStatusEnum.cancelled)
    )

    by_status = {status.value: 0 for status in OrderStatusEnum}
    rows = await db.execute(select(Order.status, func.count(Order.id)).group_by(Order.status))
    for status, count in rows.all():
        by_status[OrderStatusEnum(status).value] = count

    top_rows = await db.execute(
        select(
            OrderItem.food_id,
            OrderItem.name,
            func.sum(OrderItem.quantity).label("total_sold"),
            func.sum(OrderItem.total_item_price).label("total_revenue"),
        )
        .join(Order, Order.id == OrderItem.order_id)
        .where(Order.status != OrderStatusEnum.cancelled)
        .group_by(OrderItem.food_id, OrderItem.name)
        .order_by(desc("total_sold"))
        .limit(top_limit)
    )

    date_from = datetime.now(timezone.utc) - timedelta(days=days)
    day = func.date(Order.created_at)
    daily_rows = await db.execute(
        select(
            day.label("day"),
            func.count(Order.id).label("count_orders"),
            func.sum(Order.total_price).label("total_revenue"),
        )
        .where(Order.created_at >= date_from, Order.status != OrderStatusEnum.cancelled)
        .group_by(day)
        .order_by(day)
    )

    return {
        "totalUsers": users_count or 0,
        "totalFoods": foods_count or 0,
        "totalOrders": orders_count or 0,
        "totalRevenue": float(revenue or 0),
        "ordersByStatus": by_status,
        "topFoods": [
            {
                "foodId": row.food_id,
                "name": row.name,
                "totalSold": int(row.total_sold or 0),
                "totalRevenue": float(row.total_revenue or 0),
            }
            for row in top_rows.all()
        ],
        "dailyRevenue": [
            {
                "date": str(row.day),
                "countOrders": row.count_orders,
                "totalRevenue": float(row.total_revenue or 0),
            }
            for row in daily_rows.all()
        ],
    }
