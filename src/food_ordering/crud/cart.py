import logging
from typing import List

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from food_ordering.exceptions import InvalidRequest, NotFound, PersistenceError
from food_ordering.models import CartItem, FoodItem
from food_ordering.schemas.cart import CartItemCreate

logger = logging.getLogger(__name__)

DEFAULT_SIZE = "Regular"


async def get_cart(db: AsyncSession, user_id: int) -> List[CartItem]:
    result = await db.execute(
        select(CartItem).where(CartItem.user_id == user_id).order_by(CartItem.id)
    )
    return result.scalars().all()


async def _commit(db: AsyncSession) -> None:
    try:
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        raise PersistenceError("Failed to update cart") from exc


async def add_to_cart(db: AsyncSession, user_id: int, item_in: CartItemCreate) -> CartItem:
    """
    Добавляет блюдо в корзину со снимком цены и описания.
    Если такое блюдо того же размера уже есть - увеличивает количество.
    """
    food = await db.get(FoodItem, item_in.food_id)
    if food is None:
        raise NotFound("Food item not found")
    if not food.is_available:
        raise InvalidRequest(f"{food.name} is currently unavailable")

    size = item_in.size or DEFAULT_SIZE
    result = await db.execute(
        select(CartItem).where(
            CartItem.user_id == user_id,
            CartItem.food_id == food.id,
            CartItem.size == size,
        )
    )
    entry = result.scalars().first()

    if entry:
        entry.quantity += item_in.quantity
    else:
        entry = CartItem(
            user_id=user_id,
            food_id=food.id,
            name=food.name,
            category=food.category,
            price=food.price,
            image=food.image,
            prep_time=food.prep_time,
            size=size,
            quantity=item_in.quantity,
        )
        db.add(entry)

    await _commit(db)
    return entry


async def _get_entry(db: AsyncSession, user_id: int, entry_id: int) -> CartItem:
    entry = await db.get(CartItem, entry_id)
    # чужие позиции не видны
    if entry is None or entry.user_id != user_id:
        raise NotFound("Cart item not found")
    return entry


async def update_cart_item(db: AsyncSession, user_id: int, entry_id: int, quantity: int) -> CartItem:
    entry = await _get_entry(db, user_id, entry_id)
    entry.quantity = quantity
    await _commit(db)
    return entry


async def remove_cart_item(db: AsyncSession, user_id: int, entry_id: int) -> None:
    entry = await _get_entry(db, user_id, entry_id)
    await db.delete(entry)
    await _commit(db)


async def clear_cart(db: AsyncSession, user_id: int) -> int:
    result = await db.execute(delete(CartItem).where(CartItem.user_id == user_id))
    await _commit(db)
    logger.info("Cart of user %s cleared (%s items)", user_id, result.rowcount)
    return result.rowcount
