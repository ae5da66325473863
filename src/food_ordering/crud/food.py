import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from food_ordering.exceptions import InvalidRequest, NotFound, PersistenceError
from food_ordering.models import FoodItem
from food_ordering.schemas.food import FoodCreate, FoodUpdate

logger = logging.getLogger(__name__)

# NOT NULL колонки, которые нельзя обнулить при обновлении
REQUIRED_FIELDS = (
    "name", "description", "category", "price", "is_available",
    "images", "ingredients", "sizes", "allergens",
)


async def get_foods(
    db: AsyncSession,
    category: Optional[str] = None,
    available: Optional[bool] = None,
) -> List[FoodItem]:
    """
    Возвращает каталог блюд с опциональной фильтрацией.
    """
    stmt = select(FoodItem).order_by(FoodItem.id)
    if category:
        stmt = stmt.where(FoodItem.category == category)
    if available is not None:
        stmt = stmt.where(FoodItem.is_available.is_(available))

    result = await db.execute(stmt)
    return result.scalars().all()


async def get_food_by_id(db: AsyncSession, food_id: int) -> FoodItem:
    food = await db.get(FoodItem, food_id)
    if food is None:
        raise NotFound("Food item not found")
    return food


async def _commit(db: AsyncSession, what: str) -> None:
    try:
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        raise PersistenceError(f"Failed to {what} food item") from exc


async def create_food(db: AsyncSession, food_in: FoodCreate) -> FoodItem:
    food = FoodItem(**food_in.model_dump())
    db.add(food)
    await _commit(db, "create")
    await db.refresh(food)
    logger.info("Food item %s created: %s", food.id, food.name)
    return food


async def update_food(db: AsyncSession, food_id: int, food_in: FoodUpdate) -> FoodItem:
    """
    Частичное обновление: меняются только переданные поля.
    Необязательные поля (image, nutrition_info и т.п.) можно очистить, передав null.
    """
    changes = food_in.model_dump(exclude_unset=True)
    cleared = sorted(key for key in REQUIRED_FIELDS if key in changes and changes[key] is None)
    if cleared:
        raise InvalidRequest(f"Fields cannot be empty: {', '.join(cleared)}")

    food = await get_food_by_id(db, food_id)
    for key, value in changes.items():
        setattr(food, key, value)

    await _commit(db, "update")
    await db.refresh(food)
    return food


async def delete_food(db: AsyncSession, food_id: int) -> FoodItem:
    food = await get_food_by_id(db, food_id)
    await db.delete(food)
    await _commit(db, "delete")
    logger.info("Food item %s deleted", food_id)
    return food
