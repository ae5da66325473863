import logging
from typing import List, Optional

from sqlalchemy import desc, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from food_ordering.exceptions import Conflict, NotFound, PersistenceError
from food_ordering.models import FoodItem, Review, User

logger = logging.getLogger(__name__)


async def get_food_with_reviews(db: AsyncSession, food_id: int) -> Optional[FoodItem]:
    stmt = (
        select(FoodItem)
        .where(FoodItem.id == food_id)
        .options(selectinload(FoodItem.reviews_list))
        .execution_options(populate_existing=True)
    )
    result = await db.execute(stmt)
    return result.scalars().first()


async def get_reviews(db: AsyncSession, food_id: int) -> List[Review]:
    food = await get_food_with_reviews(db, food_id)
    if food is None:
        raise NotFound("Food item not found")
    return list(food.reviews_list)


async def add_food_review(
    db: AsyncSession,
    food_id: int,
    user: User,
    rating: int,
    comment: Optional[str] = None,
) -> FoodItem:
    """
    Добавляет отзыв и пересчитывает reviews (количество) и rating (среднее).
    Один пользователь - один отзыв на блюдо.
    """
    food = await get_food_with_reviews(db, food_id)
    if food is None:
        raise NotFound("Food item not found")

    if any(review.user_id == user.id for review in food.reviews_list):
        raise Conflict("You have already reviewed this food.")

    food.reviews_list.append(
        Review(user_id=user.id, user_name=user.name, rating=rating, comment=comment)
    )
    food.reviews = len(food.reviews_list)
    food.rating = sum(review.rating for review in food.reviews_list) / food.reviews

    try:
        await db.commit()
    except IntegrityError as exc:
        # параллельный отзыв того же пользователя упёрся в уникальный индекс
        await db.rollback()
        raise Conflict("You have already reviewed this food.") from exc
    except SQLAlchemyError as exc:
        await db.rollback()
        raise PersistenceError("Failed to save review") from exc

    logger.info("User %s reviewed food %s with %s", user.id, food_id, rating)
    return await get_food_with_reviews(db, food_id)


async def get_review_analytics(db: AsyncSession, top_limit: int = 5, recent_limit: int = 10) -> dict:
    """
    Сводка по отзывам для админки:
    - общее количество и средняя оценка
    - распределение по оценкам 1..5
    - топ блюд по рейтингу
    - последние отзывы
    """
    totals = (
        await db.execute(select(func.count(Review.id), func.avg(Review.rating)))
    ).one()
    total_reviews = totals[0] or 0
    average_rating = round(float(totals[1] or 0), 2)

    distribution = {str(score): 0 for score in range(1, 6)}
    rows = await db.execute(select(Review.rating, func.count(Review.id)).group_by(Review.rating))
    for score, count in rows.all():
        distribution[str(score)] = count

    top_rows = await db.execute(
        select(FoodItem.id, FoodItem.name, FoodItem.rating, FoodItem.reviews)
        .where(FoodItem.reviews > 0)
        .order_by(desc(FoodItem.rating), desc(FoodItem.reviews))
        .limit(top_limit)
    )
    recent_rows = await db.execute(
        select(Review, FoodItem.name)
        .join(FoodItem, FoodItem.id == Review.food_id)
        .order_by(Review.created_at.desc(), Review.id.desc())
        .limit(recent_limit)
    )

    return {
        "totalReviews": total_reviews,
        "averageRating": average_rating,
        "ratingDistribution": distribution,
        "topRatedFoods": [
            {"foodId": row.id, "name": row.name, "rating": round(row.rating, 2), "reviews": row.reviews}
            for row in top_rows.all()
        ],
        "recentReviews": [
            {
                "id": review.id,
                "foodId": review.food_id,
                "foodName": food_name,
                "userName": review.user_name,
                "rating": review.rating,
                "comment": review.comment,
                "createdAt": review.created_at,
            }
            for review, food_name in recent_rows.all()
        ],
    }
