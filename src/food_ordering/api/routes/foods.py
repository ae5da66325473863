from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from food_ordering.api.deps import get_current_user, parse_id, require_admin
from food_ordering.crud.food import create_food, delete_food, get_food_by_id, get_foods, update_food
from food_ordering.crud.review import add_food_review, get_reviews
from food_ordering.db.session import get_async_session
from food_ordering.exceptions import error_message
from food_ordering.models import User
from food_ordering.schemas.base import MessageRead
from food_ordering.schemas.food import FoodCreate, FoodCreated, FoodRead, FoodUpdate
from food_ordering.schemas.review import ReviewAdded, ReviewCreate, ReviewRead
from food_ordering.services.audit import RequestMeta, audit_logger

router = APIRouter(prefix="/foods", tags=["foods"])


@router.get("/", response_model=List[FoodRead])
async def list_foods(
    category: Optional[str] = Query(None, description="Фильтр по категории"),
    available: Optional[bool] = Query(None, description="Только доступные / недоступные"),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Публичный каталог блюд.
    """
    return await get_foods(db, category=category, available=available)


@router.get("/{food_id}", response_model=FoodRead)
async def get_food(food_id: str, db: AsyncSession = Depends(get_async_session)):
    return await get_food_by_id(db, parse_id(food_id, "food"))


@router.post("/", response_model=FoodCreated, status_code=201)
async def add_food(
    food_in: FoodCreate,
    request: Request,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_async_session),
):
    meta = RequestMeta.from_request(request, admin)
    try:
        food = await create_food(db, food_in)
    except Exception as exc:
        audit_logger.failed(meta, "Add Food Error", error_message(exc))
        raise

    audit_logger.success(meta, "Add Food", f"Added new food item: {food.name}")
    return FoodCreated(message="Food item added successfully!", food=FoodRead.model_validate(food))


@router.put("/{food_id}", response_model=FoodRead)
async def edit_food(
    food_id: str,
    food_in: FoodUpdate,
    request: Request,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Частичное обновление блюда.
    """
    meta = RequestMeta.from_request(request, admin)
    try:
        food = await update_food(db, parse_id(food_id, "food"), food_in)
    except Exception as exc:
        audit_logger.failed(meta, "Update Food Attempt", f"Failed to update food {food_id}: {error_message(exc)}")
        raise

    audit_logger.success(meta, "Update Food", f"Updated food item: {food.name}")
    return food


@router.delete("/{food_id}", response_model=MessageRead)
async def remove_food(
    food_id: str,
    request: Request,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_async_session),
):
    meta = RequestMeta.from_request(request, admin)
    try:
        food = await delete_food(db, parse_id(food_id, "food"))
    except Exception as exc:
        audit_logger.failed(meta, "Delete Food Attempt", f"Failed to delete food {food_id}: {error_message(exc)}")
        raise

    audit_logger.success(meta, "Delete Food", f"Deleted food item: {food.name}")
    return MessageRead(message="Food deleted successfully")


@router.get("/{food_id}/reviews", response_model=List[ReviewRead])
async def list_reviews(food_id: str, db: AsyncSession = Depends(get_async_session)):
    return await get_reviews(db, parse_id(food_id, "food"))


@router.post("/{food_id}/review", response_model=ReviewAdded, status_code=201)
async def review_food(
    food_id: str,
    review_in: ReviewCreate,
    request: Request,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Добавляет отзыв и возвращает все отзывы блюда с новым средним рейтингом.
    Повторный отзыв того же пользователя - 409.
    """
    meta = RequestMeta.from_request(request, user)
    try:
        food = await add_food_review(
            db, parse_id(food_id, "food"), user, review_in.rating, review_in.comment
        )
    except Exception as exc:
        audit_logger.failed(meta, "Add Food Review Error", error_message(exc))
        raise

    audit_logger.success(
        meta, "Add Food Review", f'User {user.name} reviewed "{food.name}" with {review_in.rating} stars'
    )
    return ReviewAdded(
        message="Review added successfully!",
        reviews=[ReviewRead.model_validate(review) for review in food.reviews_list],
        average_rating=food.rating,
    )
