from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from food_ordering.api.deps import get_current_user, parse_id
from food_ordering.crud.cart import add_to_cart, clear_cart, get_cart, remove_cart_item, update_cart_item
from food_ordering.db.session import get_async_session
from food_ordering.exceptions import error_message
from food_ordering.models import User
from food_ordering.schemas.base import MessageRead
from food_ordering.schemas.cart import CartItemCreate, CartItemRead, CartItemUpdate
from food_ordering.services.audit import RequestMeta, audit_logger

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("/", response_model=List[CartItemRead])
async def read_cart(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    return await get_cart(db, user.id)


@router.post("/", response_model=CartItemRead, status_code=201)
async def add_item(
    item_in: CartItemCreate,
    request: Request,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Добавляет блюдо в корзину (или увеличивает количество).
    """
    meta = RequestMeta.from_request(request, user)
    try:
        entry = await add_to_cart(db, user.id, item_in)
    except Exception as exc:
        audit_logger.failed(meta, "Add To Cart", error_message(exc))
        raise

    audit_logger.success(meta, "Add To Cart", f"Added {item_in.quantity} x {entry.name} to cart")
    return entry


@router.put("/{entry_id}", response_model=CartItemRead)
async def change_quantity(
    entry_id: str,
    item_in: CartItemUpdate,
    request: Request,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    meta = RequestMeta.from_request(request, user)
    try:
        entry = await update_cart_item(db, user.id, parse_id(entry_id, "cart item"), item_in.quantity)
    except Exception as exc:
        audit_logger.failed(meta, "Update Cart", f"Failed - {error_message(exc)} ({entry_id})")
        raise

    audit_logger.success(meta, "Update Cart", f"Set quantity of {entry.name} to {entry.quantity}")
    return entry


@router.delete("/{entry_id}", response_model=MessageRead)
async def remove_item(
    entry_id: str,
    request: Request,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    meta = RequestMeta.from_request(request, user)
    try:
        await remove_cart_item(db, user.id, parse_id(entry_id, "cart item"))
    except Exception as exc:
        audit_logger.failed(meta, "Remove From Cart", f"Failed - {error_message(exc)} ({entry_id})")
        raise

    audit_logger.success(meta, "Remove From Cart", f"Removed cart item {entry_id}")
    return MessageRead(message="Item removed from cart")


@router.delete("/", response_model=MessageRead)
async def empty_cart(
    request: Request,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    meta = RequestMeta.from_request(request, user)
    try:
        removed = await clear_cart(db, user.id)
    except Exception as exc:
        audit_logger.failed(meta, "Clear Cart", f"Failed - {error_message(exc)}")
        raise

    audit_logger.success(meta, "Clear Cart", f"Removed {removed} items from cart")
    return MessageRead(message="Cart cleared")
