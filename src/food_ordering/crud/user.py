import logging
from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from food_ordering.exceptions import Forbidden, InvalidRequest, NotFound, PersistenceError, Unauthorized
from food_ordering.models import RoleEnum, User
from food_ordering.schemas.user import UserCreate
from food_ordering.security import hash_password, verify_password

logger = logging.getLogger(__name__)


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
    return result.scalars().first()


async def create_user(db: AsyncSession, user_in: UserCreate, role: RoleEnum = RoleEnum.user) -> User:
    """
    Регистрирует пользователя. Email должен быть уникальным.
    """
    if await get_user_by_email(db, user_in.email):
        raise InvalidRequest("User already exists")

    user = User(
        name=user_in.name,
        email=user_in.email.lower(),
        password_hash=hash_password(user_in.password),
        address=user_in.address,
        role=role,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise InvalidRequest("User already exists") from exc
    except SQLAlchemyError as exc:
        await db.rollback()
        raise PersistenceError("Failed to save user") from exc

    logger.info("User %s registered", user.id)
    return user


async def authenticate(db: AsyncSession, email: str, password: str) -> User:
    user = await get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        raise Unauthorized("Invalid email or password")
    if user.is_deleted:
        raise Forbidden("Account has been deleted")
    if not user.is_active:
        raise Forbidden("Account is inactive")
    return user


async def get_users(
    db: AsyncSession,
    status: Optional[str] = None,
    role: Optional[RoleEnum] = None,
    search: Optional[str] = None,
) -> List[User]:
    """
    Список пользователей для админки.
    status: active | inactive | deleted
    """
    stmt = select(User).order_by(User.created_at.desc(), User.id.desc())

    if status == "active":
        stmt = stmt.where(User.is_active.is_(True), User.is_deleted.is_(False))
    elif status == "inactive":
        stmt = stmt.where(User.is_active.is_(False))
    elif status == "deleted":
        stmt = stmt.where(User.is_deleted.is_(True))

    if role:
        stmt = stmt.where(User.role == role)
    if search:
        pattern = f"%{search.lower()}%"
        stmt = stmt.where(or_(func.lower(User.name).like(pattern), func.lower(User.email).like(pattern)))

    result = await db.execute(stmt)
    return result.scalars().all()


async def _set_deleted(db: AsyncSession, user_id: int, deleted: bool) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise NotFound("User not found")

    user.is_deleted = deleted
    # удаление выключает пользователя, восстановление включает обратно
    user.is_active = not deleted
    try:
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        raise PersistenceError("Failed to update user") from exc
    return user


async def soft_delete_user(db: AsyncSession, user_id: int, actor_id: Optional[int] = None) -> User:
    """
    Мягкое удаление: запись остаётся в базе для аудита и восстановления.
    """
    if actor_id is not None and actor_id == user_id:
        raise InvalidRequest("You cannot delete your own account")
    user = await _set_deleted(db, user_id, True)
    logger.info("User %s soft-deleted", user_id)
    return user


async def restore_user(db: AsyncSession, user_id: int) -> User:
    user = await _set_deleted(db, user_id, False)
    logger.info("User %s restored", user_id)
    return user
