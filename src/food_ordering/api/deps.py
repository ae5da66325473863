from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from food_ordering.db.session import get_async_session
from food_ordering.exceptions import Forbidden, InvalidIdentifier, Unauthorized
from food_ordering.models import RoleEnum, User
from food_ordering.security import decode_access_token

bearer_scheme = HTTPBearer(auto_error=False)


def parse_id(raw: str, entity: str) -> int:
    """
    Разбирает идентификатор из пути.
    Некорректный формат - ошибка клиента (400), а не сервера.
    """
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise InvalidIdentifier(f"Invalid {entity} ID")
    if value <= 0:
        raise InvalidIdentifier(f"Invalid {entity} ID")
    return value


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_async_session),
) -> User:
    if credentials is None:
        raise Unauthorized("Not authorized, no token")

    user_id = decode_access_token(credentials.credentials)
    user = await db.get(User, user_id)
    if user is None or user.is_deleted:
        raise Unauthorized("Not authorized, user not found")
    if not user.is_active:
        raise Forbidden("Account is inactive")
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != RoleEnum.admin:
        raise Forbidden("Access denied: admins only")
    return user
