from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from food_ordering.api.deps import get_current_user
from food_ordering.crud.user import authenticate, create_user
from food_ordering.db.session import get_async_session
from food_ordering.exceptions import error_message
from food_ordering.models import User
from food_ordering.schemas.user import TokenRead, UserCreate, UserLogin, UserRead
from food_ordering.security import create_access_token
from food_ordering.services.audit import RequestMeta, audit_logger

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=UserRead, status_code=201)
async def register(
    user_in: UserCreate,
    request: Request,
    db: AsyncSession = Depends(get_async_session),
):
    """
    Регистрация нового пользователя с ролью user.
    """
    meta = RequestMeta.from_request(request)
    try:
        user = await create_user(db, user_in)
    except Exception as exc:
        audit_logger.failed(meta, "User Registration", f"Registration failed for {user_in.email}: {error_message(exc)}")
        raise

    meta.user_id = user.id
    audit_logger.success(meta, "User Registration", f"New user registered: {user.email}")
    return user


@router.post("/login", response_model=TokenRead)
async def login(
    credentials: UserLogin,
    request: Request,
    db: AsyncSession = Depends(get_async_session),
):
    """
    Возвращает bearer-токен и данные пользователя.
    """
    meta = RequestMeta.from_request(request)
    try:
        user = await authenticate(db, credentials.email, credentials.password)
    except Exception as exc:
        audit_logger.failed(meta, "User Login", f"Login failed for {credentials.email}: {error_message(exc)}")
        raise

    meta.user_id = user.id
    audit_logger.success(meta, "User Login", f"User logged in: {user.email}")
    return TokenRead(
        access_token=create_access_token(user.id, user.role.value),
        user=UserRead.model_validate(user),
    )


@router.get("/me", response_model=UserRead)
async def me(user: User = Depends(get_current_user)):
    return user
