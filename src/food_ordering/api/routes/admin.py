from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from food_ordering.api.deps import parse_id, require_admin
from food_ordering.crud.audit_log import get_logs
from food_ordering.crud.order import get_dashboard_stats
from food_ordering.crud.review import get_review_analytics
from food_ordering.crud.user import get_users, restore_user, soft_delete_user
from food_ordering.db.session import get_async_session
from food_ordering.exceptions import error_message
from food_ordering.models import AuditStatusEnum, RoleEnum, User
from food_ordering.schemas.audit_log import AuditLogRead
from food_ordering.schemas.user import UserRead, UserStatusChanged
from food_ordering.services.audit import RequestMeta, audit_logger

router = APIRouter(prefix="/admin", tags=["admin"])
dashboard_router = APIRouter(tags=["admin"])


@router.get("/users", response_model=List[UserRead])
async def list_users(
    status: Optional[Literal["active", "inactive", "deleted"]] = Query(None, description="Фильтр по состоянию"),
    role: Optional[RoleEnum] = Query(None, description="Фильтр по роли"),
    search: Optional[str] = Query(None, description="Поиск по имени или email"),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_async_session),
):
    return await get_users(db, status=status, role=role, search=search)


@router.put("/users/{user_id}/delete", response_model=UserStatusChanged)
async def delete_user(
    user_id: str,
    request: Request,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Мягкое удаление пользователя.
    """
    meta = RequestMeta.from_request(request, admin)
    try:
        user = await soft_delete_user(db, parse_id(user_id, "user"), actor_id=admin.id)
    except Exception as exc:
        audit_logger.failed(meta, "Soft Delete User", f"Failed - {error_message(exc)} ({user_id})")
        raise

    audit_logger.success(meta, "Soft Delete User", f"User {user.email} marked as deleted")
    return UserStatusChanged(message="User deleted successfully", user=UserRead.model_validate(user))


@router.put("/users/{user_id}/restore", response_model=UserStatusChanged)
async def restore_user_endpoint(
    user_id: str,
    request: Request,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_async_session),
):
    meta = RequestMeta.from_request(request, admin)
    try:
        user = await restore_user(db, parse_id(user_id, "user"))
    except Exception as exc:
        audit_logger.failed(meta, "Restore User", f"Failed - {error_message(exc)} ({user_id})")
        raise

    audit_logger.success(meta, "Restore User", f"User {user.email} restored")
    return UserStatusChanged(message="User restored successfully", user=UserRead.model_validate(user))


@router.get("/logs", response_model=List[AuditLogRead])
async def list_logs(
    status: Optional[AuditStatusEnum] = Query(None, description="success | failed"),
    action: Optional[str] = Query(None, description="Фильтр по действию"),
    limit: int = Query(100, ge=1, le=1000),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_async_session),
):
    return await get_logs(db, status=status.value if status else None, action=action, limit=limit)


@router.get("/review/analytics")
async def review_analytics(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Статистика отзывов: средняя оценка, распределение, топ блюд, последние отзывы.
    """
    return await get_review_analytics(db)


@dashboard_router.get("/dashboard")
async def dashboard(
    days: int = Query(7, ge=1, le=365, description="Период для выручки по дням"),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Сводные показатели для главной страницы админки.
    """
    return await get_dashboard_stats(db, days=days)
