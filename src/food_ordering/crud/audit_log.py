from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from food_ordering.models import AuditLog


async def get_logs(
    db: AsyncSession,
    status: Optional[str] = None,
    action: Optional[str] = None,
    user_id: Optional[int] = None,
    limit: int = 100,
) -> List[AuditLog]:
    """
    Журнал действий для админки, новые записи первыми.
    """
    stmt = select(AuditLog).order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
    if status:
        stmt = stmt.where(AuditLog.status == status)
    if action:
        stmt = stmt.where(AuditLog.action == action)
    if user_id is not None:
        stmt = stmt.where(AuditLog.user_id == user_id)
    stmt = stmt.limit(limit)

    result = await db.execute(stmt)
    return result.scalars().all()
