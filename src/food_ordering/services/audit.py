"""
Журнал действий (audit log).

Запись выполняется в отдельной asyncio-задаче со своей сессией:
основной запрос её не ждёт, а ошибки записи только логируются.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Set

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from food_ordering.db.session import AsyncSessionLocal
from food_ordering.models.audit_log import AuditLog, AuditStatusEnum

logger = logging.getLogger(__name__)


@dataclass
class RequestMeta:
    user_id: Optional[int]
    ip_address: Optional[str]
    method: str
    endpoint: str

    @classmethod
    def from_request(cls, request: Request, user=None) -> "RequestMeta":
        endpoint = request.url.path
        if request.url.query:
            endpoint = f"{endpoint}?{request.url.query}"
        return cls(
            user_id=getattr(user, "id", None),
            ip_address=request.client.host if request.client else None,
            method=request.method,
            endpoint=endpoint,
        )


class AuditLogger:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory
        self._pending: Set[asyncio.Task] = set()

    def bind(self, session_factory: async_sessionmaker[AsyncSession]) -> async_sessionmaker[AsyncSession]:
        """Меняет фабрику сессий, возвращает предыдущую."""
        previous, self._session_factory = self._session_factory, session_factory
        return previous

    def record(
        self,
        meta: RequestMeta,
        action: str,
        description: str,
        status: AuditStatusEnum = AuditStatusEnum.success,
    ) -> Optional[asyncio.Task]:
        entry = AuditLog(
            user_id=meta.user_id,
            action=action,
            description=description,
            ip_address=meta.ip_address,
            method=meta.method,
            endpoint=meta.endpoint,
            status=status.value,
        )
        try:
            task = asyncio.get_running_loop().create_task(self._write(entry))
        except RuntimeError:
            logger.warning("No running event loop, audit entry dropped: %s", action)
            return None

        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    def success(self, meta: RequestMeta, action: str, description: str) -> Optional[asyncio.Task]:
        return self.record(meta, action, description, AuditStatusEnum.success)

    def failed(self, meta: RequestMeta, action: str, description: str) -> Optional[asyncio.Task]:
        return self.record(meta, action, description, AuditStatusEnum.failed)

    async def _write(self, entry: AuditLog) -> None:
        try:
            async with self._session_factory() as session:
                session.add(entry)
                await session.commit()
        except Exception:
            logger.exception("Failed to write audit log entry %r", entry.action)

    async def drain(self) -> None:
        """Дожидается всех незавершённых записей."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


audit_logger = AuditLogger(AsyncSessionLocal)
