import enum
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from ..db.base import Base
from ._time import utcnow


class AuditStatusEnum(str, enum.Enum):
    success = "success"
    failed = "failed"


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    # может отсутствовать: часть ошибок случается до аутентификации
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    action = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    ip_address = Column(String(64), nullable=True)
    method = Column(String(10), nullable=True)
    endpoint = Column(String(512), nullable=True)
    status = Column(String(16), nullable=False, default=AuditStatusEnum.success.value)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
