from datetime import datetime
from typing import Optional

from .base import CamelModel


class AuditLogRead(CamelModel):
    id: int
    user_id: Optional[int] = None
    action: str
    description: Optional[str] = None
    ip_address: Optional[str] = None
    method: Optional[str] = None
    endpoint: Optional[str] = None
    status: str
    created_at: datetime
