# schemas/audit.py
from typing import Any, Dict, List

from schemas.base import CamelModel


class AuditEntryResponse(CamelModel):
     payment_id: str
     action: str
     actor: str
     timestamp: str
     changes: Dict[str, Dict[str, Any]]


class AuditLogResponse(CamelModel):
     payment_id: str
     logs: List[AuditEntryResponse]
