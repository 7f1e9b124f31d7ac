from .errors import (
     LedgerError,
     ValidationError,
     NotFound,
     Conflict,
     StoreUnavailable,
     WebhookError,
     AuthError,
     Forbidden,
)
from .ledger_service import PaymentLedger, PaymentRecord, is_paid, generate_unique_id
from .audit_service import AuditLog, AuditEntry
from .cache_service import CacheLayer
from .row_store import RowStoreAdapter, SqlRowBackend

__all__ = [
     "LedgerError",
     "ValidationError",
     "NotFound",
     "Conflict",
     "StoreUnavailable",
     "WebhookError",
     "AuthError",
     "Forbidden",
     "PaymentLedger",
     "PaymentRecord",
     "is_paid",
     "generate_unique_id",
     "AuditLog",
     "AuditEntry",
     "CacheLayer",
     "RowStoreAdapter",
     "SqlRowBackend",
]
