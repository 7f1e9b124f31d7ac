# services/audit_service.py
"""
Audit Log - append-only history of payment mutations.

Entries live in the Payment Logs table, one row each:
paymentId | action | actor | timestamp | changes (JSON).

Entries are never updated or deleted, and they outlive the payment they
describe: deleting a payment leaves its history queryable.
"""
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from services.column_schema import PAYMENT_LOGS
from services.errors import ValidationError
from services.row_store import RowStoreAdapter
from utils.formatting import format_timestamp

logger = logging.getLogger(__name__)

ACTIONS = ("create", "edit", "delete")


@dataclass(frozen=True)
class AuditEntry:
     """One immutable log line."""

     payment_id: str
     action: str
     actor: str
     timestamp: str
     changes: Dict[str, Dict[str, Any]] = field(default_factory=dict)

     def to_dict(self) -> Dict[str, Any]:
          return {
               "paymentId": self.payment_id,
               "action": self.action,
               "actor": self.actor,
               "timestamp": self.timestamp,
               "changes": self.changes,
          }


class AuditLog:
     """Append/query over the Payment Logs table."""

     def __init__(self, store: RowStoreAdapter, schema=PAYMENT_LOGS):
          self._store = store
          self._schema = schema

     def append(self, payment_id: str, action: str, actor: str, changes: Optional[Dict[str, Any]] = None) -> AuditEntry:
          """
          Append one entry.

          Raises:
               ValidationError: If payment_id or actor is empty, or the action is unknown.
          """
          if not payment_id or not str(payment_id).strip():
               raise ValidationError("paymentId is required for an audit entry", field="paymentId")
          if not actor or not str(actor).strip():
               raise ValidationError("actor is required for an audit entry", field="actor")
          if action not in ACTIONS:
               raise ValidationError(f"Unknown audit action {action!r}", field="action")

          entry = AuditEntry(
               payment_id=str(payment_id),
               action=action,
               actor=str(actor),
               timestamp=format_timestamp(),
               changes=dict(changes or {}),
          )
          self._store.append_row(
               self._schema,
               self._schema.to_buffer({
                    "paymentId": entry.payment_id,
                    "action": entry.action,
                    "actor": entry.actor,
                    "timestamp": entry.timestamp,
                    "changes": json.dumps(entry.changes, ensure_ascii=False),
               }),
          )
          logger.info("Audit %s %s by %s", entry.action, entry.payment_id, entry.actor)
          return entry

     def query(self, payment_id: str) -> List[AuditEntry]:
          """Entries for one payment in store order (oldest first)."""
          wanted = str(payment_id).strip()
          entries = []
          for row in self._store.list_rows(self._schema):
               record = self._schema.to_record(row)
               if str(record["paymentId"]).strip() != wanted:
                    continue
               entries.append(AuditEntry(
                    payment_id=str(record["paymentId"]),
                    action=str(record["action"]),
                    actor=str(record["actor"]),
                    timestamp=str(record["timestamp"]),
                    changes=_load_changes(record["changes"]),
               ))
          return entries


def _load_changes(raw) -> Dict[str, Any]:
     if isinstance(raw, dict):
          return raw
     if not raw:
          return {}
     try:
          changes = json.loads(raw)
     except (TypeError, ValueError):
          logger.warning("Unreadable audit changes cell: %r", raw)
          return {}
     return changes if isinstance(changes, dict) else {}
