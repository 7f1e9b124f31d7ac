# services/ledger_service.py
"""
Payment Ledger Service - the only writer of payment business state.

Records are addressed by their stable uniqueId. Every operation resolves the
uniqueId to the record's current row index right before touching the store,
so no positional index is ever held across calls.

Each mutation follows the same order:
1. Write the row (or the changed cells) through the row store adapter
2. Append an audit entry (edit entries only when something changed)
3. Invalidate the payment-list cache
4. Publish a PaymentEvent for notifiers

Read-modify-write is not atomic: two concurrent updates of the same record
can interleave and one of them is lost. There is no version stamp.
"""
import hashlib
import logging
import secrets
import time
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from config import DEFAULT_DUE_DATE, TIMEZONE
from services.audit_service import AuditEntry, AuditLog
from services.cache_service import CacheLayer
from services.column_schema import PAYMENTS, TableSchema
from services.errors import LedgerError, NotFound, ValidationError
from services.events import EventPublisher, PaymentEvent
from services.row_store import RowStoreAdapter
from utils.formatting import (
     add_hours,
     format_number,
     format_timestamp,
     in_range,
     multiply,
     parse_number,
     parse_timestamp,
     plain_number,
     round_money,
     to_json_number,
)

logger = logging.getLogger(__name__)

PAYMENT_LIST_KEY = "all"

# Audit diffs name the paid flag after its sheet column
PAID_FLAG_KEY = "columnQ"

PAID_TRUE = "TRUE"
PAID_FALSE = "FALSE"
TRUTHY_STRINGS = frozenset({"true", "1", "yes", "y"})

NUMERIC_FIELDS = ("quantity", "unitPrice")
TEXT_FIELDS = (
     "ownerId",
     "source",
     "method",
     "currency",
     "cardNumber",
     "ibanOrSheba",
     "payeeName",
     "walletAddress",
     "externalWalletAddress",
     "note",
     "adminNote",
)
PATCHABLE_FIELDS = ("dueAt",) + TEXT_FIELDS + NUMERIC_FIELDS + ("total", "paidFlag")


def is_paid(raw) -> bool:
     """
     The one truthiness rule for the paid flag.

     True for boolean True, numeric 1 and the strings "true", "1", "yes", "y"
     (case and surrounding whitespace ignored). Everything else is unpaid.
     """
     if isinstance(raw, bool):
          return raw
     if isinstance(raw, (int, float, Decimal)):
          return raw == 1
     if isinstance(raw, str):
          return raw.strip().lower() in TRUTHY_STRINGS
     return False


def encode_paid(value: bool) -> str:
     return PAID_TRUE if value else PAID_FALSE


def generate_unique_id() -> str:
     """12 hex chars from sha256(wall-clock ns + 16 random bytes)."""
     seed = str(time.time_ns()).encode() + secrets.token_bytes(16)
     return hashlib.sha256(seed).hexdigest()[:12]


def normalize_due_at(value) -> str:
     """
     Accept a stored-format timestamp or an ISO 8601 string and return the
     stored format.

     Raises:
          ValidationError: If the value is neither.
     """
     if isinstance(value, datetime):
          return format_timestamp(value)
     text = str(value).strip()
     if parse_timestamp(text) is not None:
          return text
     try:
          parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
     except ValueError:
          raise ValidationError(
               f"dueAt must be 'DD/MM/YYYY HH:MM:SS' or ISO 8601, got {text!r}", field="dueAt"
          ) from None
     if parsed.tzinfo is None:
          parsed = parsed.replace(tzinfo=TIMEZONE)
     try:
          return format_timestamp(parsed)
     except OverflowError:
          raise ValidationError(f"dueAt is out of range, got {text!r}", field="dueAt") from None


@dataclass
class PaymentRecord:
     """A payment row parsed at the storage boundary."""

     created_at: str
     due_at: str
     owner_id: str
     quantity: Optional[Decimal]
     unit_price: Optional[Decimal]
     total: Optional[Decimal]
     source: str
     method: str
     currency: str
     card_number: str
     iban_or_sheba: str
     payee_name: str
     unique_id: str
     note: str
     status: str
     paid: bool
     wallet_address: str
     external_wallet_address: str
     admin_note: str
     row_index: Optional[int] = None

     @classmethod
     def from_row(cls, row, row_index: Optional[int] = None, schema: TableSchema = PAYMENTS) -> "PaymentRecord":
          values = schema.to_record(row)
          text = lambda name: str(values[name]).strip()
          return cls(
               created_at=text("createdAt"),
               due_at=text("dueAt"),
               owner_id=text("ownerId"),
               quantity=parse_number(values["quantity"]),
               unit_price=parse_number(values["unitPrice"]),
               total=parse_number(values["total"]),
               source=text("source"),
               method=text("method"),
               currency=text("currency"),
               card_number=text("cardNumber"),
               iban_or_sheba=text("ibanOrSheba"),
               payee_name=text("payeeName"),
               unique_id=text("uniqueId"),
               note=text("note"),
               status=text("status"),
               paid=is_paid(values["paidFlag"]),
               wallet_address=text("walletAddress"),
               external_wallet_address=text("externalWalletAddress"),
               admin_note=text("adminNote"),
               row_index=row_index,
          )

     @property
     def created(self) -> Optional[datetime]:
          return parse_timestamp(self.created_at)

     def to_dict(self) -> Dict[str, Any]:
          """Read-path wire shape: camelCase, display-formatted numbers, boolean paid flag."""
          return {
               "uniqueId": self.unique_id,
               "createdAt": self.created_at,
               "dueAt": self.due_at,
               "ownerId": self.owner_id,
               "quantity": format_number(self.quantity, exact=True),
               "unitPrice": format_number(self.unit_price, exact=True),
               "total": format_number(self.total),
               "source": self.source,
               "method": self.method,
               "currency": self.currency,
               "cardNumber": self.card_number,
               "ibanOrSheba": self.iban_or_sheba,
               "payeeName": self.payee_name,
               "note": self.note,
               "status": self.status,
               "paidFlag": self.paid,
               "walletAddress": self.wallet_address,
               "externalWalletAddress": self.external_wallet_address,
               "adminNote": self.admin_note,
          }

     def to_payload(self) -> Dict[str, Any]:
          """Mutation/event shape: same keys, bare numeric strings."""
          payload = self.to_dict()
          payload["quantity"] = plain_number(self.quantity, exact=True)
          payload["unitPrice"] = plain_number(self.unit_price, exact=True)
          payload["total"] = plain_number(self.total)
          return payload


def _required_number(data: Dict[str, Any], name: str) -> Decimal:
     raw = data.get(name)
     if raw is None or (isinstance(raw, str) and not raw.strip()):
          raise ValidationError(f"{name} is required", field=name)
     return _number(raw, name)


def _number(raw, name: str) -> Decimal:
     number = parse_number(raw)
     if number is None:
          raise ValidationError(f"{name} must be numeric, got {raw!r}", field=name)
     if not in_range(number):
          raise ValidationError(f"{name} is out of range, got {raw!r}", field=name)
     return number


def _text(value) -> str:
     return "" if value is None else str(value).strip()


class PaymentLedger:
     """
     Args:
          store: Row store adapter shared with the other services.
          audit: Audit log written after every successful mutation.
          cache: Cache layer; only the payment-list namespace is used here.
          payment_info: Supplies the default due-date hours (``default_due_hours()``).
          users: Resolves actor display names (``get_nickname(discord_id)``).
          events: Publisher notified after each mutation. Optional.
     """

     def __init__(
          self,
          store: RowStoreAdapter,
          audit: AuditLog,
          cache: CacheLayer,
          payment_info=None,
          users=None,
          events: Optional[EventPublisher] = None,
          schema: TableSchema = PAYMENTS,
     ):
          self._store = store
          self._audit = audit
          self._cache = cache
          self._payment_info = payment_info
          self._users = users
          self._events = events
          self._schema = schema

     # ------------------------------------------------------------------
     # Reads
     # ------------------------------------------------------------------

     def records(self) -> List[PaymentRecord]:
          """Every non-blank payment row, uncached, in store order."""
          records = []
          for index, row in enumerate(self._store.list_rows(self._schema)):
               if not any(str(cell).strip() for cell in row):
                    continue
               records.append(PaymentRecord.from_row(row, index, self._schema))
          return records

     def list_payments(self) -> List[Dict[str, Any]]:
          """All payments in wire shape, newest first. Cached in the payment-list namespace."""
          cached = self._cache.payment_list.get(PAYMENT_LIST_KEY)
          if cached is not None:
               logger.debug("Payment list served from cache")
               return cached

          oldest = datetime.min.replace(tzinfo=TIMEZONE)
          records = sorted(self.records(), key=lambda r: r.created or oldest, reverse=True)
          payments = [record.to_dict() for record in records]
          self._cache.payment_list.set(PAYMENT_LIST_KEY, payments)
          return payments

     def locate(self, unique_id: str) -> PaymentRecord:
          """
          Resolve a uniqueId to its record and current row index.

          Raises:
               NotFound: If no row carries the id.
          """
          index, row = self._find(unique_id)
          return PaymentRecord.from_row(row, index, self._schema)

     def _find(self, unique_id: str):
          found = self._store.find_row(self._schema, "uniqueId", unique_id)
          if found is None:
               raise NotFound(f"Payment {unique_id} not found", field="uniqueId")
          return found

     def get(self, unique_id: str) -> Dict[str, Any]:
          return self.locate(unique_id).to_dict()

     def history(self, unique_id: str) -> List[AuditEntry]:
          return self._audit.query(unique_id)

     # ------------------------------------------------------------------
     # Mutations
     # ------------------------------------------------------------------

     def create(self, data: Dict[str, Any], actor_id: Optional[str] = None) -> Dict[str, Any]:
          """
          Create a payment. The total is always quantity x unitPrice; a
          client-supplied total is ignored.

          Returns:
               {"uniqueId": ..., "total": <bare numeric string>}

          Raises:
               ValidationError: If ownerId, quantity or unitPrice is missing or not numeric.
          """
          owner_id = _text(data.get("ownerId"))
          if not owner_id:
               raise ValidationError("ownerId is required", field="ownerId")
          quantity = _required_number(data, "quantity")
          unit_price = _required_number(data, "unitPrice")
          total = round_money(multiply(quantity, unit_price))

          if "total" in data and data["total"] not in (None, ""):
               logger.debug("Ignoring client-supplied total on create")

          due_at = data.get("dueAt")
          if due_at not in (None, ""):
               due_at = normalize_due_at(due_at)
          else:
               due_at = add_hours(self._default_due_hours())

          unique_id = generate_unique_id()
          values = {field: _text(data.get(field)) for field in TEXT_FIELDS}
          values.update({
               "createdAt": format_timestamp(),
               "dueAt": due_at,
               "ownerId": owner_id,
               "quantity": format_number(quantity, exact=True),
               "unitPrice": format_number(unit_price, exact=True),
               "total": format_number(total),
               "uniqueId": unique_id,
               "status": "",
               "paidFlag": PAID_FALSE,
          })
          self._store.append_row(self._schema, self._schema.to_buffer(values))

          actor = self._actor_name(actor_id, owner_id)
          self._audit.append(unique_id, "create", actor, {})
          self._cache.payment_list.invalidate()
          logger.info("Created payment %s for %s (total %s)", unique_id, owner_id, format_number(total))

          record = PaymentRecord.from_row(self._schema.to_buffer(values), schema=self._schema)
          self._publish("create", unique_id, actor, record.to_payload())
          return {"uniqueId": unique_id, "total": plain_number(total)}

     def update(self, unique_id: str, patch: Dict[str, Any], actor_id: Optional[str] = None) -> Dict[str, Dict[str, Any]]:
          """
          Apply a partial update and return the recorded diff.

          Only fields whose normalized value differs are written and audited.
          Changing quantity or unitPrice recomputes the total unless the patch
          carries an explicit total, which is stored as given and audited as
          an override.

          Raises:
               NotFound: If the uniqueId does not resolve.
               ValidationError: If a numeric field is not numeric.
          """
          index, row = self._find(unique_id)
          record = PaymentRecord.from_row(row, index, self._schema)
          current = self._schema.to_record(row)

          ignored = [name for name in patch if name not in PATCHABLE_FIELDS]
          if ignored:
               logger.debug("Ignoring non-patchable fields %s for %s", ignored, unique_id)

          changes: Dict[str, Dict[str, Any]] = {}
          cells: Dict[int, Any] = {}

          if patch.get("dueAt") not in (None, ""):
               new_due = normalize_due_at(patch["dueAt"])
               if new_due != record.due_at:
                    changes["dueAt"] = {"old": record.due_at, "new": new_due}
                    cells[self._schema.offset("dueAt")] = new_due

          for name in TEXT_FIELDS:
               if name not in patch:
                    continue
               old, new = _text(current[name]), _text(patch[name])
               if name == "ownerId" and not new:
                    raise ValidationError("ownerId cannot be empty", field="ownerId")
               if old != new:
                    changes[name] = {"old": old, "new": new}
                    cells[self._schema.offset(name)] = new

          numbers = {"quantity": record.quantity, "unitPrice": record.unit_price}
          for name in NUMERIC_FIELDS:
               if name not in patch or patch[name] in (None, ""):
                    continue
               new = _number(patch[name], name)
               if new != numbers[name]:
                    changes[name] = {"old": to_json_number(numbers[name]), "new": to_json_number(new)}
                    cells[self._schema.offset(name)] = format_number(new, exact=True)
                    numbers[name] = new

          if patch.get("total") not in (None, ""):
               override = round_money(_number(patch["total"], "total"))
               if override != record.total:
                    changes["total"] = {
                         "old": to_json_number(record.total),
                         "new": to_json_number(override),
                         "override": True,
                    }
                    cells[self._schema.offset("total")] = format_number(override)
                    logger.warning("Manual total override on %s: %s -> %s", unique_id, record.total, override)
          elif "quantity" in changes or "unitPrice" in changes:
               if numbers["quantity"] is not None and numbers["unitPrice"] is not None:
                    total = round_money(multiply(numbers["quantity"], numbers["unitPrice"]))
                    if total != record.total:
                         changes["total"] = {"old": to_json_number(record.total), "new": to_json_number(total)}
                         cells[self._schema.offset("total")] = format_number(total)

          if "paidFlag" in patch and patch["paidFlag"] is not None:
               new_paid = is_paid(patch["paidFlag"])
               if new_paid != record.paid:
                    changes[PAID_FLAG_KEY] = {"old": record.paid, "new": new_paid}
                    cells[self._schema.offset("paidFlag")] = encode_paid(new_paid)

          if cells:
               self._store.update_cells(self._schema, record.row_index, cells)

          actor = self._actor_name(actor_id, record.owner_id)
          if changes:
               self._audit.append(unique_id, "edit", actor, changes)
          self._cache.payment_list.invalidate()

          if changes:
               logger.info("Updated payment %s: %s", unique_id, ", ".join(changes))
               self._publish("update", unique_id, actor, {"changes": changes})
          return changes

     def set_paid_flag(self, unique_id: str, value: bool, actor_id: Optional[str] = None) -> bool:
          """
          Store the paid flag in its canonical encoding.

          The cell is always rewritten, so legacy spellings ("yes", "1") are
          normalized even when the flag does not change. Returns whether the
          normalized value changed (and an audit entry was written).
          """
          if not isinstance(value, bool):
               raise ValidationError("paid flag must be a boolean", field="paidFlag")
          record = self.locate(unique_id)
          self._store.update_cells(self._schema, record.row_index, {
               self._schema.offset("paidFlag"): encode_paid(value),
          })

          changed = record.paid != value
          actor = self._actor_name(actor_id, record.owner_id)
          if changed:
               self._audit.append(unique_id, "edit", actor, {PAID_FLAG_KEY: {"old": record.paid, "new": value}})
          self._cache.payment_list.invalidate()

          if changed:
               logger.info("Payment %s marked %s", unique_id, "paid" if value else "unpaid")
               self._publish("update", unique_id, actor, {"changes": {PAID_FLAG_KEY: {"old": record.paid, "new": value}}})
          return changed

     def delete(self, unique_id: str, actor_id: Optional[str] = None) -> Dict[str, Any]:
          """
          Remove the payment row. Its audit history is kept.

          Returns the deleted record in wire shape.
          """
          record = self.locate(unique_id)
          self._store.delete_row(self._schema, record.row_index)

          actor = self._actor_name(actor_id, record.owner_id)
          self._audit.append(unique_id, "delete", actor, {})
          self._cache.payment_list.invalidate()
          logger.info("Deleted payment %s", unique_id)

          self._publish("delete", unique_id, actor, record.to_payload())
          return record.to_dict()

     # ------------------------------------------------------------------
     # Collaborators
     # ------------------------------------------------------------------

     def _default_due_hours(self) -> float:
          if self._payment_info is None:
               return DEFAULT_DUE_DATE["hours"]
          return self._payment_info.default_due_hours()

     def _actor_name(self, actor_id: Optional[str], owner_id: str) -> str:
          actor_id = _text(actor_id)
          if not actor_id:
               return owner_id
          if self._users is None:
               return actor_id
          try:
               return self._users.get_nickname(actor_id) or actor_id
          except LedgerError as e:
               logger.warning("Could not resolve nickname for %s: %s", actor_id, e)
               return actor_id

     def _publish(self, action: str, unique_id: str, actor: str, payload: Dict[str, Any]) -> None:
          if self._events is None:
               return
          self._events.publish(PaymentEvent(action=action, payment_id=unique_id, actor=actor, payload=payload))
