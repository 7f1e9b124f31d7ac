# services/analytics_service.py
"""
Analytics over the payment ledger.

Every figure is derived from ``PaymentLedger.records()`` and the ledger's
``is_paid`` decision (``PaymentRecord.paid``), so the dashboards always
agree with the payment list. Amounts are payment totals.
"""
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional

from services.errors import ValidationError
from services.ledger_service import PaymentLedger, PaymentRecord
from utils.formatting import to_json_number

GROUPINGS = ("day", "week", "month")


def _amount(record: PaymentRecord) -> Decimal:
     return record.total if record.total is not None else Decimal("0")


def _bucket() -> Dict[str, Any]:
     return {
          "totalPayments": 0,
          "paidPayments": 0,
          "unpaidPayments": 0,
          "totalAmount": Decimal("0"),
          "paidAmount": Decimal("0"),
     }


def _add(bucket: Dict[str, Any], record: PaymentRecord) -> None:
     amount = _amount(record)
     bucket["totalPayments"] += 1
     bucket["totalAmount"] += amount
     if record.paid:
          bucket["paidPayments"] += 1
          bucket["paidAmount"] += amount
     else:
          bucket["unpaidPayments"] += 1


def _finish(bucket: Dict[str, Any]) -> Dict[str, Any]:
     bucket["totalAmount"] = to_json_number(bucket["totalAmount"])
     bucket["paidAmount"] = to_json_number(bucket["paidAmount"])
     return bucket


def week_start(day: date) -> date:
     """Sunday on or before ``day``."""
     return day - timedelta(days=(day.weekday() + 1) % 7)


class AnalyticsService:
     def __init__(self, ledger: PaymentLedger):
          self._ledger = ledger

     def _records(self, start: Optional[date] = None, end: Optional[date] = None) -> List[PaymentRecord]:
          """Ledger records, optionally limited to createdAt days in [start, end]."""
          records = self._ledger.records()
          if start is None and end is None:
               return records

          selected = []
          for record in records:
               created = record.created
               if created is None:
                    continue
               day = created.date()
               if start is not None and day < start:
                    continue
               if end is not None and day > end:
                    continue
               selected.append(record)
          return selected

     def overview(self, start: Optional[date] = None, end: Optional[date] = None) -> Dict[str, Any]:
          records = self._records(start, end)
          paid = [record for record in records if record.paid]
          return {
               "totalPayments": len(records),
               "paidPayments": len(paid),
               "unpaidPayments": len(records) - len(paid),
               "totalRevenue": to_json_number(sum((_amount(record) for record in paid), Decimal("0"))),
          }

     def by_owner(self, start: Optional[date] = None, end: Optional[date] = None) -> List[Dict[str, Any]]:
          """Per-owner totals, largest total amount first."""
          owners: Dict[str, Dict[str, Any]] = {}
          for record in self._records(start, end):
               if not record.owner_id:
                    continue
               bucket = owners.setdefault(record.owner_id, {"ownerId": record.owner_id, **_bucket()})
               _add(bucket, record)
          ordered = sorted(owners.values(), key=lambda bucket: bucket["totalAmount"], reverse=True)
          return [_finish(bucket) for bucket in ordered]

     def by_source(self, start: Optional[date] = None, end: Optional[date] = None) -> List[Dict[str, Any]]:
          sources: Dict[str, Dict[str, Any]] = {}
          for record in self._records(start, end):
               source = record.source or "Unknown"
               bucket = sources.setdefault(source, {"source": source, **_bucket()})
               _add(bucket, record)
          return [_finish(bucket) for bucket in sources.values()]

     def timeline(self, start: Optional[date] = None, end: Optional[date] = None, group_by: str = "day") -> List[Dict[str, Any]]:
          """Count and amount per day, week (starting Sunday) or month, oldest first."""
          if group_by not in GROUPINGS:
               raise ValidationError(f"groupBy must be one of: {', '.join(GROUPINGS)}", field="groupBy")

          points: Dict[str, Dict[str, Any]] = {}
          for record in self._records(start, end):
               created = record.created
               if created is None:
                    continue
               day = created.date()
               if group_by == "month":
                    key = day.strftime("%Y-%m")
               elif group_by == "week":
                    key = week_start(day).isoformat()
               else:
                    key = day.isoformat()
               point = points.setdefault(key, {"date": key, "count": 0, "amount": Decimal("0")})
               point["count"] += 1
               point["amount"] += _amount(record)

          return [
               {**point, "amount": to_json_number(point["amount"])}
               for _, point in sorted(points.items())
          ]

     def status(self) -> Dict[str, int]:
          records = self._records()
          paid = sum(1 for record in records if record.paid)
          return {"paid": paid, "unpaid": len(records) - paid}
