# services/payment_info_service.py
"""
Payment Info - admin-maintained option lists read from the Payment Info table.

Columns: payment source | payment method | currency | due-date title | hours.
Each column is read independently; blank cells are skipped and values are
de-duplicated in first-seen order.
"""
import logging
from typing import Any, Dict, List

from config import DEFAULT_DUE_DATE
from services.column_schema import PAYMENT_INFO
from services.errors import StoreUnavailable
from services.row_store import RowStoreAdapter
from utils.formatting import parse_number

logger = logging.getLogger(__name__)


def _default_options() -> Dict[str, Any]:
     return {
          "paymentSources": [],
          "paymentMethods": [],
          "currencies": [],
          "dueDateOptions": [],
          "dueDateInfo": dict(DEFAULT_DUE_DATE),
     }


# A century; anything longer cannot be added to a timestamp
MAX_DUE_HOURS = 24 * 365 * 100


def _hours(value) -> float:
     number = parse_number(value)
     if number is None:
          return 0
     if number > MAX_DUE_HOURS:
          logger.warning("Ignoring due-date option of %s hours", number)
          return 0
     return int(number) if number == number.to_integral_value() else float(number)


class PaymentInfoService:
     def __init__(self, store: RowStoreAdapter, schema=PAYMENT_INFO):
          self._store = store
          self._schema = schema

     def options(self) -> Dict[str, Any]:
          """Option lists plus the default due-date info. Falls back to defaults when the table cannot be read."""
          try:
               rows = self._store.list_rows(self._schema)
          except StoreUnavailable as e:
               logger.error("Error fetching Payment Info options: %s", e)
               return _default_options()

          sources: List[str] = []
          methods: List[str] = []
          currencies: List[str] = []
          due_options: List[Dict[str, Any]] = []

          for row in rows:
               record = self._schema.to_record(row)
               for values, name in ((sources, "source"), (methods, "method"), (currencies, "currency")):
                    value = str(record[name]).strip()
                    if value and value not in values:
                         values.append(value)

               title = str(record["dueTitle"]).strip()
               hours = _hours(record["dueHours"])
               if title and hours > 0:
                    option = {"title": title, "hours": hours}
                    if option not in due_options:
                         due_options.append(option)

          return {
               "paymentSources": sources,
               "paymentMethods": methods,
               "currencies": currencies,
               "dueDateOptions": due_options,
               "dueDateInfo": due_options[0] if due_options else dict(DEFAULT_DUE_DATE),
          }

     def default_due_hours(self) -> float:
          return self.options()["dueDateInfo"]["hours"]
