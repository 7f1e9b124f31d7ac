# services/column_schema.py
"""
Column Schema - fixed positional layout of every table in the row store.

Each table maps logical field names to zero-based column offsets. The layout
is never inferred from the data: changing an offset here requires migrating
the stored rows first. Offsets listed in ``reserved`` belong to legacy
columns (for example a spreadsheet formula column that renders ``#VALUE!``)
and are never written.
"""
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple

from config import TABLE_NAMES


@dataclass(frozen=True)
class TableSchema:
     """Positional layout of one table."""

     name: str
     columns: Dict[str, int]
     width: int
     header_rows: int = 1
     reserved: FrozenSet[int] = field(default_factory=frozenset)
     banner: Tuple[Tuple[str, ...], ...] = ()

     def __post_init__(self):
          offsets = list(self.columns.values())
          if len(set(offsets)) != len(offsets):
               raise ValueError(f"Duplicate column offsets in schema {self.name!r}")
          for offset in offsets:
               if offset < 0 or offset >= self.width:
                    raise ValueError(f"Offset {offset} outside row width {self.width} in {self.name!r}")
               if offset in self.reserved:
                    raise ValueError(f"Field mapped onto reserved offset {offset} in {self.name!r}")

     @property
     def max_column(self) -> int:
          return self.width - 1

     def offset(self, field_name: str) -> int:
          """Return the column offset for a field, raising KeyError for unknown fields."""
          return self.columns[field_name]

     def ordered_fields(self) -> List[Tuple[str, int]]:
          """(field, offset) pairs ordered by offset."""
          return sorted(self.columns.items(), key=lambda item: item[1])

     def is_reserved(self, offset: int) -> bool:
          return offset in self.reserved

     def blank_row(self) -> List[str]:
          return [""] * self.width

     def pad(self, cells: Optional[Sequence]) -> List:
          """Pad or truncate raw cells to the fixed row width."""
          row = list(cells or [])[: self.width]
          row.extend([""] * (self.width - len(row)))
          return [("" if value is None else value) for value in row]

     def to_record(self, cells: Sequence) -> Dict[str, object]:
          """Map a row buffer onto a dict keyed by field name."""
          row = self.pad(cells)
          return {name: row[offset] for name, offset in self.columns.items()}

     def to_buffer(self, values: Dict[str, object]) -> List:
          """
          Build a full-width row buffer from field values.

          Unknown field names raise KeyError; reserved offsets stay blank.
          """
          row = self.blank_row()
          for name, value in values.items():
               row[self.columns[name]] = "" if value is None else value
          return row

     def header_row(self) -> List[str]:
          row = self.blank_row()
          for name, offset in self.columns.items():
               row[offset] = name
          return row

     def header_buffers(self) -> List[List[str]]:
          """Rows written above the data when a table is first created."""
          if self.banner:
               return [self.pad(list(line)) for line in self.banner]
          return [self.header_row() for _ in range(self.header_rows)]


# Payment v2: three banner rows, columns A-T. F is a legacy formula column.
PAYMENTS = TableSchema(
     name=TABLE_NAMES["payments"],
     columns={
          "createdAt": 0,              # A Timestamp
          "dueAt": 1,                  # B Due Date
          "ownerId": 2,                # C Discord ID
          "quantity": 3,               # D Amount
          "unitPrice": 4,              # E PPU
          "total": 6,                  # G Total
          "source": 7,                 # H Payment Source
          "method": 8,                 # I Payment Method
          "currency": 9,               # J Currency
          "cardNumber": 10,            # K Card Number
          "ibanOrSheba": 11,           # L Iban
          "payeeName": 12,             # M Name
          "uniqueId": 13,              # N UUID
          "note": 14,                  # O Note
          "status": 15,                # P Status
          "paidFlag": 16,              # Q Paid
          "walletAddress": 17,         # R Wallet
          "externalWalletAddress": 18, # S Paypal Address
          "adminNote": 19,             # T Note admin
     },
     width=20,
     header_rows=3,
     reserved=frozenset({5}),
     banner=(
          ("Payments",),
          (),
          (
               "Timestamp", "Due Date", "Discord ID", "Amount", "PPU", "",
               "Total", "Payment Source", "Payment Method", "Currency",
               "Card Number", "Iban", "Name", "UUID", "Note", "Status",
               "Paid", "Wallet", "Paypal Address", "Note admin",
          ),
     ),
)

USERS = TableSchema(
     name=TABLE_NAMES["users"],
     columns={
          "discordId": 0,
          "role": 1,
          "createdAt": 2,
          "updatedAt": 3,
          "nickname": 4,
          "username": 5,
          "password": 6,
     },
     width=7,
)

SELLER_INFO = TableSchema(
     name=TABLE_NAMES["seller_info"],
     columns={
          "discordId": 0,
          "card": 1,
          "sheba": 2,
          "name": 3,
          "phone": 4,
          "wallet": 5,
          "paypalWallet": 6,
     },
     width=7,
)

PAYMENT_LOGS = TableSchema(
     name=TABLE_NAMES["payment_logs"],
     columns={
          "paymentId": 0,
          "action": 1,
          "actor": 2,
          "timestamp": 3,
          "changes": 4,
     },
     width=5,
     banner=(("Payment ID", "Action", "User", "Timestamp", "Changes"),),
)

PAYMENT_INFO = TableSchema(
     name=TABLE_NAMES["payment_info"],
     columns={
          "source": 0,
          "method": 1,
          "currency": 2,
          "dueTitle": 3,
          "dueHours": 4,
     },
     width=5,
     banner=(("Payment Source", "Payment Method", "Currency", "Due Date", "Hours"),),
)

SCHEMAS: Dict[str, TableSchema] = {
     schema.name: schema
     for schema in (PAYMENTS, USERS, SELLER_INFO, PAYMENT_LOGS, PAYMENT_INFO)
}


def get_schema(table: str) -> TableSchema:
     """Look up a table's schema by table name."""
     try:
          return SCHEMAS[table]
     except KeyError:
          raise KeyError(f"No column schema registered for table {table!r}") from None
