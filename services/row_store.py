# services/row_store.py
"""
Row Store Adapter - positional CRUD against a spreadsheet-shaped store.

Two layers live here:

1. ``RowBackend`` - the backing store contract. Rows are addressed by their
   1-indexed physical row number, exactly as a spreadsheet addresses them.
   ``SqlRowBackend`` implements it over the ``sheet_rows`` table; the Google
   Sheets implementation lives in ``services/sheets_backend.py``.
2. ``RowStoreAdapter`` - the only component that knows about physical
   layout. Callers speak 0-indexed data rows and 0-indexed column offsets;
   the adapter skips each table's banner rows, pads buffers to the fixed
   width, refuses out-of-range offsets and never writes a reserved offset.

A row index is only meaningful until the next ``delete_row`` on the same
table: deleting shifts every following row up by one and the adapter does
not track that shift for callers.
"""
import logging
from typing import Dict, List, Optional, Sequence, Tuple, Union

from sqlalchemy import func, select, update, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from database import check_connection, session_scope
from models import SheetRow
from services.column_schema import TableSchema, get_schema
from services.errors import NotFound, StoreUnavailable, ValidationError

logger = logging.getLogger(__name__)

TableRef = Union[str, TableSchema]


class RowBackend:
     """Backing row store addressed by 1-indexed physical row numbers."""

     def ensure_table(self, table: str, header_rows: List[List[str]]) -> None:
          """Create the table if needed and write its header rows when it is empty."""
          raise NotImplementedError

     def list(self, table: str, skip_rows: int) -> List[List]:
          """Return every row after the first ``skip_rows`` physical rows."""
          raise NotImplementedError

     def append(self, table: str, row_buffer: Sequence) -> None:
          """Insert a row after the last existing row."""
          raise NotImplementedError

     def patch_cells(self, table: str, row_number: int, cells: Dict[int, object]) -> None:
          """Write the given 0-indexed column offsets of one physical row."""
          raise NotImplementedError

     def delete_row(self, table: str, row_number: int) -> None:
          """Remove a physical row; following rows shift up by one."""
          raise NotImplementedError

     def ping(self) -> bool:
          """Whether the store is reachable."""
          return True

     def close(self) -> None:
          pass


class SqlRowBackend(RowBackend):
     """
     Relational backend: one ``SheetRow`` per physical row.

     Row numbers stay contiguous per table so the positional contract matches
     a spreadsheet tab.
     """

     def __init__(self, session_factory: sessionmaker):
          self._session_factory = session_factory

     def ping(self) -> bool:
          return check_connection(self._session_factory)

     def ensure_table(self, table: str, header_rows: List[List[str]]) -> None:
          try:
               with session_scope(self._session_factory) as db:
                    count = db.scalar(
                         select(func.count()).select_from(SheetRow).where(SheetRow.table_name == table)
                    )
                    if count:
                         return
                    for number, cells in enumerate(header_rows, start=1):
                         db.add(SheetRow(table_name=table, row_number=number, cells=list(cells)))
                    logger.info("Created table %r with %d header rows", table, len(header_rows))
          except SQLAlchemyError as e:
               raise StoreUnavailable(f"Could not prepare table {table!r}", original_error=e) from e

     def list(self, table: str, skip_rows: int) -> List[List]:
          try:
               with session_scope(self._session_factory) as db:
                    rows = db.scalars(
                         select(SheetRow)
                         .where(SheetRow.table_name == table, SheetRow.row_number > skip_rows)
                         .order_by(SheetRow.row_number)
                    ).all()
                    return [list(row.cells or []) for row in rows]
          except SQLAlchemyError as e:
               raise StoreUnavailable(f"Could not read table {table!r}", original_error=e) from e

     def append(self, table: str, row_buffer: Sequence) -> None:
          try:
               with session_scope(self._session_factory) as db:
                    last = db.scalar(
                         select(func.max(SheetRow.row_number)).where(SheetRow.table_name == table)
                    )
                    db.add(SheetRow(table_name=table, row_number=(last or 0) + 1, cells=list(row_buffer)))
          except SQLAlchemyError as e:
               raise StoreUnavailable(f"Could not append to table {table!r}", original_error=e) from e

     def patch_cells(self, table: str, row_number: int, cells: Dict[int, object]) -> None:
          try:
               with session_scope(self._session_factory) as db:
                    row = db.scalars(
                         select(SheetRow).where(SheetRow.table_name == table, SheetRow.row_number == row_number)
                    ).first()
                    if row is None:
                         raise NotFound(f"Row {row_number} not found in table {table!r}")
                    values = list(row.cells or [])
                    needed = max(cells) + 1
                    if len(values) < needed:
                         values.extend([""] * (needed - len(values)))
                    for offset, value in cells.items():
                         values[offset] = value
                    # JSON columns only persist on reassignment
                    row.cells = values
          except SQLAlchemyError as e:
               raise StoreUnavailable(f"Could not update row {row_number} of {table!r}", original_error=e) from e

     def delete_row(self, table: str, row_number: int) -> None:
          try:
               with session_scope(self._session_factory) as db:
                    result = db.execute(
                         delete(SheetRow).where(SheetRow.table_name == table, SheetRow.row_number == row_number)
                    )
                    if result.rowcount == 0:
                         raise NotFound(f"Row {row_number} not found in table {table!r}")
                    # Two passes so the (table, row_number) unique constraint holds mid-update
                    db.execute(
                         update(SheetRow)
                         .where(SheetRow.table_name == table, SheetRow.row_number > row_number)
                         .values(row_number=-SheetRow.row_number)
                         .execution_options(synchronize_session=False)
                    )
                    db.execute(
                         update(SheetRow)
                         .where(SheetRow.table_name == table, SheetRow.row_number < 0)
                         .values(row_number=-SheetRow.row_number - 1)
                         .execution_options(synchronize_session=False)
                    )
          except SQLAlchemyError as e:
               raise StoreUnavailable(f"Could not delete row {row_number} of {table!r}", original_error=e) from e


class RowStoreAdapter:
     """
     Translates (table, row index, column offset) operations into backend calls.

     Args:
          backend: The backing row store. Constructed by the caller and owned by it.
     """

     def __init__(self, backend: RowBackend):
          self.backend = backend
          self._prepared = set()

     @staticmethod
     def _schema(table: TableRef) -> TableSchema:
          return table if isinstance(table, TableSchema) else get_schema(table)

     def _ensure(self, schema: TableSchema) -> None:
          if schema.name in self._prepared:
               return
          self.backend.ensure_table(schema.name, schema.header_buffers())
          self._prepared.add(schema.name)

     def _physical_row(self, schema: TableSchema, row_index: int) -> int:
          if isinstance(row_index, bool) or not isinstance(row_index, int) or row_index < 0:
               raise ValidationError(f"Invalid row index {row_index!r}", field="rowIndex")
          # 0-indexed data row -> 1-indexed sheet row below the banner rows
          return row_index + schema.header_rows + 1

     def list_rows(self, table: TableRef) -> List[List]:
          """All data rows of a table as fixed-width buffers (banner rows skipped)."""
          schema = self._schema(table)
          self._ensure(schema)
          return [schema.pad(cells) for cells in self.backend.list(schema.name, schema.header_rows)]

     def get_row(self, table: TableRef, row_index: int) -> Optional[List]:
          """The buffer at ``row_index``, or None when there is no such row."""
          rows = self.list_rows(table)
          if 0 <= row_index < len(rows):
               return rows[row_index]
          return None

     def find_row(self, table: TableRef, field_name: str, value) -> Optional[Tuple[int, List]]:
          """
          Locate the first row whose ``field_name`` cell equals ``value``.

          Values are compared as trimmed strings. Returns (row_index, buffer)
          or None; a miss is not an error.
          """
          schema = self._schema(table)
          offset = schema.offset(field_name)
          wanted = str(value).strip()
          if not wanted:
               return None
          for index, row in enumerate(self.list_rows(schema)):
               if str(row[offset]).strip() == wanted:
                    return index, row
          return None

     def append_row(self, table: TableRef, row_buffer: Sequence) -> None:
          """Insert a full-width buffer past the last data row."""
          schema = self._schema(table)
          self._ensure(schema)
          row = schema.pad(row_buffer)
          for offset in schema.reserved:
               row[offset] = ""
          self.backend.append(schema.name, row)

     def update_cells(self, table: TableRef, row_index: int, cells: Dict[int, object]) -> None:
          """
          Write only the given offsets of one row.

          Raises:
               ValidationError: If an offset is outside [0, max_column] or the row index is negative.
          """
          schema = self._schema(table)
          row_number = self._physical_row(schema, row_index)

          writable = {}
          for offset, value in cells.items():
               if isinstance(offset, bool) or not isinstance(offset, int):
                    raise ValidationError(f"Column offset must be an integer, got {offset!r}", field=str(offset))
               if offset < 0 or offset > schema.max_column:
                    raise ValidationError(
                         f"Column offset {offset} outside 0..{schema.max_column} for {schema.name!r}",
                         field=str(offset),
                    )
               if schema.is_reserved(offset):
                    logger.debug("Skipping reserved offset %d in %r", offset, schema.name)
                    continue
               writable[offset] = "" if value is None else value

          if not writable:
               return
          self._ensure(schema)
          self.backend.patch_cells(schema.name, row_number, writable)

     def delete_row(self, table: TableRef, row_index: int) -> None:
          """
          Physically remove a row. Every row below shifts up by one, so any
          row index held for another record is stale after this call.
          """
          schema = self._schema(table)
          row_number = self._physical_row(schema, row_index)
          self._ensure(schema)
          self.backend.delete_row(schema.name, row_number)
