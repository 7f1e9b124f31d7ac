# models/sheet_row.py
"""
SheetRow model - one physical row of a spreadsheet-shaped table.

Rows are addressed by (table_name, row_number) where row_number is 1-indexed
and contiguous per table, exactly like a spreadsheet tab. Deleting a row
shifts every following row up by one; the backend keeps that invariant.
"""
from sqlalchemy import Column, Integer, String, JSON, DateTime, UniqueConstraint, func
from .base import Base


class SheetRow(Base):
     """A fixed-width row buffer stored as a JSON list of cell values."""
     __tablename__ = "sheet_rows"
     __table_args__ = (
          UniqueConstraint("table_name", "row_number", name="uq_sheet_rows_table_row"),
     )

     id = Column(Integer, primary_key=True, autoincrement=True)
     table_name = Column(String(100), nullable=False, index=True)
     row_number = Column(Integer, nullable=False)
     cells = Column(JSON, nullable=False, default=list)
     updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

     def __repr__(self):
          return f"<SheetRow(table='{self.table_name}', row={self.row_number})>"
