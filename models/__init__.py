# models/__init__.py
from .base import Base
from .sheet_row import SheetRow

__all__ = [
     "Base",
     "SheetRow",
]
