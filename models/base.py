# models/base.py
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
     """
     Base class for all SQLAlchemy models.
     Tables name themselves explicitly with __tablename__.
     """
     pass
