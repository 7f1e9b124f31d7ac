# database.py
"""
SQLAlchemy database connection and session management.

This module provides:
- Engine construction from DATABASE_URL
- Session factory for the relational row store
- Connection utilities

Usage:
     from database import create_db_engine, create_session_factory

     engine = create_db_engine()
     SessionLocal = create_session_factory(engine)
"""
import logging
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from config import DATABASE_URL, SQL_ECHO

logger = logging.getLogger(__name__)


def create_db_engine(url: Optional[str] = None) -> Engine:
     """
     Create the SQLAlchemy engine.

     In-memory SQLite gets a StaticPool so every session shares the single
     connection that holds the database.
     """
     url = url or DATABASE_URL
     if url.startswith("sqlite"):
          kwargs = {"connect_args": {"check_same_thread": False}}
          if ":memory:" in url or url == "sqlite://":
               kwargs["poolclass"] = StaticPool
          return create_engine(url, echo=SQL_ECHO, **kwargs)

     return create_engine(
          url,
          pool_size=5,
          max_overflow=10,
          pool_timeout=30,
          pool_recycle=1800,  # Recycle connections after 30 minutes
          pool_pre_ping=True,
          echo=SQL_ECHO,  # Log SQL if SQL_ECHO=true
     )


def create_session_factory(engine: Engine) -> sessionmaker:
     """Session factory bound to an engine."""
     return sessionmaker(
          bind=engine,
          autocommit=False,
          autoflush=False,
          expire_on_commit=False,
     )


@contextmanager
def session_scope(session_factory: sessionmaker) -> Generator[Session, None, None]:
     """
     Transactional scope around a series of operations.

     Usage:
          with session_scope(SessionLocal) as db:
               rows = db.query(SheetRow).all()

     Yields:
          Session: SQLAlchemy database session
     """
     session = session_factory()
     try:
          yield session
          session.commit()
     except Exception:
          session.rollback()
          raise
     finally:
          session.close()


def init_db(engine: Engine) -> None:
     """
     Initialize database tables.

     Creates all tables defined in the models if they don't exist.
     For production, use Alembic migrations instead.
     """
     from models import Base
     Base.metadata.create_all(bind=engine)


def check_connection(session_factory: sessionmaker) -> bool:
     """
     Test database connectivity.

     Returns:
          bool: True if connection successful, False otherwise
     """
     try:
          with session_scope(session_factory) as db:
               db.execute(text("SELECT 1"))
          return True
     except SQLAlchemyError as e:
          logger.error("Database connection failed: %s", e)
          return False
