"""
Database engine and session management using SQLAlchemy.
Enrollments, payments and metal rates live here; billing months are never stored.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker, Session
from typing import Generator

from scheme_ledger.core.config import get_settings

settings = get_settings()

_connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    _connect_args["check_same_thread"] = False  # Required for SQLite

engine = create_engine(
    settings.DATABASE_URL,
    connect_args=_connect_args,
    echo=settings.SQL_ECHO,
)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    """Declarative base for all SQLAlchemy models."""
    pass


def get_db() -> Generator[Session, None, None]:
    """
    Dependency that provides a database session.
    Ensures proper cleanup after each request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None) -> None:
    """Create all tables from model metadata (on the given engine, or the default one)."""
    # Models must be imported so their tables are registered on Base.metadata
    from scheme_ledger.models import enrollment, payment, rate  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
