"""
Database configuration for SQLAlchemy + SQLite.

SQLite holds the widget's small client-local key/value data
(the recent-search list); no extra services needed.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from .settings import settings


def make_engine(sqlite_path: str) -> Engine:
    # SQLite needs check_same_thread=False for FastAPI because FastAPI uses threads.
    return create_engine(
        f"sqlite:///{sqlite_path}",
        connect_args={"check_same_thread": False},
    )


engine = make_engine(settings.sqlite_path)

# Session factory used by the key/value store
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    """Base class for ORM models."""
    pass
