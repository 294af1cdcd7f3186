"""Database session management with connection pooling"""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session

from rcard_gateway.config import settings
from rcard_gateway.domain.exceptions import DomainException, StorageError


def build_engine(database_url: str):
    """Pooled engine for server databases; SQLite gets a thread-tolerant connection"""
    if database_url.startswith("sqlite"):
        return create_engine(database_url, connect_args={"check_same_thread": False})

    # Connection pool: max 20 connections, recycle after 1 hour to avoid stale connections
    return create_engine(
        database_url,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=10,
        max_overflow=10,
        pool_recycle=3600,
    )


engine = build_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db() -> None:
    """Create missing tables"""
    from rcard_gateway.infrastructure.database.models import Base

    Base.metadata.create_all(bind=engine)


def get_db() -> Iterator[Session]:
    """Dependency injection for database sessions"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def unit_of_work(db: Session, request_id: str = "unknown") -> Iterator[Session]:
    """
    Commit everything done in the block as one transaction.

    Domain errors roll back and propagate unchanged; database errors roll
    back and surface as StorageError.
    """
    try:
        yield db
        db.commit()
    except DomainException:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logging.error(f"Storage failure: {e}", extra={"request_id": request_id})
        raise StorageError("Storage unavailable") from e
