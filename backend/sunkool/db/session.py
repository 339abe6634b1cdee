"""
Database session management
"""
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from sunkool.core.settings import settings
from sunkool.logging_config import get_logger

logger = get_logger(__name__)

engine = create_engine(
    settings.database_url,
    echo=False,  # Set to True for SQL query logging
    pool_pre_ping=True,  # Verify connections before using
    pool_recycle=3600,  # Recycle connections after 1 hour
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """
    Dependency for getting database session

    Usage in FastAPI endpoints:
        @router.get("/orders")
        def list_orders(db: Session = Depends(get_db)):
            ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session) -> Iterator[Session]:
    """
    Run a block as a single unit of work.

    Commits when the block finishes, rolls back every pending write when it
    raises. A failing rollback is logged and the original error propagates.

    Usage:
        with atomic(db):
            order = lock_order(db, order_id)
            db.add(dispatch)
    """
    try:
        yield db
        db.commit()
    except Exception:
        try:
            db.rollback()
        except SQLAlchemyError as rollback_error:
            logger.error(
                "Rollback failed after unit of work error",
                extra={"rollback_error": str(rollback_error)},
                exc_info=True,
            )
        raise
