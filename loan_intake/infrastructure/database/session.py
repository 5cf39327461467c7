"""Database session management with connection pooling"""

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, Session
from loan_intake.config import settings
from loan_intake.infrastructure.database.models import Base

# Connection pool: max 20 connections, recycle after 1 hour to avoid stale connections
engine = create_engine(
    settings.database_url,
    pool_pre_ping=True,  # Verify connections before using
    pool_size=10,
    max_overflow=10,
    pool_recycle=3600,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db() -> None:
    """Create tables and indexes that do not exist yet"""
    Base.metadata.create_all(bind=engine)


def ping_db(db: Session) -> None:
    """Run a trivial query; raises SQLAlchemyError when the database is down"""
    db.execute(text("SELECT 1"))


def get_db() -> Session:
    """Dependency injection for database sessions"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
