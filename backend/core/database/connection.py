# ------------------------------ IMPORTS ------------------------------
from contextlib import contextmanager
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool
from typing import Generator, Iterator
import logging

from core.config.settings import settings

# ------------------------------ LOGGING ------------------------------
logger = logging.getLogger(__name__)

# ------------------------------ BASE CLASS ------------------------------
Base = declarative_base()

# ------------------------------ DATABASE ENGINE ------------------------------

def _engine_options() -> dict:
    """Pool options for the configured backend."""
    if settings.database.is_sqlite:
        options = {"connect_args": {"check_same_thread": False}}
        if settings.database.is_in_memory:
            options["poolclass"] = StaticPool
        return options
    return {
        "pool_pre_ping": True,
        "pool_size": settings.database.pool_size,
        "max_overflow": settings.database.max_overflow,
    }

engine = create_engine(
    settings.database.database_url,
    echo=settings.database.echo,
    **_engine_options()
)

# ------------------------------ SESSION FACTORY ------------------------------
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# ------------------------------ DATABASE FUNCTIONS ------------------------------

def get_db() -> Generator:
    """Dependency for FastAPI to get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """Commit the enclosed unit of work, or roll all of it back on any error."""
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise

def init_db() -> None:
    """Initialize database - create all tables."""
    try:
        from core.database import models  # noqa: F401
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created successfully")

    except Exception as e:
        logger.error(f"Error initializing database: {e}")
        raise

def drop_db() -> None:
    """Drop all tables."""
    from core.database import models  # noqa: F401
    Base.metadata.drop_all(bind=engine)
    logger.info("Database tables dropped")

# ------------------------------ END OF FILE ------------------------------
