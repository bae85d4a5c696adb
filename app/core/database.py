"""
Database configuration and session management
Handles the connection pool and per-request sessions
"""

import logging
import time
from contextlib import contextmanager
from typing import Any, Dict, Generator

import sentry_sdk
from sqlalchemy import create_engine, event, pool, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from app.core.config import settings

logger = logging.getLogger(__name__)

# Create Base class for models
Base = declarative_base()


def build_engine_kwargs(url: str) -> Dict[str, Any]:
    """Engine options for the configured backend"""
    if url.startswith("sqlite"):
        return {
            "connect_args": {"check_same_thread": False},
            "echo": settings.DEBUG,
        }

    return {
        "poolclass": pool.QueuePool,
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_timeout": settings.DB_POOL_TIMEOUT,
        "pool_recycle": settings.DB_POOL_RECYCLE,
        "pool_pre_ping": settings.DB_POOL_PRE_PING,
        "echo": settings.DEBUG,
    }


engine = create_engine(settings.get_db_url(), **build_engine_kwargs(settings.get_db_url()))

# Create SessionLocal class
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


def init_db() -> None:
    """Initialize database, create tables if they don't exist"""
    try:
        # Import all models here to ensure they're registered
        import app.models  # noqa: F401

        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created successfully")

        with engine.connect() as conn:
            result = conn.execute(text("SELECT 1"))
            if result.scalar() == 1:
                logger.info("Database connection successful")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        if settings.SENTRY_DSN:
            sentry_sdk.capture_exception(e)
        raise


def get_db() -> Generator[Session, None, None]:
    """
    Dependency to get database session
    The session (and its pooled connection) is released after the request
    """
    db = SessionLocal()
    try:
        yield db
    except SQLAlchemyError as e:
        logger.error(f"Database error occurred: {e}")
        db.rollback()
        if settings.SENTRY_DSN:
            sentry_sdk.capture_exception(e)
        raise
    finally:
        db.close()


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    """
    Context manager for database session
    Use this for scripts or non-request contexts
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        logger.error(f"Database session error: {e}")
        if settings.SENTRY_DSN:
            sentry_sdk.capture_exception(e)
        raise
    finally:
        session.close()


class DatabaseHealthCheck:
    """Database health check utility"""

    @staticmethod
    def check_connection(db: Session) -> dict:
        """Check database connection health"""
        start_time = time.time()
        try:
            if db.execute(text("SELECT 1")).scalar() == 1:
                return {"status": "healthy", "response_time": time.time() - start_time}
            return {"status": "unhealthy", "response_time": time.time() - start_time}
        except SQLAlchemyError as e:
            logger.error(f"Database health check failed: {e}")
            return {
                "status": "unhealthy",
                "error": str(e),
                "response_time": time.time() - start_time,
            }


@event.listens_for(engine, "checkout")
def receive_checkout(dbapi_conn, connection_record, connection_proxy):
    """Log connection checkouts from pool"""
    logger.debug("Connection checked out from pool")


@event.listens_for(engine, "checkin")
def receive_checkin(dbapi_conn, connection_record):
    """Log connection returns to pool"""
    logger.debug("Connection returned to pool")
