"""Database connection utilities."""

from contextlib import contextmanager
from typing import Optional

import structlog
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from .models import Base

logger = structlog.get_logger()


class Database:
    """Database connection manager."""

    def __init__(self, url: Optional[str] = None):
        self.url = url
        self.engine = None
        self.SessionLocal = None

    @property
    def is_initialized(self) -> bool:
        return self.SessionLocal is not None

    def initialize(self, url: Optional[str] = None):
        """Initialize database connection."""
        if url is not None:
            self.url = url
        if self.url is None:
            raise RuntimeError("No database URL configured")

        logger.info("Initializing database connection", url=self.url)

        # StaticPool keeps a single connection, which in-memory SQLite needs
        self.engine = create_engine(
            self.url,
            poolclass=StaticPool,
            echo=False,  # Set to True for SQL debugging
        )

        self.SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, bind=self.engine
        )

        self.create_tables()

        logger.info("Database connection initialized")

    def create_tables(self):
        """Create all tables."""
        try:
            Base.metadata.create_all(bind=self.engine)
            logger.info("Database tables created")

        except Exception as e:
            logger.error("Failed to create tables", error=str(e))
            raise

    def dispose(self):
        """Close pooled connections."""
        if self.engine is not None:
            self.engine.dispose()
        self.engine = None
        self.SessionLocal = None

    @contextmanager
    def get_session(self):
        """Get database session with automatic cleanup."""
        if not self.SessionLocal:
            raise RuntimeError("Database not initialized. Call initialize() first.")

        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
