"""
Database utilities and models.

This package provides:
- SQLAlchemy model for the per-step ErosionLog table
- Database connection management
- Metrics store with upsert-by-step semantics
"""

from .connection import Database
from .metrics_store import MetricsStore
from .models import Base, ErosionLogEntry

__all__ = ['Database', 'MetricsStore', 'Base', 'ErosionLogEntry']
