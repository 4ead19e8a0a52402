"""
Per-step metrics persistence.

Each snapshot is upserted by step index, so re-running a simulation into
the same database overwrites earlier rows for the same steps. Database
failures are logged and reported through return values; they never stop
the simulation loop.
"""

from typing import List, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from ..core.erosion_model import SimulationParameters
from ..core.relief_statistics import ReliefStats
from .connection import Database
from .models import ErosionLogEntry

logger = structlog.get_logger()


class MetricsStore:
    """Writes parameter/statistics snapshots to the ``ErosionLog`` table."""

    def __init__(self, database: Database):
        self.database = database

    @classmethod
    def connect(cls, url: str) -> "MetricsStore":
        """
        Open a store on ``url``.

        If the database cannot be initialised the store is returned
        disabled and every write becomes a logged no-op.
        """
        database = Database(url)
        try:
            database.initialize()
        except (SQLAlchemyError, ImportError) as e:
            # ImportError covers a missing DBAPI driver for the URL's dialect
            logger.warning("Metrics database unavailable, logging disabled", url=url, error=str(e))
            database.dispose()
        return cls(database)

    @property
    def enabled(self) -> bool:
        return self.database.is_initialized

    def log_step(self, step: int, params: SimulationParameters, stats: ReliefStats) -> bool:
        """
        Upsert one snapshot row.

        Returns:
            True if the row was written, False if the store is disabled or
            the write failed
        """
        if not self.enabled:
            return False

        entry = ErosionLogEntry(
            step=step,
            rain=params.rain,
            erode_k=params.erosion_k,
            deposit_d=params.deposition_d,
            threshold_t=params.threshold_t,
            uplift_u=params.uplift_u,
            max_relief=stats.max_relief,
            mean_elev=stats.mean_elevation,
            drain_den=stats.drainage_density,
            hack_slope=stats.hack_slope_exponent,
            concavity=stats.concavity_index,
        )

        try:
            with self.database.get_session() as session:
                session.merge(entry)
        except SQLAlchemyError as e:
            logger.error("Failed to log step", step=step, error=str(e))
            return False

        logger.debug("Step logged", step=step)
        return True

    def history(self) -> List[ErosionLogEntry]:
        """All logged snapshots ordered by step."""
        if not self.enabled:
            return []
        with self.database.get_session() as session:
            rows = session.scalars(select(ErosionLogEntry).order_by(ErosionLogEntry.step)).all()
            session.expunge_all()
            return list(rows)

    def get_step(self, step: int) -> Optional[ErosionLogEntry]:
        if not self.enabled:
            return None
        with self.database.get_session() as session:
            entry = session.get(ErosionLogEntry, step)
            if entry is not None:
                session.expunge(entry)
            return entry
