"""Database models for per-step simulation metrics."""

from sqlalchemy import Column, Float, Integer
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class ErosionLogEntry(Base):
    """One snapshot of parameters and relief statistics, keyed by step."""

    __tablename__ = "ErosionLog"

    step = Column("Step", Integer, primary_key=True, autoincrement=False)

    # Parameters in effect at the snapshot
    rain = Column("Rain", Float)
    erode_k = Column("ErodeK", Float)
    deposit_d = Column("DepositD", Float)
    threshold_t = Column("ThresholdT", Float)
    uplift_u = Column("UpliftU", Float)

    # Statistics
    max_relief = Column("MaxRelief", Float)
    mean_elev = Column("MeanElev", Float)
    drain_den = Column("DrainDen", Float)
    hack_slope = Column("HackSlope", Float, nullable=True)  # NULL when regression undefined
    concavity = Column("Concavity", Float, nullable=True)

    def __repr__(self):
        return f"<ErosionLogEntry step={self.step} relief={self.max_relief}>"
