"""
StoreEntry Model - one row per named collection

The durable store is a plain key-value table: each collection
(jobs, candidates, assessments) is serialized to a single JSON
document and replaced wholesale on every save.
"""

from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.sql import func
from talentflow.database import Base


class StoreEntry(Base):
    """
    Persisted collection.

    Attributes:
        key: Prefixed collection name (e.g. "talentflow_jobs")
        value: JSON document for the whole collection
        updated_at: Last write time
    """

    __tablename__ = "store_entries"

    key = Column(String(200), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
