"""Database schema definition and ORM models.

This module defines the SQLAlchemy ORM model for stored job records and the
idempotent schema creation used at startup.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, Index, String, Text, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

logger = logging.getLogger(__name__)

Base = declarative_base()


class JobRecordModel(Base):
    """ORM model for the job_records table.

    One row per managed job: its full name, the free-text description the
    dispatcher annotates, and the optional per-job recipient list.
    """

    __tablename__ = "job_records"

    full_name = Column(String(512), primary_key=True, nullable=False)
    description = Column(Text, nullable=False, default="")
    user_notification = Column(Text, nullable=True)

    # ISO 8601 string, refreshed whenever the description changes
    updated_at = Column(String(50), nullable=True)

    __table_args__ = (Index("idx_job_records_updated_at", "updated_at"),)

    def touch(self, now: Optional[datetime] = None) -> None:
        """Stamp the row as updated at ``now`` (defaults to the current time)."""
        self.updated_at = _format_datetime(now or datetime.now(timezone.utc))


def _format_datetime(dt: datetime) -> str:
    """Format datetime as ISO 8601 string for database storage."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)

    return dt.strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def create_schema(engine: Engine) -> None:
    """Create all tables and indexes if they don't exist (idempotent).

    Args:
        engine: SQLAlchemy engine instance
    """
    logger.info("Creating database schema if not exists")

    try:
        Base.metadata.create_all(engine, checkfirst=True)

        tables = inspect(engine).get_table_names()
        logger.info(f"Database schema ready. Tables: {', '.join(tables)}")

    except Exception as e:
        logger.error(f"Failed to create database schema: {e}", exc_info=True)
        raise
