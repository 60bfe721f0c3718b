"""Job record store backed by SQLite via SQLAlchemy.

Public API:
    # Database initialization and session management
    - init_database(database_url: str) -> None
    - get_session() -> ContextManager[Session]
    - close_database() -> None

    # Repository and record handle
    - JobRecordRepository: lookup and creation of job records
    - StoredJobRecord: JobRecord implementation over one row

    # Exceptions
    - PersistenceError: Base exception for all persistence errors
    - DatabaseConnectionError: Database connection/initialization failures
    - DataIntegrityError: Constraint violations

Example usage:
    >>> from deactivator.persistence import init_database, get_session, JobRecordRepository
    >>> init_database("sqlite:///./data/deactivator.db")
    >>> with get_session() as session:
    ...     record = JobRecordRepository(session).get("folder/nightly-build")
"""

from .database import close_database, get_session, init_database
from .exceptions import (
    DatabaseConnectionError,
    DataIntegrityError,
    PersistenceError,
)
from .repositories import JobRecordRepository, StoredJobRecord

__all__ = [
    # Database functions
    "init_database",
    "get_session",
    "close_database",
    # Repository
    "JobRecordRepository",
    "StoredJobRecord",
    # Exceptions
    "PersistenceError",
    "DatabaseConnectionError",
    "DataIntegrityError",
]
