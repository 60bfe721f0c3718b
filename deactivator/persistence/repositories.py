"""Data access layer for stored job records.

JobRecordRepository looks up and creates rows; StoredJobRecord wraps one row
as the JobRecord handle the dispatcher annotates.
"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .exceptions import DataIntegrityError, PersistenceError
from .schema import JobRecordModel

logger = logging.getLogger(__name__)


class StoredJobRecord:
    """JobRecord backed by a row in the job_records table.

    Each write runs in its own SAVEPOINT and is flushed immediately: a
    failing write surfaces as PersistenceError at set_description() and rolls
    back only that write, leaving the session usable for the next job.
    """

    def __init__(self, session: Session, model: JobRecordModel):
        self.session = session
        self.model = model

    @property
    def full_name(self) -> str:
        return self.model.full_name

    @property
    def user_notification(self) -> Optional[str]:
        return self.model.user_notification

    def get_description(self) -> Optional[str]:
        return self.model.description

    def set_description(self, text: str) -> None:
        """Replace the description and flush it to the database.

        Raises:
            PersistenceError: If the write fails
        """
        full_name = self.model.full_name
        try:
            with self.session.begin_nested():
                self.model.description = text
                self.model.touch()
                self.session.flush()
        except SQLAlchemyError as e:
            logger.error(f"Error writing description of {full_name}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to write job description: {e}") from e

    def __repr__(self) -> str:
        return f"StoredJobRecord(full_name={self.full_name!r})"


class JobRecordRepository:
    """Repository for job record lookups and creation."""

    def __init__(self, session: Session):
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy session for database operations
        """
        self.session = session

    def get(self, full_name: str) -> Optional[StoredJobRecord]:
        """Retrieve a job record by full name.

        Args:
            full_name: Full job name, e.g. "folder/nightly-build"

        Returns:
            StoredJobRecord if found, None otherwise

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            model = self.session.get(JobRecordModel, full_name)
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving job record {full_name}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve job record: {e}") from e

        if model is None:
            return None
        return StoredJobRecord(self.session, model)

    def add(
        self,
        full_name: str,
        description: str = "",
        user_notification: Optional[str] = None,
    ) -> StoredJobRecord:
        """Create a new job record.

        Args:
            full_name: Full job name (primary key)
            description: Initial description
            user_notification: Optional per-job recipient list

        Returns:
            The created StoredJobRecord

        Raises:
            DataIntegrityError: If a record with this name already exists
            PersistenceError: If database error occurs
        """
        if self.get(full_name) is not None:
            raise DataIntegrityError(f"Job record already exists: {full_name}")

        model = JobRecordModel(
            full_name=full_name,
            description=description,
            user_notification=user_notification,
        )
        model.touch()

        try:
            self.session.add(model)
            self.session.flush()
        except IntegrityError as e:
            self.session.rollback()
            raise DataIntegrityError(f"Job record already exists: {full_name}") from e
        except SQLAlchemyError as e:
            logger.error(f"Error adding job record {full_name}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to add job record: {e}") from e

        return StoredJobRecord(self.session, model)

