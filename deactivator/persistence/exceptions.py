"""Persistence layer exceptions.

All persistence exceptions inherit from PersistenceError, which is also what
a job record raises when its description cannot be read or written.
"""


class PersistenceError(Exception):
    """Base exception for all job record store errors."""

    pass


class DatabaseConnectionError(PersistenceError):
    """Raised when database connection or initialization fails.

    Examples:
    - Invalid database URL format
    - Database file not accessible
    - Session requested before init_database()
    """

    pass


class DataIntegrityError(PersistenceError):
    """Raised when a write violates a database constraint.

    Examples:
    - Adding a job record whose full name already exists
    """

    pass
