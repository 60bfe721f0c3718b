"""Core domain models for detected jobs.

This module defines the data structures the dispatcher consumes:
- DetectionAction: which lifecycle branch applies to a detected job
- JobRecord: the handle onto a job's stored record (description, name, recipients)
- DetectedJob: one job flagged by the detection phase, with its reason
- InMemoryJobRecord: a JobRecord kept in memory
"""

from enum import Enum
from typing import Optional, Protocol, runtime_checkable

from pydantic import BaseModel, Field


class DetectionAction(str, Enum):
    """Lifecycle action decided for a detected job."""

    DEACTIVATE = "deactivate"
    DELETE = "delete"


@runtime_checkable
class JobRecord(Protocol):
    """Handle onto a job record owned by the record store.

    The dispatcher only writes the description; the name and the per-job
    recipient string are read-only. ``set_description`` may raise ``OSError``
    or ``PersistenceError`` when the store cannot be written.
    """

    @property
    def full_name(self) -> str: ...

    @property
    def user_notification(self) -> Optional[str]: ...

    def get_description(self) -> Optional[str]: ...

    def set_description(self, text: str) -> None: ...


class InMemoryJobRecord:
    """JobRecord held in memory, for callers without a record store."""

    def __init__(
        self,
        full_name: str,
        description: Optional[str] = "",
        user_notification: Optional[str] = None,
    ):
        self._full_name = full_name
        self._description = description
        self._user_notification = user_notification

    @property
    def full_name(self) -> str:
        return self._full_name

    @property
    def user_notification(self) -> Optional[str]:
        return self._user_notification

    def get_description(self) -> Optional[str]:
        return self._description

    def set_description(self, text: str) -> None:
        self._description = text

    def __repr__(self) -> str:
        return f"InMemoryJobRecord(full_name={self._full_name!r})"


class DetectedJob(BaseModel):
    """A job flagged by the detection phase for deactivation or deletion.

    Produced once by the detection phase and consumed once by the
    dispatcher. The action and reason are fixed at creation.
    """

    job: JobRecord = Field(..., description="Handle onto the owning job record")
    action: DetectionAction = Field(..., description="Deactivate or delete")
    reason: str = Field(..., description="Human-readable cause of the detection")

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    @property
    def is_delete(self) -> bool:
        """Whether the job is being deleted rather than deactivated."""
        return self.action == DetectionAction.DELETE

    @property
    def full_name(self) -> str:
        """Full name of the job the detection refers to."""
        return self.job.full_name
