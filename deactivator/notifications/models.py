"""Data models and exceptions for the notification dispatcher.

This module defines the error taxonomy, the per-job outgoing message and the
result types used by :class:`NotificationDispatcher`.
"""

from dataclasses import dataclass, field
from datetime import datetime
from email.message import EmailMessage
from email.utils import format_datetime
from typing import List, Optional, Tuple

from deactivator.domain.models import DetectionAction

NOTIFICATION_SUBJECT = "Failed Job Deactivator"


class NotificationError(Exception):
    """Base exception for notification-related errors."""

    pass


class DescriptionUpdateError(NotificationError):
    """Raised when a job's description could not be read or written."""

    def __init__(self, job_name: str, cause: BaseException):
        self.job_name = job_name
        self.cause = cause
        super().__init__(f"Failed to update description of {job_name}: {cause}")


class DeliveryError(NotificationError):
    """Raised when a notification email could not be delivered.

    Covers authentication rejection, connection failures and SMTP errors.
    There is no retry: the failure is terminal for that job's email.
    """

    pass


class InvalidRecipientError(DeliveryError):
    """Raised when a recipient address cannot be parsed or validated."""

    pass


@dataclass(frozen=True)
class DescriptionUpdateResult:
    """Outcome of annotating a job's description."""

    job_name: str
    ok: bool
    error: Optional[DescriptionUpdateError] = None

    @classmethod
    def success(cls, job_name: str) -> "DescriptionUpdateResult":
        return cls(job_name=job_name, ok=True)

    @classmethod
    def failure(cls, error: DescriptionUpdateError) -> "DescriptionUpdateResult":
        return cls(job_name=error.job_name, ok=False, error=error)


@dataclass(frozen=True)
class NotificationEvent:
    """One outgoing notification, built per dispatched job and never persisted.

    Attributes:
        timestamp: Send time, written to the Date header
        sender: From address (the configured reply-to address)
        body: Plain-text body naming the job, the action and the reason
        to_addresses: Merged per-job and admin recipients
        subject: Fixed subject line
    """

    timestamp: datetime
    sender: str
    body: str
    to_addresses: Tuple[str, ...]
    subject: str = NOTIFICATION_SUBJECT

    def to_message(self) -> EmailMessage:
        """Build the email message for this event."""
        message = EmailMessage()
        message["Subject"] = self.subject
        message["From"] = self.sender
        message["To"] = ", ".join(self.to_addresses)
        message["Date"] = format_datetime(self.timestamp)
        message.set_content(self.body)
        return message


@dataclass
class DispatchResult:
    """Result of dispatching one detected job.

    Attributes:
        job_name: Full name of the job
        action: Deactivate or delete
        description_updated: Whether the description annotation was written
        notification_status: "sent", "no_recipients", "disabled" or "failed"
        recipients: Addresses the notification was sent (or attempted) to
        error: Error message from the first failing step, if any
    """

    job_name: str
    action: DetectionAction
    description_updated: bool = False
    notification_status: str = "disabled"
    recipients: List[str] = field(default_factory=list)
    error: Optional[str] = None

    def is_success(self) -> bool:
        """True when the description was written and mail did not fail."""
        return self.description_updated and self.notification_status != "failed"
