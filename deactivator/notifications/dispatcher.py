"""Notification dispatcher for detected jobs.

For every detected job, in batch order, the dispatcher:
1. appends a dated line to the job's description,
2. logs the action (INFO for deactivation, WARNING for deletion),
3. emails the job's own recipients plus the admin recipients, when mail is
   configured.

Each step fails independently. Failures are logged and never abort the job
or the batch; nothing raised inside a step escapes :meth:`dispatch`.
"""

import logging
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Sequence
from uuid import uuid4

from deactivator.domain.models import DetectedJob
from deactivator.logging import get_logger
from deactivator.logging.context import log_context
from deactivator.persistence.exceptions import PersistenceError
from deactivator.utils.timestamps import format_timestamp, utc_now

from .models import (
    DeliveryError,
    DescriptionUpdateError,
    DescriptionUpdateResult,
    DispatchResult,
    NotificationEvent,
)
from .smtp_client import SMTPClient, merge_recipients, parse_recipients
from .transport import TransportConfig

logger = get_logger(__name__, component="dispatcher")

DESCRIPTION_LINE_BREAK = "<br>"

AdminRecipientsProvider = Callable[[], Optional[Iterable[str]]]


class NotificationDispatcher:
    """Applies the annotate, log and notify side effects to a batch of jobs.

    The dispatch date is captured once, when the dispatcher is created, and
    stamped on every description line and log entry it produces. Create a
    new dispatcher (and resolve a new TransportConfig) for each run.
    """

    def __init__(
        self,
        transport: TransportConfig,
        admin_recipients: Optional[AdminRecipientsProvider] = None,
        smtp_client: Optional[SMTPClient] = None,
        clock: Optional[Callable[[], datetime]] = None,
        logger_instance: Optional[logging.LoggerAdapter] = None,
    ):
        """Initialize the dispatcher.

        Args:
            transport: Resolved mail transport settings
            admin_recipients: Callable returning the global admin addresses;
                called on every notification, never cached
            smtp_client: SMTP client instance (creates default if None)
            clock: Source of the current time (defaults to utc_now)
            logger_instance: Logger instance (uses module logger if None)
        """
        self.transport = transport
        self.admin_recipients = admin_recipients
        self.smtp_client = smtp_client or SMTPClient()
        self.clock = clock or utc_now
        self.logger = logger_instance or logger
        self.date = self.clock()
        self.date_label = format_timestamp(self.date)

    def dispatch(self, batch: Sequence[DetectedJob]) -> List[DispatchResult]:
        """Process every detected job in order.

        Calling this twice with the same batch appends the description lines
        and sends the emails twice.

        Args:
            batch: Detected jobs, processed in sequence order

        Returns:
            One DispatchResult per job, in input order
        """
        results: List[DispatchResult] = []
        if not batch:
            return results

        with log_context(run_id=uuid4().hex):
            for detected_job in batch:
                results.append(self._dispatch_one(detected_job))

            self._log_summary(results)

        return results

    def _dispatch_one(self, detected_job: DetectedJob) -> DispatchResult:
        try:
            job_name = detected_job.full_name
        except Exception as e:
            self._log_unexpected("resolve", repr(detected_job.job), e)
            return DispatchResult(
                job_name=repr(detected_job.job), action=detected_job.action, error=str(e)
            )

        result = DispatchResult(job_name=job_name, action=detected_job.action)

        with log_context(job_name=job_name):
            steps = [("annotate", self._annotate), ("log", self._log)]
            if self.transport.enabled:
                steps.append(("notify", self.notify_users))

            # Each step runs even when an earlier one failed
            for step, func in steps:
                try:
                    func(detected_job, result)
                except Exception as e:
                    self._log_unexpected(step, job_name, e)
                    result.error = result.error or str(e)

        return result

    def _annotate(self, detected_job: DetectedJob, result: DispatchResult) -> None:
        update = self.update_job_description(detected_job)
        result.description_updated = update.ok
        if update.error is not None:
            result.error = str(update.error)

    def _log(self, detected_job: DetectedJob, result: DispatchResult) -> None:
        self.log_action(detected_job)

    def _log_unexpected(self, step: str, job_name: str, error: Exception) -> None:
        self.logger.warning(
            f"Unexpected error in {step} step for job {job_name}: {error}",
            exc_info=True,
            extra={
                "event": "dispatch.job.failed",
                "step": step,
                "error_type": type(error).__name__,
            },
        )

    def update_job_description(self, detected_job: DetectedJob) -> DescriptionUpdateResult:
        """Append the dated deactivation or deletion line to the description.

        Args:
            detected_job: Job whose description is annotated

        Returns:
            Success, or a failure carrying the DescriptionUpdateError
        """
        job = detected_job.job
        verb = "Deleted" if detected_job.is_delete else "Deactivated"
        line = f"{self.date_label} - {verb}: {detected_job.reason}\n"

        try:
            current = job.get_description() or ""
            job.set_description(current + DESCRIPTION_LINE_BREAK + line)
        except (OSError, PersistenceError) as e:
            error = DescriptionUpdateError(detected_job.full_name, e)
            self.logger.info(
                "Failed to update job description.",
                exc_info=True,
                extra={
                    "event": "job.description.failed",
                    "error_type": type(e).__name__,
                },
            )
            return DescriptionUpdateResult.failure(error)

        return DescriptionUpdateResult.success(detected_job.full_name)

    def log_action(self, detected_job: DetectedJob) -> None:
        """Emit the audit log entry for the job's action."""
        name = detected_job.full_name
        if detected_job.is_delete:
            self.logger.warning(
                f"{self.date_label} - {name} deleted: {detected_job.reason}",
                extra={"event": "job.deleted", "reason": detected_job.reason},
            )
        else:
            self.logger.info(
                f"{self.date_label} - {name} deactivated: {detected_job.reason}",
                extra={"event": "job.deactivated", "reason": detected_job.reason},
            )

    def build_event(
        self, detected_job: DetectedJob, recipients: Sequence[str]
    ) -> NotificationEvent:
        """Compose the notification for a job, stamped with the current time."""
        verb = "deleted" if detected_job.is_delete else "deactivated"
        return NotificationEvent(
            timestamp=self.clock(),
            sender=self.transport.reply_to,
            body=f"The job {detected_job.full_name} was {verb}. - {detected_job.reason}",
            to_addresses=tuple(recipients),
        )

    def collect_recipients(self, detected_job: DetectedJob) -> List[str]:
        """Merge the job's own recipients with the current admin recipients.

        Raises:
            InvalidRecipientError: If either source holds a malformed address
        """
        job_recipients = parse_recipients(detected_job.job.user_notification)

        admin_recipients: List[str] = []
        if self.admin_recipients is not None:
            for entry in self.admin_recipients() or ():
                admin_recipients.extend(parse_recipients(entry))

        return merge_recipients(job_recipients, admin_recipients)

    def notify_users(self, detected_job: DetectedJob, result: DispatchResult) -> None:
        """Email the job's recipients and the admins, if there are any.

        Delivery failures are logged at WARNING and recorded on ``result``.
        """
        try:
            recipients = self.collect_recipients(detected_job)
            result.recipients = recipients

            if not recipients:
                result.notification_status = "no_recipients"
                return

            event = self.build_event(detected_job, recipients)
            self.smtp_client.send(event.to_message(), self.transport.session)
            result.notification_status = "sent"

        except DeliveryError as e:
            self.logger.warning(
                f"Sending email failed: {e}",
                extra={
                    "event": "notification.send.failed",
                    "error_type": type(e).__name__,
                    "recipients": result.recipients,
                },
            )
            result.notification_status = "failed"
            result.error = result.error or str(e)

    def _log_summary(self, results: List[DispatchResult]) -> None:
        annotated = sum(1 for r in results if r.description_updated)
        sent = sum(1 for r in results if r.notification_status == "sent")
        failed = sum(1 for r in results if r.notification_status == "failed")

        self.logger.info(
            f"Dispatch batch complete: {len(results)} jobs, {annotated} annotated, "
            f"{sent} emails sent, {failed} emails failed",
            extra={
                "event": "dispatch.batch.completed",
                "job_count": len(results),
                "annotated": annotated,
                "sent": sent,
                "failed": failed,
            },
        )
