"""Run orchestration: resolve a batch against the record store and dispatch it."""

from datetime import datetime
from typing import Callable, List, Optional, Sequence

from deactivator.config.environment import EnvironmentConfig
from deactivator.config.models import AppConfig
from deactivator.domain.models import DetectedJob
from deactivator.logging import get_logger
from deactivator.notifications.dispatcher import NotificationDispatcher
from deactivator.notifications.models import DispatchResult
from deactivator.notifications.smtp_client import SMTPClient
from deactivator.notifications.transport import TransportConfig
from deactivator.persistence.database import get_session
from deactivator.persistence.exceptions import PersistenceError
from deactivator.persistence.repositories import JobRecordRepository
from deactivator.utils.timestamps import utc_now

from .models import BatchEntry, RunResult

logger = get_logger(__name__, component="pipeline")


class DeactivationRun:
    """
    Dispatches one batch of detected jobs against the job record store.

    The mail transport is resolved when the run is created; every batch is
    dispatched inside a single database session, so all description updates
    of a run are committed together.
    """

    def __init__(
        self,
        app_config: AppConfig,
        env_config: EnvironmentConfig,
        smtp_client: Optional[SMTPClient] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the run.

        Args:
            app_config: Application configuration (admin recipients)
            env_config: Environment configuration (mail settings)
            smtp_client: SMTP client for the dispatcher (creates default if None)
            clock: Source of the current time (defaults to utc_now)
        """
        self.app_config = app_config
        self.env_config = env_config
        self.clock = clock or utc_now
        self.transport = TransportConfig.resolve(env_config)
        self.dispatcher = NotificationDispatcher(
            self.transport,
            admin_recipients=self._admin_recipients,
            smtp_client=smtp_client,
            clock=self.clock,
        )

    def _admin_recipients(self) -> List[str]:
        return [str(address) for address in self.app_config.notifications.admin_recipients]

    def run(self, entries: Sequence[BatchEntry]) -> RunResult:
        """
        Resolve each entry to its stored job record and dispatch the batch.

        Entries naming an unknown job are logged and skipped; the rest of the
        batch is still dispatched.

        Args:
            entries: Batch entries in detection order

        Returns:
            RunResult with per-job results and missing job names

        Raises:
            PersistenceError: If the session cannot be committed; every
                description update of the run is rolled back
        """
        run_started_at = self.clock()

        logger.info(
            f"Deactivation run started with {len(entries)} detected jobs",
            extra={
                "event": "pipeline.run.started",
                "entry_count": len(entries),
                "mail_enabled": self.transport.enabled,
            },
        )

        missing: List[str] = []
        results: List[DispatchResult] = []
        try:
            with get_session() as session:
                repo = JobRecordRepository(session)
                batch: List[DetectedJob] = []

                for entry in entries:
                    record = repo.get(entry.job)
                    if record is None:
                        logger.warning(
                            f"Detected job not found in record store: {entry.job}",
                            extra={"event": "pipeline.job.missing", "job_name": entry.job},
                        )
                        missing.append(entry.job)
                        continue

                    batch.append(
                        DetectedJob(job=record, action=entry.action, reason=entry.reason)
                    )

                results = self.dispatcher.dispatch(batch)
        except PersistenceError:
            lost = [r.job_name for r in results if r.description_updated]
            if lost:
                logger.warning(
                    f"Description updates of {len(lost)} jobs were rolled back",
                    extra={"event": "pipeline.annotations.lost", "job_names": lost},
                )
            raise

        result = RunResult(
            run_started_at=run_started_at,
            run_finished_at=self.clock(),
            mail_enabled=self.transport.enabled,
            results=results,
            missing_jobs=missing,
        )

        logger.info(
            f"Deactivation run completed: {result.total_dispatched} dispatched, "
            f"{result.total_annotated} annotated, {result.total_notified} notified, "
            f"{len(missing)} missing",
            extra={
                "event": "pipeline.run.completed",
                "duration_seconds": result.duration_seconds,
                "had_errors": result.had_errors,
            },
        )

        return result
