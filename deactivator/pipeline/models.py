"""Data models for batch files and run reporting."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List

from pydantic import BaseModel, Field, field_validator

from deactivator.domain.models import DetectionAction
from deactivator.notifications.models import DispatchResult


class BatchFileError(Exception):
    """Raised when a batch file cannot be read or is malformed."""

    pass


class BatchEntry(BaseModel):
    """One line of a batch file: which job, what happens to it, and why."""

    job: str = Field(..., min_length=1, description="Full name of the job")
    action: DetectionAction = Field(..., description="deactivate or delete")
    reason: str = Field(..., description="Human-readable cause")

    @field_validator("job")
    @classmethod
    def strip_job_name(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("Job name cannot be empty or whitespace-only")
        return stripped


@dataclass
class RunResult:
    """
    Outcome of one deactivation run.

    Attributes:
        run_started_at: UTC timestamp when the run began
        run_finished_at: UTC timestamp when the run completed
        mail_enabled: Whether a mail transport was configured
        results: Per-job dispatch results, in batch order
        missing_jobs: Batch entries whose job was not in the record store
    """

    run_started_at: datetime
    run_finished_at: datetime
    mail_enabled: bool = False
    results: List[DispatchResult] = field(default_factory=list)
    missing_jobs: List[str] = field(default_factory=list)

    @property
    def total_dispatched(self) -> int:
        return len(self.results)

    @property
    def total_annotated(self) -> int:
        return sum(1 for r in self.results if r.description_updated)

    @property
    def total_notified(self) -> int:
        return sum(1 for r in self.results if r.notification_status == "sent")

    @property
    def had_errors(self) -> bool:
        return bool(self.missing_jobs) or any(not r.is_success() for r in self.results)

    @property
    def duration_seconds(self) -> float:
        return (self.run_finished_at - self.run_started_at).total_seconds()
