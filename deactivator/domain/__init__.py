"""Domain models for detected jobs and the job records they point at."""

from .models import DetectedJob, DetectionAction, InMemoryJobRecord, JobRecord

__all__ = ["DetectedJob", "DetectionAction", "JobRecord", "InMemoryJobRecord"]
