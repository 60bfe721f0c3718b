"""Batch loading and run orchestration for detected jobs."""

from .batch import load_batch_file
from .models import BatchEntry, BatchFileError, RunResult
from .runner import DeactivationRun

__all__ = [
    "DeactivationRun",
    "RunResult",
    "BatchEntry",
    "BatchFileError",
    "load_batch_file",
]
