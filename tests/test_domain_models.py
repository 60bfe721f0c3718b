"""Tests for core domain models."""

import pytest
from pydantic import ValidationError

from deactivator.domain.models import (
    DetectedJob,
    DetectionAction,
    InMemoryJobRecord,
    JobRecord,
)


def test_in_memory_record_satisfies_protocol():
    record = InMemoryJobRecord("folder/nightly", description="Nightly", user_notification="a@x.com")

    assert isinstance(record, JobRecord)
    assert record.full_name == "folder/nightly"
    assert record.user_notification == "a@x.com"
    assert record.get_description() == "Nightly"

    record.set_description("Updated")
    assert record.get_description() == "Updated"


def test_detected_job_exposes_action_and_name():
    job = DetectedJob(
        job=InMemoryJobRecord("legacy"), action=DetectionAction.DELETE, reason="build timeout"
    )

    assert job.is_delete is True
    assert job.full_name == "legacy"
    assert job.reason == "build timeout"


def test_detected_job_accepts_action_value():
    job = DetectedJob(job=InMemoryJobRecord("nightly"), action="deactivate", reason="flaky")

    assert job.action is DetectionAction.DEACTIVATE
    assert job.is_delete is False


def test_detected_job_is_frozen():
    job = DetectedJob(
        job=InMemoryJobRecord("nightly"), action=DetectionAction.DEACTIVATE, reason="flaky"
    )

    with pytest.raises(ValidationError):
        job.reason = "changed"


def test_detected_job_rejects_non_record():
    with pytest.raises(ValidationError):
        DetectedJob(job="nightly", action=DetectionAction.DEACTIVATE, reason="flaky")


def test_detected_job_rejects_unknown_action():
    with pytest.raises(ValidationError):
        DetectedJob(job=InMemoryJobRecord("nightly"), action="archive", reason="flaky")
