"""Unit tests for the concrete lifecycle observers."""

import logging

import pytest

from scrapewatch.core.managers.observers import StatusHistoryObserver, UnrecognizedStateObserver
from scrapewatch.core.models.fetch_error import FetchErrorInfo, FetchErrorKind
from scrapewatch.core.models.job import JobState, JobStatus


@pytest.mark.asyncio
async def test_history_records_statuses_per_handle():
    observer = StatusHistoryObserver()
    queued = JobStatus(state=JobState.queued)
    running = JobStatus(state=JobState.running, progress=0.5)

    await observer.on_status_changed("job-1", None, queued)
    await observer.on_status_changed("job-1", queued, running)
    await observer.on_status_changed("job-2", None, queued)

    assert observer.history("job-1") == [queued, running]
    assert observer.history("job-2") == [queued]
    assert observer.history("job-3") == []


@pytest.mark.asyncio
async def test_history_is_bounded_and_forgettable():
    observer = StatusHistoryObserver(max_entries=2)
    statuses = [JobStatus(state=JobState.running, progress=p) for p in (0.1, 0.2, 0.3)]
    error = FetchErrorInfo(kind=FetchErrorKind.timeout, title="Request Timed Out", detail="slow")

    for status in statuses:
        await observer.on_status_changed("job-1", None, status)
    await observer.on_fetch_error("job-1", error)

    assert [s.progress for s in observer.history("job-1")] == [0.2, 0.3]
    assert observer.errors("job-1") == [error]

    observer.forget("job-1")
    assert observer.history("job-1") == []
    assert observer.errors("job-1") == []


@pytest.mark.asyncio
async def test_unrecognized_state_warns_once_per_state(caplog):
    observer = UnrecognizedStateObserver()
    caplog.set_level(logging.WARNING)
    paused = JobStatus(state="paused")

    await observer.on_status_changed("job-1", None, paused)
    await observer.on_status_changed("job-1", paused, paused)
    await observer.on_status_changed("job-1", paused, JobStatus(state=JobState.running))
    await observer.on_status_changed("job-1", None, JobStatus(state="throttled"))

    warnings = [r for r in caplog.records if "unrecognized job state" in r.getMessage()]
    assert len(warnings) == 2
    assert observer.flagged("job-1") == {"paused", "throttled"}


@pytest.mark.asyncio
async def test_unrecognized_state_flags_cleared_on_terminal():
    observer = UnrecognizedStateObserver()

    await observer.on_status_changed("job-1", None, JobStatus(state="paused"))
    await observer.on_job_terminal("job-1", JobStatus(state=JobState.completed))

    assert observer.flagged("job-1") == set()
