from rich.console import Console

from scrapewatch.adapters.rich_view import render_badge, render_snapshot
from scrapewatch.core.models.fetch_error import FetchErrorInfo, FetchErrorKind
from scrapewatch.core.models.job import JobSnapshot, JobState, JobStatus


def render_text(snapshot: JobSnapshot) -> str:
    console = Console(record=True, width=100, color_system=None)
    console.print(render_snapshot(snapshot))
    return console.export_text()


DETAILS = {
    "academic_year": "2024-25",
    "scrape_attendance": True,
    "scrape_mid_marks": False,
    "scrape_personal_details": True,
    "upload_to_supabase": True,
    "force_update": False,
}


def test_running_job_shows_progress_and_configuration():
    status = JobStatus(state=JobState.running, message="Scraping mid marks", progress=0.5, details=DETAILS)

    text = render_text(JobSnapshot(handle="job-123", status=status, polling=True))

    assert "Running" in text
    assert "job-123" in text
    assert "Scraping mid marks" in text
    assert "50% Complete" in text
    assert "Academic Year:" in text and "2024-25" in text
    assert "Force Update:" in text
    assert "Results" not in text


def test_force_update_hidden_without_upload():
    details = dict(DETAILS, upload_to_supabase=False)

    text = render_text(JobSnapshot(handle="job-1", status=JobStatus(state=JobState.queued, details=details)))

    assert "Force Update:" not in text


def test_completed_job_lists_task_results_with_stats():
    details = dict(
        DETAILS,
        results={
            "attendance": {"success": True, "stats": {"records": "120 records", "subjects": "6 subjects"}},
            "mid_marks": {"success": False},
            "upload": {"success": True},
        },
    )
    status = JobStatus(state=JobState.completed, message="Done", progress=1.0, details=details)

    text = render_text(JobSnapshot(handle="job-123", status=status))

    assert "Completed" in text
    assert "100% Complete" in text
    assert "Successfully scraped attendance data" in text
    assert "120 records, 6 subjects" in text
    assert "Failed to scrape mid marks data" in text
    assert "Successfully uploaded data to Supabase" in text


def test_transient_error_is_shown_next_to_last_status():
    error = FetchErrorInfo(
        kind=FetchErrorKind.unreachable,
        title="Server Unreachable",
        detail="No response received from server.",
    )
    status = JobStatus(state=JobState.queued, message="Waiting for worker")

    text = render_text(JobSnapshot(handle="job-999", status=status, error=error, polling=True))

    assert "Network Error" in text
    assert "Server Unreachable: No response received from server." in text
    assert "Waiting for worker" in text


def test_badge_for_unrecognized_state_uses_raw_text():
    assert render_badge("paused").plain == " Paused "
    assert render_badge(JobState.failed).plain == " Failed "
