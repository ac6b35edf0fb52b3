from enum import StrEnum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from scrapewatch.core.models.fetch_error import FetchErrorInfo

# Opaque identifier returned by the scrape API when a job is accepted
JobHandle = str

DEFAULT_MESSAGE = "Loading job status..."


class JobState(StrEnum):
    queued = "queued"
    running = "running"
    completed = "completed"
    failed = "failed"
    unknown = "unknown"  # before the first successful fetch


TERMINAL_STATES = frozenset({JobState.completed, JobState.failed})

# Display labels for the sub-tasks a scrape job reports on
TASK_LABELS: Dict[str, str] = {
    "attendance": "Attendance",
    "mid_marks": "Mid Marks",
    "personal_details": "Personal Details",
    "upload": "Supabase Upload",
}


class TaskResult(BaseModel):
    success: bool = False
    stats: Dict[str, Any] = Field(default_factory=dict)


class JobStatus(BaseModel):
    """Canonical, normalized view of a remote job.

    Notes:
    - `state` holds a `JobState` member when the server sent a known state.
      Unknown strings are kept verbatim so they can be displayed, and are
      treated as non-terminal.
    - Instances are replaced, never mutated: each successful fetch yields a
      new `JobStatus`.
    - `details` echoes the job configuration; `details["results"]` is only
      meaningful once the job is completed (see `results()`).
    """

    model_config = ConfigDict(frozen=True)

    state: str = JobState.unknown
    message: str = DEFAULT_MESSAGE
    progress: float = Field(default=0.0, ge=0.0, le=1.0)
    details: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def initial(cls) -> "JobStatus":
        return cls()

    @property
    def code(self) -> Optional[JobState]:
        """The recognized state, or None for strings outside JobState."""
        try:
            return JobState(self.state)
        except ValueError:
            return None

    @property
    def is_recognized(self) -> bool:
        return self.code is not None

    @property
    def is_terminal(self) -> bool:
        return self.code in TERMINAL_STATES

    def results(self) -> Dict[str, TaskResult]:
        """Per-task results keyed by task name; empty until completed."""
        if self.code != JobState.completed:
            return {}
        raw = self.details.get("results")
        if not isinstance(raw, dict):
            return {}
        results: Dict[str, TaskResult] = {}
        for task, entry in raw.items():
            if not isinstance(entry, dict):
                continue
            stats = entry.get("stats")
            results[str(task)] = TaskResult(
                success=entry.get("success") is True,
                stats=stats if isinstance(stats, dict) else {},
            )
        return results


class JobSnapshot(BaseModel):
    """Read model handed to presentation: last good status plus transient error."""

    model_config = ConfigDict(frozen=True)

    handle: Optional[JobHandle] = None
    status: JobStatus = Field(default_factory=JobStatus.initial)
    error: Optional[FetchErrorInfo] = None
    polling: bool = False

