"""Observer protocol for job lifecycle events.

Observers keep side effects (history, operator warnings, presentation
refreshes) out of the polling core. The session awaits them in order and
logs any exception they raise without interrupting observation.
"""

from typing import Optional, Protocol

from scrapewatch.core.models.fetch_error import FetchErrorInfo
from scrapewatch.core.models.job import JobHandle, JobStatus


class JobLifecycleObserver(Protocol):
    async def on_status_changed(
        self,
        handle: JobHandle,
        old_status: Optional[JobStatus],
        new_status: JobStatus,
    ) -> None:
        """Called after every successful fetch has replaced the status.

        Args:
            handle: The observed job
            old_status: Previous status (the initial `unknown` for the first fetch)
            new_status: Newly normalized status
        """
        ...

    async def on_job_terminal(self, handle: JobHandle, status: JobStatus) -> None:
        """Called once when the job first reaches completed or failed."""
        ...

    async def on_fetch_error(self, handle: JobHandle, error: FetchErrorInfo) -> None:
        """Called when a status fetch failed; the last good status is kept."""
        ...
