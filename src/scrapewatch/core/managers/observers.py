"""Concrete observers for job lifecycle events.

- Status history recording (in memory, per handle)
- Operator warnings for states the client does not recognize
"""

import logging
from typing import Dict, List, Optional, Set

from scrapewatch.core.models.fetch_error import FetchErrorInfo
from scrapewatch.core.models.job import JobHandle, JobStatus

logger = logging.getLogger(__name__)


class StatusHistoryObserver:
    """Keeps every normalized status and fetch error seen per handle."""

    def __init__(self, max_entries: Optional[int] = None):
        self._max_entries = max_entries
        self._statuses: Dict[JobHandle, List[JobStatus]] = {}
        self._errors: Dict[JobHandle, List[FetchErrorInfo]] = {}

    def history(self, handle: JobHandle) -> List[JobStatus]:
        return list(self._statuses.get(handle, []))

    def errors(self, handle: JobHandle) -> List[FetchErrorInfo]:
        return list(self._errors.get(handle, []))

    def forget(self, handle: JobHandle) -> None:
        self._statuses.pop(handle, None)
        self._errors.pop(handle, None)

    def _append(self, bucket: list, item) -> None:
        bucket.append(item)
        if self._max_entries is not None and len(bucket) > self._max_entries:
            del bucket[: len(bucket) - self._max_entries]

    async def on_status_changed(
        self,
        handle: JobHandle,
        old_status: Optional[JobStatus],
        new_status: JobStatus,
    ) -> None:
        self._append(self._statuses.setdefault(handle, []), new_status)
        logger.debug(
            f"[observer:history] recorded status job_id={handle} "
            f"old={old_status.state if old_status else None} new={new_status.state}"
        )

    async def on_job_terminal(self, handle: JobHandle, status: JobStatus) -> None:
        """Terminal status already recorded in on_status_changed."""
        pass

    async def on_fetch_error(self, handle: JobHandle, error: FetchErrorInfo) -> None:
        self._append(self._errors.setdefault(handle, []), error)


class UnrecognizedStateObserver:
    """Flags server states outside queued/running/completed/failed.

    Such jobs keep being polled, which can go on forever if the server
    never moves on, so an operator should look at them. Each distinct
    string is reported once per handle.
    """

    def __init__(self):
        self._seen: Dict[JobHandle, Set[str]] = {}

    def flagged(self, handle: JobHandle) -> Set[str]:
        return set(self._seen.get(handle, set()))

    async def on_status_changed(
        self,
        handle: JobHandle,
        old_status: Optional[JobStatus],
        new_status: JobStatus,
    ) -> None:
        if new_status.is_recognized:
            return
        seen = self._seen.setdefault(handle, set())
        if new_status.state in seen:
            return
        seen.add(new_status.state)
        logger.warning(
            f"[observer:state] unrecognized job state {new_status.state!r} job_id={handle}; "
            f"treating as non-terminal and continuing to poll"
        )

    async def on_job_terminal(self, handle: JobHandle, status: JobStatus) -> None:
        self._seen.pop(handle, None)

    async def on_fetch_error(self, handle: JobHandle, error: FetchErrorInfo) -> None:
        pass
