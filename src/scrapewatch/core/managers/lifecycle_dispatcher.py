import logging
from typing import Any, Callable, Optional

from scrapewatch.core.models.job import JobHandle, JobState, JobStatus

logger = logging.getLogger(__name__)

CompletedCallback = Callable[[], Any]
FailedCallback = Callable[[str], Any]


class LifecycleDispatcher:
    """Fires exactly one terminal callback per job handle.

    The latch is set on the first `completed` or `failed` status seen for
    the current handle and stays set until `begin()` is called with a
    different handle. Callbacks are plain synchronous callables; an
    exception raised by one is logged and does not clear the latch.
    """

    def __init__(
        self,
        on_completed: Optional[CompletedCallback] = None,
        on_failed: Optional[FailedCallback] = None,
    ) -> None:
        self._on_completed = on_completed
        self._on_failed = on_failed
        self._handle: Optional[JobHandle] = None
        self._latched = False

    @property
    def handle(self) -> Optional[JobHandle]:
        return self._handle

    @property
    def latched(self) -> bool:
        return self._latched

    def begin(self, handle: JobHandle) -> None:
        """Start dispatching for `handle`; the latch resets only for a new handle."""
        if handle == self._handle:
            return
        self._handle = handle
        self._latched = False

    def dispatch(self, handle: JobHandle, status: JobStatus) -> bool:
        """Inspect a normalized status. Returns True if a callback fired."""
        if handle != self._handle:
            logger.warning(
                "[dispatch] ignoring status for job_id=%s, dispatching for job_id=%s",
                handle,
                self._handle,
            )
            return False

        code = status.code
        if code not in (JobState.completed, JobState.failed):
            return False

        if self._latched:
            logger.debug("[dispatch] terminal status already dispatched job_id=%s", handle)
            return False
        self._latched = True

        if code == JobState.completed:
            logger.info("[dispatch] job completed job_id=%s", handle)
            self._invoke("on_completed", self._on_completed, handle)
        else:
            logger.info("[dispatch] job failed job_id=%s message=%s", handle, status.message)
            self._invoke("on_failed", self._on_failed, handle, status.message)
        return True

    def _invoke(self, name: str, callback: Optional[Callable[..., Any]], handle: JobHandle, *args: Any) -> None:
        if callback is None:
            return
        try:
            callback(*args)
        except Exception as exc:
            logger.error("[dispatch] %s callback failed job_id=%s error=%s", name, handle, exc)
