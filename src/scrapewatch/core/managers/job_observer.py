"""JobObserver: one observing session for one job handle at a time.

Wires the status pipeline together:

    handle -> StatusFetcher -> normalize_status -> {LifecycleDispatcher, observers}

with a PollScheduler re-invoking the fetcher while the job is not terminal.

Responsibilities:
1. Own the handle, the current `JobStatus` and the last transient error.
2. Issue the first fetch immediately, then poll on a fixed interval.
3. Replace (never mutate) the status on each successful fetch.
4. Keep fetch errors non-terminal: record them next to the last good status.
5. Discard results of fetches that resolve after `stop()` / `reset()`.
"""

from __future__ import annotations

import asyncio
import functools
from typing import List, Optional

from scrapewatch.core.config import ObserverConfig
from scrapewatch.core.exceptions import JobApiException
from scrapewatch.core.interfaces.observers import JobLifecycleObserver
from scrapewatch.core.logging_config import job_id_var
from scrapewatch.core.managers.lifecycle_dispatcher import (
    CompletedCallback,
    FailedCallback,
    LifecycleDispatcher,
)
from scrapewatch.core.managers.poll_scheduler import PollScheduler
from scrapewatch.core.managers.status_fetcher import StatusFetcher
from scrapewatch.core.managers.status_normalizer import normalize_status
from scrapewatch.core.models.fetch_error import FetchErrorInfo
from scrapewatch.core.models.job import JobHandle, JobSnapshot, JobState, JobStatus
from scrapewatch.core.settings import logger

# Forward order of recognized states; used only to warn about regressions
_STATE_RANK = {
    JobState.unknown: 0,
    JobState.queued: 1,
    JobState.running: 2,
    JobState.completed: 3,
    JobState.failed: 3,
}


class JobObserver:
    """Observes a remote scrape job until it completes, fails or is abandoned.

    `start()` must be called from a running event loop. All state is in
    memory and discarded by `reset()`.
    """

    def __init__(
        self,
        fetcher: StatusFetcher,
        config: ObserverConfig,
        on_completed: Optional[CompletedCallback] = None,
        on_failed: Optional[FailedCallback] = None,
        observers: Optional[List[JobLifecycleObserver]] = None,
    ) -> None:
        self._fetcher = fetcher
        self.config = config
        self._dispatcher = LifecycleDispatcher(on_completed, on_failed)
        self._observers = observers or []
        self._handle: Optional[JobHandle] = None
        self._status = JobStatus.initial()
        self._error: Optional[FetchErrorInfo] = None
        self._scheduler: Optional[PollScheduler] = None
        self._done = asyncio.Event()

    # ---------------- Read side -----------------
    @property
    def handle(self) -> Optional[JobHandle]:
        return self._handle

    @property
    def status(self) -> JobStatus:
        return self._status

    @property
    def error(self) -> Optional[FetchErrorInfo]:
        return self._error

    @property
    def scheduler(self) -> Optional[PollScheduler]:
        return self._scheduler

    @property
    def is_polling(self) -> bool:
        return self._scheduler is not None and self._scheduler.active

    def snapshot(self) -> JobSnapshot:
        return JobSnapshot(
            handle=self._handle,
            status=self._status,
            error=self._error,
            polling=self.is_polling,
        )

    # ---------------- Control -----------------
    def start(self, handle: JobHandle) -> None:
        """Begin observing `handle`, abandoning any previous job."""
        self.stop()
        self._handle = handle
        self._status = JobStatus.initial()
        self._error = None
        self._done = asyncio.Event()
        self._dispatcher.begin(handle)

        scheduler = PollScheduler(
            functools.partial(self._poll_once, handle),
            interval=self.config.poll_interval,
            name=handle,
        )
        self._scheduler = scheduler
        logger.info("Observing job job_id=%s", handle)
        scheduler.start()

    def stop(self) -> None:
        """Stop polling; safe to call any number of times."""
        if self._scheduler is not None:
            self._scheduler.stop()
        self._done.set()

    def reset(self) -> None:
        """Stop and forget the current job, back to the pre-job state."""
        self.stop()
        if self._handle is not None:
            logger.info("Discarding job job_id=%s", self._handle)
        self._scheduler = None
        self._handle = None
        self._status = JobStatus.initial()
        self._error = None

    def poll_now(self) -> bool:
        """Refresh immediately; coalesced with a fetch already in flight."""
        if self._scheduler is None:
            return False
        return self._scheduler.poll_now()

    async def wait_until_terminal(self, timeout: float | None = None) -> JobStatus:
        """Wait until the job is terminal or observation is stopped.

        Raises asyncio.TimeoutError if neither happens within `timeout`.
        """
        await asyncio.wait_for(self._done.wait(), timeout)
        return self._status

    async def wait_idle(self) -> None:
        """Wait for the fetch currently in flight, if any, to be processed."""
        if self._scheduler is not None:
            await self._scheduler.wait_idle()

    # ---------------- Polling -----------------
    async def _poll_once(self, handle: JobHandle, scheduler: PollScheduler) -> None:
        token = job_id_var.set(handle)
        try:
            try:
                raw = await self._fetcher.fetch(handle)
            except JobApiException as exc:
                if scheduler.stopped:
                    logger.debug("[poll] discarding fetch error after stop job_id=%s", handle)
                    return
                await self._apply_error(handle, scheduler, exc.response)
                return

            if scheduler.stopped:
                logger.debug("[poll] discarding late response after stop job_id=%s", handle)
                return
            await self._apply_status(handle, scheduler, normalize_status(raw))
        finally:
            job_id_var.reset(token)

    async def _apply_status(self, handle: JobHandle, scheduler: PollScheduler, new_status: JobStatus) -> None:
        old_status = self._status
        self._status = new_status
        self._error = None
        self._warn_on_regression(handle, old_status, new_status)
        logger.debug(
            "[poll] status job_id=%s state=%s progress=%.2f",
            handle,
            new_status.state,
            new_status.progress,
        )

        done = self._done
        scheduler.after_status(new_status)
        # Callbacks may stop, reset or restart this observer
        fired = self._dispatcher.dispatch(handle, new_status)
        if new_status.is_terminal:
            done.set()

        await self._notify_status_changed(handle, old_status, new_status)
        if fired:
            await self._notify_job_terminal(handle, new_status)

    async def _apply_error(self, handle: JobHandle, scheduler: PollScheduler, error: FetchErrorInfo) -> None:
        # Last good status is kept; the error is shown alongside it
        self._error = error
        logger.warning(
            "[poll] status fetch failed job_id=%s kind=%s detail=%s",
            handle,
            error.kind,
            error.detail,
        )
        scheduler.after_error()
        await self._notify_fetch_error(handle, error)

    def _warn_on_regression(self, handle: JobHandle, old_status: JobStatus, new_status: JobStatus) -> None:
        old_rank = _STATE_RANK.get(old_status.code)
        new_rank = _STATE_RANK.get(new_status.code)
        if old_rank is not None and new_rank is not None and new_rank < old_rank:
            logger.warning(
                "[poll] state moved backwards job_id=%s old=%s new=%s",
                handle,
                old_status.state,
                new_status.state,
            )
        if new_status.progress < old_status.progress and new_status.is_recognized:
            logger.debug(
                "[poll] progress decreased job_id=%s old=%.2f new=%.2f",
                handle,
                old_status.progress,
                new_status.progress,
            )

    # ---------------- Observers -----------------
    async def _notify_status_changed(
        self,
        handle: JobHandle,
        old_status: Optional[JobStatus],
        new_status: JobStatus,
    ) -> None:
        for observer in self._observers:
            try:
                await observer.on_status_changed(handle, old_status, new_status)
            except Exception as exc:
                logger.error(
                    f"[observer:error] on_status_changed failed observer={type(observer).__name__} "
                    f"job_id={handle} error={exc}"
                )

    async def _notify_job_terminal(self, handle: JobHandle, status: JobStatus) -> None:
        for observer in self._observers:
            try:
                await observer.on_job_terminal(handle, status)
            except Exception as exc:
                logger.error(
                    f"[observer:error] on_job_terminal failed observer={type(observer).__name__} "
                    f"job_id={handle} error={exc}"
                )

    async def _notify_fetch_error(self, handle: JobHandle, error: FetchErrorInfo) -> None:
        for observer in self._observers:
            try:
                await observer.on_fetch_error(handle, error)
            except Exception as exc:
                logger.error(
                    f"[observer:error] on_fetch_error failed observer={type(observer).__name__} "
                    f"job_id={handle} error={exc}"
                )
