"""Timer-driven repetition of status fetches for one job handle.

The scheduler holds at most one cancellable delayed call (an asyncio
`TimerHandle`) and at most one in-flight fetch task. It is re-armed by
its owner after every processed result:

- `after_status(status)` arms the next fetch at now + interval while the
  job is not terminal, and releases the timer once it is.
- `after_error()` keeps the cadence: an already pending timer is left as
  is, otherwise one is armed at now + interval. There is no fast retry.

A timer that fires while a fetch is still in flight is re-armed for one
more interval, so a non-terminal job always has a next fetch pending.

`stop()` is the only cancellation primitive. It is idempotent, cancels the
pending timer and the in-flight task, and flips `stopped` so that a fetch
resolving later can tell its result must be discarded.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from scrapewatch.core.models.job import JobStatus

logger = logging.getLogger(__name__)

PollCallback = Callable[["PollScheduler"], Awaitable[None]]


class PollScheduler:
    def __init__(self, poll: PollCallback, interval: float, name: str = "-") -> None:
        if interval <= 0:
            raise ValueError(f"poll interval must be positive, got {interval}")
        self._poll = poll
        self.interval = interval
        self.name = name
        self._timer: Optional[asyncio.TimerHandle] = None
        self._in_flight: Optional[asyncio.Task] = None
        self._started = False
        self._finished = False  # terminal status seen
        self._stopped = False

    # ---------------- State -----------------
    @property
    def stopped(self) -> bool:
        return self._stopped

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def active(self) -> bool:
        """True while more fetches may still happen."""
        return self._started and not (self._stopped or self._finished)

    @property
    def in_flight(self) -> bool:
        return self._in_flight is not None and not self._in_flight.done()

    @property
    def has_pending_timer(self) -> bool:
        return self._timer is not None and not self._timer.cancelled()

    @property
    def next_fetch_at(self) -> Optional[float]:
        """Event loop time of the pending fetch, if any."""
        return self._timer.when() if self.has_pending_timer else None

    # ---------------- Control -----------------
    def start(self) -> None:
        """Issue the first fetch immediately (no initial wait)."""
        if self._started or self._stopped:
            return
        self._started = True
        logger.debug("[poll] start job_id=%s interval=%ss", self.name, self.interval)
        self._fire()

    def after_status(self, status: JobStatus) -> None:
        if self._stopped:
            return
        if status.is_terminal:
            self._finished = True
            self._cancel_timer()
            logger.debug("[poll] terminal state=%s, polling finished job_id=%s", status.state, self.name)
            return
        self._arm()

    def after_error(self) -> None:
        if self._stopped or self._finished:
            return
        self._arm()

    def poll_now(self) -> bool:
        """Fetch right away instead of waiting for the timer.

        Returns False when nothing was started: stopped, finished, or a
        fetch is already in flight (the request is coalesced into it).
        """
        if not self.active:
            return False
        if self.in_flight:
            logger.debug("[poll] manual refresh coalesced with in-flight fetch job_id=%s", self.name)
            return False
        self._cancel_timer()
        return self._fire()

    def stop(self) -> None:
        if self._stopped:
            return
        self._stopped = True
        self._cancel_timer()
        task = self._in_flight
        # A poll callback may stop its own scheduler; never cancel ourselves
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
        logger.debug("[poll] stopped job_id=%s", self.name)

    async def wait_idle(self) -> None:
        """Wait until no fetch is in flight."""
        task = self._in_flight
        if task is not None and task is not asyncio.current_task():
            await asyncio.gather(task, return_exceptions=True)

    # ---------------- Internals -----------------
    def _arm(self) -> None:
        if self.has_pending_timer:
            return
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.interval, self._on_timer)
        logger.debug("[poll] next fetch in %ss job_id=%s", self.interval, self.name)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_timer(self) -> None:
        self._timer = None
        if self.in_flight:
            # The tick is deferred one interval, never dropped
            logger.debug("[poll] tick deferred, fetch still in flight job_id=%s", self.name)
            self._arm()
            return
        self._fire()

    def _fire(self) -> bool:
        if self._stopped or self._finished:
            return False
        if self.in_flight:
            # Exactly one fetch per handle
            logger.debug("[poll] fetch request coalesced, fetch still in flight job_id=%s", self.name)
            return False
        loop = asyncio.get_running_loop()
        self._in_flight = loop.create_task(self._run(), name=f"poll:{self.name}")
        return True

    async def _run(self) -> None:
        try:
            await self._poll(self)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            # Keep the cadence; an unexpected error must not end observation
            logger.error("[poll] poll callback failed job_id=%s error=%s", self.name, exc)
            self.after_error()
        finally:
            if self._in_flight is asyncio.current_task():
                self._in_flight = None
