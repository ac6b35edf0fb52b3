from typing import Any, Awaitable, Callable, Sequence, Type

from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from scrapewatch.core.exceptions import TRANSIENT_ERRORS
from scrapewatch.core.settings import logger


class TenacityRetryAdapter:
    """Tenacity-based RetryPort for connection checks against the scrape API.

    Only connection-level failures are retried by default (server
    unreachable, request timed out), with exponential backoff between
    attempts. HTTP answers such as 401 or 404 mean the server is up and are
    raised on the first attempt. Call-time kwargs can override attempts,
    wait_initial, wait_max and exception_types.
    """

    def __init__(
        self,
        attempts: int = 3,
        wait_initial: float = 0.2,
        wait_max: float = 2.0,
        exception_types: Sequence[Type[Exception]] = TRANSIENT_ERRORS,
    ) -> None:
        if attempts < 1:
            raise ValueError(f"attempts must be at least 1, got {attempts}")
        self.attempts = attempts
        self.wait_initial = wait_initial
        self.wait_max = wait_max
        self.exception_types = tuple(exception_types)

    async def execute(self, func: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:
        attempts = kwargs.pop("attempts", self.attempts)
        wait_initial = kwargs.pop("wait_initial", self.wait_initial)
        wait_max = kwargs.pop("wait_max", self.wait_max)
        exception_types = tuple(kwargs.pop("exception_types", self.exception_types))

        retrying = AsyncRetrying(
            stop=stop_after_attempt(attempts),
            wait=wait_exponential(multiplier=wait_initial, max=wait_max),
            retry=retry_if_exception_type(exception_types),
            before_sleep=_log_retry,
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await func(*args, **kwargs)


def _log_retry(retry_state) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "[check] attempt %s failed, retrying in %.2fs: %s",
        retry_state.attempt_number,
        retry_state.next_action.sleep if retry_state.next_action else 0.0,
        exc,
    )
