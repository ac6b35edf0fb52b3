from typing import Any, Awaitable, Callable, Protocol


class RetryPort(Protocol):
    """Retries an API call while the scrape server is not reachable yet.

    Used by the connection check (`/health`, `/cors-test`). A call is
    repeated only for the exception types it is told are transient; every
    other error is raised as is.
    """

    async def execute(self, func: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:
        """Await `func(*args, **kwargs)`, retrying transient failures.

        Keyword overrides consumed here and not passed on: attempts,
        wait_initial, wait_max, exception_types. The last exception is
        re-raised once attempts are exhausted.
        """
        ...
