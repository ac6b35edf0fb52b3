from typing import Any, Optional

from scrapewatch.core.exceptions import TRANSIENT_ERRORS
from scrapewatch.core.interfaces.http_client import HttpClientPort
from scrapewatch.core.interfaces.retry import RetryPort
from scrapewatch.core.settings import logger


class ConnectionCheck:
    """Smoke-tests connectivity against the scrape API.

    `health()` hits `/health`, `cors_test()` hits `/cors-test`; both return
    the decoded body. Retries go through an optional RetryPort.
    """

    def __init__(
        self,
        http_client: HttpClientPort,
        api_url: str,
        retry_port: Optional[RetryPort] = None,
        attempts: int = 3,
        timeout: float | None = None,
    ):
        self._http = http_client
        self._api_url = api_url.rstrip("/")
        self._retry = retry_port
        self._attempts = attempts
        self._timeout = timeout

    async def health(self) -> Any:
        return await self._check("/health")

    async def cors_test(self) -> Any:
        return await self._check("/cors-test")

    async def _check(self, path: str) -> Any:
        url = self._api_url + path
        logger.debug("[check] GET %s", url)
        if self._retry is None:
            return await self._http.get(url, timeout=self._timeout)
        return await self._retry.execute(
            self._http.get,
            url,
            timeout=self._timeout,
            attempts=self._attempts,
            exception_types=TRANSIENT_ERRORS,
        )
