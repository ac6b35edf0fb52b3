from typing import Any
from urllib.parse import quote

from scrapewatch.core.interfaces.http_client import HttpClientPort
from scrapewatch.core.models.job import JobHandle
from scrapewatch.core.settings import logger


class StatusFetcher:
    """Performs one authenticated status query for a job handle.

    Stateless: returns the raw payload or raises a `JobApiException`
    subclass (`UnauthorizedError`, `JobNotFoundError`, `UnreachableError`,
    `FetchTimeoutError`, `ServerError`).
    """

    def __init__(self, http_client: HttpClientPort, api_url: str, timeout: float | None = None):
        self._http = http_client
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout

    def status_url(self, handle: JobHandle) -> str:
        return f"{self._api_url}/job/{quote(handle, safe='')}"

    async def fetch(self, handle: JobHandle) -> Any:
        url = self.status_url(handle)
        logger.debug("[fetch] GET %s", url)
        return await self._http.get(url, timeout=self._timeout)
