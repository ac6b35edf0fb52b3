from scrapewatch.core.exceptions import InvalidResponseError
from scrapewatch.core.interfaces.http_client import HttpClientPort
from scrapewatch.core.models.job import JobHandle
from scrapewatch.core.models.scrape_request import ScrapeRequest
from scrapewatch.core.settings import logger


class JobSubmitter:
    """Creates a scrape job and returns its handle.

    Submission is not idempotent, so it is never retried; transport errors
    propagate to the caller as `JobApiException` subclasses.
    """

    def __init__(self, http_client: HttpClientPort, api_url: str, timeout: float = 15.0):
        self._http = http_client
        self._url = api_url.rstrip("/") + "/scrape"
        self._timeout = timeout

    async def submit(self, request: ScrapeRequest) -> JobHandle:
        logger.info(
            "Submitting scrape job academic_year=%s attendance=%s mid_marks=%s personal_details=%s upload=%s",
            request.academic_year,
            request.scrape_attendance,
            request.scrape_mid_marks,
            request.scrape_personal_details,
            request.upload_to_supabase,
        )
        body = await self._http.post(self._url, json=request.to_payload(), timeout=self._timeout)

        job_id = body.get("job_id") if isinstance(body, dict) else None
        if job_id is None or not str(job_id).strip():
            raise InvalidResponseError("Invalid response from server: Missing job_id", url=self._url)

        handle = str(job_id)
        logger.info("Scrape job accepted job_id=%s", handle)
        return handle
