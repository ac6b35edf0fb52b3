from typing import Optional

from scrapewatch.core.models.fetch_error import FetchErrorInfo, FetchErrorKind


class JobApiException(Exception):
    """Base exception for requests against the scrape API.

    Carries a `FetchErrorInfo` so callers can show the failure without
    inspecting transport details.
    """

    kind: FetchErrorKind = FetchErrorKind.server_error
    title: str = "Request Failed"

    def __init__(
        self,
        detail: str,
        status: Optional[int] = None,
        url: Optional[str] = None,
    ):
        self.response = FetchErrorInfo(
            kind=self.kind,
            title=self.title,
            detail=detail,
            status=status,
            url=url,
        )
        super().__init__(self.response.summary())


class UnauthorizedError(JobApiException):
    """Credentials were rejected (HTTP 401)."""

    kind = FetchErrorKind.unauthorized
    title = "Authentication Failed"


class JobNotFoundError(JobApiException):
    """The API does not know the requested job handle (HTTP 404)."""

    kind = FetchErrorKind.not_found
    title = "Job Not Found"


class UnreachableError(JobApiException):
    """No response was received (connection refused, DNS, reset)."""

    kind = FetchErrorKind.unreachable
    title = "Server Unreachable"


class FetchTimeoutError(JobApiException):
    """No response within the configured request timeout."""

    kind = FetchErrorKind.timeout
    title = "Request Timed Out"


class ServerError(JobApiException):
    """Any other non-2xx response; `detail` carries the response body."""

    kind = FetchErrorKind.server_error
    title = "Server Error"


class InvalidResponseError(JobApiException):
    """A 2xx response that lacks data the client cannot do without."""

    kind = FetchErrorKind.invalid_response
    title = "Invalid Response"


# Failures where the server may simply not be up yet; the only ones retried
TRANSIENT_ERRORS = (UnreachableError, FetchTimeoutError)
