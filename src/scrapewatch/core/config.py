"""Configuration models for the job observation core.

Pydantic-based configuration that the composition root builds from
`ScrapewatchSettings` and injects into managers.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ObserverConfig(BaseModel):
    """Timing configuration for polling, submission and probing.

    Attributes:
        poll_interval: Seconds between status fetches while a job is not terminal
        status_timeout: Upper bound in seconds for a single status fetch
        submit_timeout: Upper bound in seconds for job submission
        check_attempts: Attempts for the health / CORS connection check
    """

    poll_interval: float = Field(
        default=5.0,
        gt=0,
        description="Interval in seconds between job status requests",
    )

    status_timeout: Optional[float] = Field(
        default=10.0,
        gt=0,
        description="Timeout in seconds for one status request (None uses the HTTP adapter default)",
    )

    submit_timeout: float = Field(
        default=15.0,
        gt=0,
        description="Timeout in seconds for the job submission request",
    )

    check_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts for connection check requests on transient errors",
    )

    model_config = {
        "frozen": True,
        "extra": "forbid",
    }

    @classmethod
    def from_app_settings(cls, settings) -> "ObserverConfig":
        """Build config from a ScrapewatchSettings instance."""
        return cls(
            poll_interval=settings.SCRAPEWATCH_POLL_INTERVAL,
            status_timeout=settings.SCRAPEWATCH_STATUS_TIMEOUT,
            submit_timeout=settings.SCRAPEWATCH_SUBMIT_TIMEOUT,
            check_attempts=settings.SCRAPEWATCH_CHECK_ATTEMPTS,
        )
