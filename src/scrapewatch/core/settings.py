from pydantic import HttpUrl, SecretStr, field_validator
from pydantic_settings import BaseSettings
from rich import print

from scrapewatch.adapters.logging_adapter import LoggingAdapter
from scrapewatch.core.interfaces.logging import LoggingPort


# using pydantic_settings to read environment variables / .env
# and do the type casting in one place
class ScrapewatchSettings(BaseSettings):
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore",
    }
    SCRAPEWATCH_LOG_LEVEL: str = "INFO"
    SCRAPEWATCH_API_URL: HttpUrl = HttpUrl("http://localhost:8000")
    SCRAPEWATCH_API_USERNAME: str = "admin"
    SCRAPEWATCH_API_PASSWORD: SecretStr = SecretStr("admin")
    SCRAPEWATCH_POLL_INTERVAL: float = 5.0  # seconds
    SCRAPEWATCH_STATUS_TIMEOUT: float = 10.0  # seconds
    SCRAPEWATCH_SUBMIT_TIMEOUT: float = 15.0  # seconds
    SCRAPEWATCH_CHECK_ATTEMPTS: int = 3

    @property
    def api_base_url(self) -> str:
        """API URL without trailing slash, ready for path joining."""
        return str(self.SCRAPEWATCH_API_URL).rstrip("/")

    def print_settings(self, logger: LoggingPort):
        """Prints the settings for debugging purposes"""
        logger.info("Scrapewatch Settings:")
        print(self)

    @field_validator("SCRAPEWATCH_LOG_LEVEL", mode="before")
    def normalize_log_level(cls, value: str) -> str:
        return str(value).upper().strip()


app_settings = ScrapewatchSettings()

logger: LoggingPort = LoggingAdapter("scrapewatch", app_settings.SCRAPEWATCH_LOG_LEVEL)
