import re
from typing import Any, Dict

from pydantic import BaseModel, SecretStr, field_validator

# Academic years offered by the portal form, newest first
ACADEMIC_YEARS = [
    "2024-25",
    "2023-24",
    "2022-23",
    "2021-22",
    "2020-21",
    "2019-20",
    "2018-19",
]

_ACADEMIC_YEAR_RE = re.compile(r"^\d{4}-\d{2}$")


class ScrapeRequest(BaseModel):
    """Configuration payload that creates a scrape job on the remote API."""

    username: str
    password: SecretStr
    academic_year: str
    scrape_attendance: bool = True
    scrape_mid_marks: bool = True
    scrape_personal_details: bool = True
    upload_to_supabase: bool = True
    force_update: bool = False

    model_config = {"extra": "forbid"}

    @field_validator("academic_year")
    def check_academic_year(cls, value: str) -> str:
        value = value.strip()
        if not _ACADEMIC_YEAR_RE.match(value):
            raise ValueError(f"academic_year must look like 2024-25, got {value!r}")
        return value

    def to_payload(self) -> Dict[str, Any]:
        """Wire JSON for POST /scrape (password in clear text)."""
        payload = self.model_dump(exclude={"password"})
        payload["password"] = self.password.get_secret_value()
        return payload
