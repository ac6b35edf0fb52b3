from enum import StrEnum
from typing import Optional

from pydantic import BaseModel


class FetchErrorKind(StrEnum):
    unauthorized = "unauthorized"
    not_found = "not_found"
    unreachable = "unreachable"
    timeout = "timeout"
    server_error = "server_error"
    invalid_response = "invalid_response"


class FetchErrorInfo(BaseModel):
    """Display-level description of a failed request.

    Shown next to the last known good status; it never replaces it.
    """

    kind: FetchErrorKind
    title: str
    detail: str
    status: Optional[int] = None
    url: Optional[str] = None

    def summary(self) -> str:
        if self.status is not None:
            return f"{self.title} ({self.status}): {self.detail}"
        return f"{self.title}: {self.detail}"
