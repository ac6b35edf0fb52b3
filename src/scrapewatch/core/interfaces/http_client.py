# scrapewatch/core/interfaces/http_client.py
from abc import ABC, abstractmethod
from typing import Any, Dict


class HttpClientPort(ABC):
    @abstractmethod
    async def __aenter__(self) -> "HttpClientPort":
        """Async context manager entry method"""
        pass

    @abstractmethod
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit method"""
        pass

    @abstractmethod
    async def get(self, url: str, timeout: float | None = None) -> Any:
        """Make an authenticated GET request.

        Returns the parsed JSON body, or the raw text when the body is not
        JSON. Non-2xx and transport failures raise a `JobApiException`
        subclass. When timeout is None the adapter default applies.
        """
        pass

    @abstractmethod
    async def post(self, url: str, json: Dict[str, Any] | None, timeout: float | None = None) -> Any:
        """Make an authenticated POST request with a JSON body.

        Same return and error contract as `get`.
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the HTTP client session"""
        pass
