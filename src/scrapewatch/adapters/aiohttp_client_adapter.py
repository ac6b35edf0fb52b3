# scrapewatch/adapters/aiohttp_client_adapter.py
import asyncio
from typing import Any, Dict, Optional

import aiohttp

from scrapewatch.core.exceptions import (
    FetchTimeoutError,
    JobApiException,
    JobNotFoundError,
    ServerError,
    UnauthorizedError,
    UnreachableError,
)
from scrapewatch.core.interfaces.http_client import HttpClientPort
from scrapewatch.core.settings import logger

# Longest response body snippet kept in error details
BODY_SNIPPET = 500


class AioHttpClientAdapter(HttpClientPort):
    def __init__(
        self,
        username: Optional[str] = None,
        password: Optional[str] = None,
        default_timeout: float = 10.0,
    ):
        self._session: Optional[aiohttp.ClientSession] = None
        self._headers: Dict[str, str] = {"Accept": "application/json"}
        if username is not None:
            self._headers["Authorization"] = aiohttp.BasicAuth(username, password or "").encode()
        # Per-field defaults so callers only ever pass a total in seconds
        self._default_total: float = default_timeout
        self._default_sock_connect: float = 5.0
        self._default_client_timeout = aiohttp.ClientTimeout(
            total=self._default_total,
            sock_connect=self._default_sock_connect,
        )

    async def __aenter__(self):
        """Async context manager entry"""
        self._session = aiohttp.ClientSession(headers=self._headers)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        await self.close()
        return False

    def _client_timeout(self, timeout: float | None) -> aiohttp.ClientTimeout:
        if timeout is None:
            return self._default_client_timeout
        # Apply the caller's total and keep the adapter connect bound
        return aiohttp.ClientTimeout(
            total=timeout,
            sock_connect=min(self._default_sock_connect, timeout),
        )

    async def get(self, url: str, timeout: float | None = None) -> Any:
        return await self._request("GET", url, timeout=self._client_timeout(timeout))

    async def post(self, url: str, json: Dict[str, Any] | None, timeout: float | None = None) -> Any:
        return await self._request("POST", url, json=json, timeout=self._client_timeout(timeout))

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        """
        Perform a request and return its body.

        Translates HTTP/network errors into the JobApiException hierarchy.
        A 2xx body that is not JSON is returned as text, not raised.
        """
        if self._session is None:
            raise RuntimeError("HTTP client not initialized. Use 'async with' context manager.")

        try:
            async with self._session.request(method, url, **kwargs) as response:
                if response.status >= 400:
                    body_text = await response.text()
                    raise self._map_status(response.status, url, body_text)

                try:
                    return await response.json()
                except (aiohttp.ContentTypeError, ValueError):
                    response_text = await response.text()
                    logger.warning(
                        "Non-JSON response from scrape API. URL: %s, Content: %s",
                        url,
                        response_text[:BODY_SNIPPET],
                    )
                    return response_text

        except JobApiException:
            raise

        except asyncio.TimeoutError:
            logger.error("Timeout when requesting scrape API. %s %s", method, url)
            raise FetchTimeoutError(
                "No response received from server within the time limit.",
                url=url,
            )

        except aiohttp.ClientError as client_error:
            logger.error(
                "Connection error when requesting scrape API. %s %s, Error: %s",
                method,
                url,
                str(client_error),
            )
            raise UnreachableError(
                "No response received from server. Check your network connection and server status.",
                url=url,
            )

        except Exception as unexpected_error:
            logger.error(
                "Unexpected error for scrape API. %s %s, Error: %s",
                method,
                url,
                str(unexpected_error),
            )
            raise UnreachableError(
                f"Unexpected error while contacting server: {unexpected_error}",
                url=url,
            )

    def _map_status(self, status: int, url: str, body_text: str) -> JobApiException:
        if status == 401:
            logger.warning("Authentication failed when requesting scrape API. URL: %s", url)
            return UnauthorizedError(
                "The API rejected the configured credentials.", status=status, url=url
            )
        if status == 404:
            logger.warning("Job not found at scrape API. URL: %s", url)
            return JobNotFoundError(
                "The API does not know this job.", status=status, url=url
            )
        logger.error(
            "HTTP error when requesting scrape API. URL: %s, Status: %s, Body: %s",
            url,
            status,
            body_text[:BODY_SNIPPET],
        )
        return ServerError(
            body_text[:BODY_SNIPPET] or "No details",
            status=status,
            url=url,
        )

    async def close(self) -> None:
        """Close the session"""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None
