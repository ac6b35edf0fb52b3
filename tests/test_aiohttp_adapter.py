import asyncio

import aiohttp
import pytest
from aioresponses import aioresponses

from scrapewatch.adapters.aiohttp_client_adapter import AioHttpClientAdapter
from scrapewatch.core.exceptions import (
    FetchTimeoutError,
    JobNotFoundError,
    ServerError,
    UnauthorizedError,
    UnreachableError,
)
from scrapewatch.core.models.fetch_error import FetchErrorKind

"""
Tests for AioHttpClientAdapter behavior.

Each test checks how the adapter maps upstream responses and transport
errors onto the JobApiException hierarchy:
- 401 -> UnauthorizedError, 404 -> JobNotFoundError, other non-2xx ->
  ServerError carrying the response body.
- Timeouts -> FetchTimeoutError, connection failures -> UnreachableError.
- A 2xx body that is not JSON is returned as text so the status normalizer
  can degrade it to defaults instead of failing the poll.
"""

STATUS_URL = "http://api.test/job/job-123"


@pytest.mark.asyncio
async def test_get_json_response():
    with aioresponses() as m:
        m.get(STATUS_URL, payload={"status": "running", "progress": 0.5}, status=200)

        async with AioHttpClientAdapter(username="admin", password="secret") as client:
            data = await client.get(STATUS_URL)

    assert data == {"status": "running", "progress": 0.5}


@pytest.mark.asyncio
async def test_get_non_json_response_returns_text():
    with aioresponses() as m:
        m.get(STATUS_URL, body="<html>maintenance</html>", status=200, headers={"Content-Type": "text/html"})

        async with AioHttpClientAdapter() as client:
            data = await client.get(STATUS_URL)

    assert data == "<html>maintenance</html>"


@pytest.mark.asyncio
async def test_401_maps_to_unauthorized():
    with aioresponses() as m:
        m.get(STATUS_URL, status=401, body="Unauthorized")

        async with AioHttpClientAdapter(username="admin", password="wrong") as client:
            with pytest.raises(UnauthorizedError) as excinfo:
                await client.get(STATUS_URL)

    assert excinfo.value.response.kind == FetchErrorKind.unauthorized
    assert excinfo.value.response.status == 401


@pytest.mark.asyncio
async def test_404_maps_to_not_found():
    with aioresponses() as m:
        m.get(STATUS_URL, status=404, payload={"detail": "Job not found"})

        async with AioHttpClientAdapter() as client:
            with pytest.raises(JobNotFoundError) as excinfo:
                await client.get(STATUS_URL)

    assert excinfo.value.response.url == STATUS_URL


@pytest.mark.asyncio
async def test_500_maps_to_server_error_with_body():
    with aioresponses() as m:
        m.get(STATUS_URL, status=500, body="Worker crashed")

        async with AioHttpClientAdapter() as client:
            with pytest.raises(ServerError) as excinfo:
                await client.get(STATUS_URL)

    assert excinfo.value.response.status == 500
    assert excinfo.value.response.detail == "Worker crashed"


@pytest.mark.asyncio
async def test_post_returns_json_body():
    url = "http://api.test/scrape"
    with aioresponses() as m:
        m.post(url, payload={"job_id": "job-1"}, status=202)

        async with AioHttpClientAdapter() as client:
            body = await client.post(url, json={"academic_year": "2024-25"})

    assert body == {"job_id": "job-1"}


@pytest.mark.asyncio
async def test_timeout_maps_to_fetch_timeout():
    with aioresponses() as m:
        m.get(STATUS_URL, exception=asyncio.TimeoutError())

        async with AioHttpClientAdapter() as client:
            with pytest.raises(FetchTimeoutError) as excinfo:
                await client.get(STATUS_URL, timeout=1.0)

    assert excinfo.value.response.kind == FetchErrorKind.timeout


@pytest.mark.asyncio
async def test_connection_error_maps_to_unreachable():
    with aioresponses() as m:
        m.get(STATUS_URL, exception=aiohttp.ClientConnectionError("refused"))

        async with AioHttpClientAdapter() as client:
            with pytest.raises(UnreachableError):
                await client.get(STATUS_URL)


@pytest.mark.asyncio
async def test_requires_context_manager():
    client = AioHttpClientAdapter()

    with pytest.raises(RuntimeError):
        await client.get(STATUS_URL)


@pytest.mark.asyncio
async def test_credentials_sent_as_authorization_header():
    async with AioHttpClientAdapter(username="admin", password="secret") as client:
        headers = client._session.headers
        assert headers["Authorization"] == aiohttp.BasicAuth("admin", "secret").encode()
        assert headers["Accept"] == "application/json"
        assert client._session.auth is None

    async with AioHttpClientAdapter() as client:
        assert "Authorization" not in client._session.headers
