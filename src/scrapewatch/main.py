# main.py
# main lives at the outermost layer (not in core):
# instantiates the concrete adapters, wires dependencies, runs the CLI
import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import click
from rich.console import Console
from rich.live import Live

from scrapewatch.adapters.aiohttp_client_adapter import AioHttpClientAdapter
from scrapewatch.adapters.retry_tenacity import TenacityRetryAdapter
from scrapewatch.adapters.rich_view import render_snapshot
from scrapewatch.core.config import ObserverConfig
from scrapewatch.core.exceptions import JobApiException
from scrapewatch.core.logging_config import configure_logging
from scrapewatch.core.managers.connection_check import ConnectionCheck
from scrapewatch.core.managers.job_observer import JobObserver
from scrapewatch.core.managers.job_submitter import JobSubmitter
from scrapewatch.core.managers.observers import StatusHistoryObserver, UnrecognizedStateObserver
from scrapewatch.core.managers.status_fetcher import StatusFetcher
from scrapewatch.core.models.job import JobHandle, JobState, JobStatus
from scrapewatch.core.models.scrape_request import ACADEMIC_YEARS, ScrapeRequest
from scrapewatch.core.settings import app_settings, logger

# Screen refresh cadence of the live view (seconds), independent of polling
VIEW_REFRESH = 0.25

console = Console()


@asynccontextmanager
async def open_http_client(config: ObserverConfig) -> AsyncIterator[AioHttpClientAdapter]:
    client = AioHttpClientAdapter(
        username=app_settings.SCRAPEWATCH_API_USERNAME,
        password=app_settings.SCRAPEWATCH_API_PASSWORD.get_secret_value(),
        default_timeout=config.status_timeout or 10.0,
    )
    async with client:
        yield client


def build_observer(http_client, api_url: str, config: ObserverConfig) -> JobObserver:
    fetcher = StatusFetcher(http_client, api_url, timeout=config.status_timeout)
    return JobObserver(
        fetcher,
        config,
        on_completed=lambda: console.print("[green]Scraping job completed![/green]"),
        on_failed=lambda message: console.print(f"[red]Scraping job failed: {message}[/red]"),
        observers=[StatusHistoryObserver(max_entries=100), UnrecognizedStateObserver()],
    )


async def watch_job(observer: JobObserver, handle: JobHandle) -> JobStatus:
    """Observe `handle` with a live view until it is terminal."""
    observer.start(handle)
    try:
        with Live(render_snapshot(observer.snapshot()), console=console, refresh_per_second=4) as live:
            while True:
                try:
                    status = await observer.wait_until_terminal(timeout=VIEW_REFRESH)
                except asyncio.TimeoutError:
                    live.update(render_snapshot(observer.snapshot()))
                    continue
                live.update(render_snapshot(observer.snapshot()))
                return status
    finally:
        observer.reset()


async def _run_watch(api_url: str, config: ObserverConfig, handle: JobHandle) -> JobStatus:
    async with open_http_client(config) as http_client:
        observer = build_observer(http_client, api_url, config)
        return await watch_job(observer, handle)


async def _run_submit(api_url: str, config: ObserverConfig, request: ScrapeRequest, watch: bool) -> Optional[JobStatus]:
    async with open_http_client(config) as http_client:
        submitter = JobSubmitter(http_client, api_url, timeout=config.submit_timeout)
        handle = await submitter.submit(request)
        console.print(f"[green]Scraping job started![/green] job_id={handle}")
        if not watch:
            return None
        observer = build_observer(http_client, api_url, config)
        return await watch_job(observer, handle)


async def _run_check(api_url: str, config: ObserverConfig) -> None:
    async with open_http_client(config) as http_client:
        check = ConnectionCheck(
            http_client,
            api_url,
            retry_port=TenacityRetryAdapter(attempts=config.check_attempts),
            attempts=config.check_attempts,
            timeout=config.status_timeout,
        )
        console.print("[bold]Health endpoint[/bold]")
        console.print_json(data=await check.health())
        console.print("[bold]CORS test endpoint[/bold]")
        console.print_json(data=await check.cors_test())


def _exit_code(status: Optional[JobStatus]) -> int:
    if status is None:
        return 0
    return 0 if status.code == JobState.completed else 1


def _config_from_options(interval: Optional[float]) -> ObserverConfig:
    config = ObserverConfig.from_app_settings(app_settings)
    if interval is not None:
        config = config.model_copy(update={"poll_interval": interval})
    return config


@click.group(help="scrapewatch: submit college portal scrape jobs and follow them to completion")
@click.option("--api-url", default=app_settings.api_base_url, show_default=True, help="Scrape API base URL")
@click.option("--log-level", default=app_settings.SCRAPEWATCH_LOG_LEVEL, show_default=True)
@click.pass_context
def cli(ctx, api_url, log_level):
    configure_logging(log_level)
    ctx.ensure_object(dict)
    ctx.obj["api_url"] = api_url.rstrip("/")


@cli.command("watch", help="Follow an existing job until it completes or fails")
@click.argument("job_id")
@click.option("--interval", type=float, default=None, help="Seconds between status requests")
@click.pass_context
def watch_cmd(ctx, job_id, interval):
    config = _config_from_options(interval)
    status = asyncio.run(_run_watch(ctx.obj["api_url"], config, job_id))
    ctx.exit(_exit_code(status))


@cli.command("submit", help="Start a scrape job and follow it")
@click.option("--username", prompt="Portal username", help="College portal username")
@click.option("--password", prompt="Portal password", hide_input=True, help="College portal password")
@click.option("--academic-year", type=click.Choice(ACADEMIC_YEARS), default=ACADEMIC_YEARS[0], show_default=True)
@click.option("--attendance/--no-attendance", default=True, show_default=True)
@click.option("--mid-marks/--no-mid-marks", default=True, show_default=True)
@click.option("--personal-details/--no-personal-details", default=True, show_default=True)
@click.option("--upload/--no-upload", default=True, show_default=True, help="Upload results to Supabase")
@click.option("--force-update", is_flag=True, default=False, help="Overwrite data already uploaded")
@click.option("--watch/--no-watch", default=True, show_default=True)
@click.option("--interval", type=float, default=None, help="Seconds between status requests")
@click.pass_context
def submit_cmd(ctx, username, password, academic_year, attendance, mid_marks, personal_details, upload,
               force_update, watch, interval):
    request = ScrapeRequest(
        username=username,
        password=password,
        academic_year=academic_year,
        scrape_attendance=attendance,
        scrape_mid_marks=mid_marks,
        scrape_personal_details=personal_details,
        upload_to_supabase=upload,
        force_update=force_update,
    )
    config = _config_from_options(interval)
    try:
        status = asyncio.run(_run_submit(ctx.obj["api_url"], config, request, watch))
    except JobApiException as exc:
        raise click.ClickException(exc.response.summary())
    ctx.exit(_exit_code(status))


@cli.command("check", help="Test connectivity against the health and CORS test endpoints")
@click.option("--show-settings", is_flag=True, default=False)
@click.pass_context
def check_cmd(ctx, show_settings):
    if show_settings:
        app_settings.print_settings(logger)
    config = _config_from_options(None)
    try:
        asyncio.run(_run_check(ctx.obj["api_url"], config))
    except JobApiException as exc:
        raise click.ClickException(exc.response.summary())


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
