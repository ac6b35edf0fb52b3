"""Central logging configuration.

`configure_logging` is called once by the composition root. It wires a
stdout sink for DEBUG/INFO and a stderr sink for WARNING and above, and
injects the id of the job being observed into every record. Core code
never touches handlers; it emits through `LoggingPort` or module loggers.
"""

from __future__ import annotations

import contextvars
import logging
import sys
from typing import Optional

# Job handle of the fetch being processed (set by JobObserver)
job_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("job_id", default="-")

DEFAULT_FORMAT = "[%(asctime)s] %(levelname)s %(name)s job=%(job_id)s: %(message)s"


def coerce_level(level: int | str | None) -> int:
    if level is None:
        return logging.INFO
    if isinstance(level, int):
        return level
    key = str(level).upper().strip()
    return logging.getLevelNamesMapping().get(key, logging.INFO)


class _JobIdFilter(logging.Filter):
    """Inject the current job id from the contextvar into every record."""

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - simple
        record.job_id = job_id_var.get()
        return True


class _MaxLevelFilter(logging.Filter):
    def __init__(self, max_level: int):
        super().__init__()
        self.max_level = max_level

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover
        return record.levelno <= self.max_level


class _MinLevelFilter(logging.Filter):
    def __init__(self, min_level: int):
        super().__init__()
        self.min_level = min_level

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover
        return record.levelno >= self.min_level


def configure_logging(
    level: int | str | None = None,
    fmt: Optional[str] = None,
    quiet_aiohttp: bool = True,
) -> None:
    """Configure the root logger with separate stdout/stderr sinks and job ids."""
    numeric_level = coerce_level(level)
    fmt = fmt or DEFAULT_FORMAT

    root = logging.getLogger()
    root.setLevel(numeric_level)

    # Avoid duplicate handlers when called twice
    for h in list(root.handlers):
        root.removeHandler(h)

    formatter = logging.Formatter(fmt)
    job_filter = _JobIdFilter()

    stdout_handler = logging.StreamHandler(stream=sys.stdout)
    stdout_handler.setLevel(logging.DEBUG)
    stdout_handler.addFilter(_MaxLevelFilter(logging.INFO))
    stdout_handler.addFilter(job_filter)
    stdout_handler.setFormatter(formatter)

    stderr_handler = logging.StreamHandler(stream=sys.stderr)
    stderr_handler.setLevel(logging.WARNING)
    stderr_handler.addFilter(_MinLevelFilter(logging.WARNING))
    stderr_handler.addFilter(job_filter)
    stderr_handler.setFormatter(formatter)

    root.addHandler(stdout_handler)
    root.addHandler(stderr_handler)

    if quiet_aiohttp:
        logging.getLogger("aiohttp").setLevel(logging.WARNING)

    logging.getLogger("scrapewatch").setLevel(numeric_level)
    logging.getLogger("scrapewatch").debug(
        "Logging configured level=%s quiet_aiohttp=%s", numeric_level, quiet_aiohttp
    )
