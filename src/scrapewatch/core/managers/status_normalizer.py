"""Maps raw job status payloads onto the canonical `JobStatus`.

The scrape API answers `GET /job/{id}` with a JSON object shaped like::

    {"status": "running", "message": "...", "progress": 0.4, "details": {...}}

`normalize_status` never raises: missing or malformed fields fall back to
defaults.
"""

import logging
import math
from typing import Any, Dict, Mapping

from scrapewatch.core.models.job import DEFAULT_MESSAGE, JobState, JobStatus

logger = logging.getLogger(__name__)

# Keys that may carry the job state; the API uses "status"
STATE_KEYS = ("status", "state")


def _coerce_state(raw: Mapping[str, Any]) -> str:
    for key in STATE_KEYS:
        value = raw.get(key)
        if isinstance(value, str) and value.strip():
            value = value.strip()
            try:
                return JobState(value.lower())
            except ValueError:
                # Unrecognized: kept verbatim for display, non-terminal
                return value
    return JobState.unknown


def _coerce_progress(value: Any) -> float:
    if isinstance(value, bool) or value is None:
        return 0.0
    try:
        progress = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(progress):
        return 0.0
    return min(1.0, max(0.0, progress))


def _coerce_message(value: Any) -> str:
    if value is None:
        return DEFAULT_MESSAGE
    text = str(value).strip()
    return text or DEFAULT_MESSAGE


def _coerce_details(value: Any) -> Dict[str, Any]:
    if isinstance(value, Mapping):
        return dict(value)
    return {}


def normalize_status(raw: Any) -> JobStatus:
    """Convert a raw payload (dict, text, None...) into a `JobStatus`."""
    if not isinstance(raw, Mapping):
        logger.debug("[normalize] non-object payload type=%s, using defaults", type(raw).__name__)
        return JobStatus.initial()

    return JobStatus(
        state=_coerce_state(raw),
        message=_coerce_message(raw.get("message")),
        progress=_coerce_progress(raw.get("progress")),
        details=_coerce_details(raw.get("details")),
    )
