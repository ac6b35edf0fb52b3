"""Terminal projection of a `JobSnapshot` using rich renderables."""

from typing import Any, Dict, List

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.progress_bar import ProgressBar
from rich.table import Table
from rich.text import Text

from scrapewatch.core.models.job import TASK_LABELS, JobSnapshot, JobState, JobStatus, TaskResult

BADGE_STYLES = {
    JobState.completed: "bold white on green",
    JobState.failed: "bold white on red",
    JobState.running: "bold white on blue",
    JobState.queued: "bold black on yellow",
}
DEFAULT_BADGE_STYLE = "bold white on grey50"

# (success text, failure text) per known task
RESULT_TEXT = {
    "attendance": ("Successfully scraped attendance data", "Failed to scrape attendance data"),
    "mid_marks": ("Successfully scraped mid marks data", "Failed to scrape mid marks data"),
    "personal_details": ("Successfully scraped personal details", "Failed to scrape personal details"),
    "upload": ("Successfully uploaded data to Supabase", "Failed to upload data to Supabase"),
}

CONFIG_LABELS = [
    ("scrape_attendance", "Scraping Attendance"),
    ("scrape_mid_marks", "Scraping Mid Marks"),
    ("scrape_personal_details", "Scraping Personal Details"),
    ("upload_to_supabase", "Uploading to Supabase"),
]


def _yes_no(value: Any) -> str:
    return "Yes" if value else "No"


def render_badge(state: str) -> Text:
    style = BADGE_STYLES.get(state, DEFAULT_BADGE_STYLE)
    label = str(state)
    return Text(f" {label[:1].upper()}{label[1:]} ", style=style)


def render_details(details: Dict[str, Any]) -> Table:
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold")
    table.add_column()
    table.add_row("Academic Year:", str(details.get("academic_year", "-")))
    for key, label in CONFIG_LABELS:
        table.add_row(f"{label}:", _yes_no(details.get(key)))
    if details.get("upload_to_supabase"):
        table.add_row("Force Update:", _yes_no(details.get("force_update")))
    return table


def render_result_line(task: str, result: TaskResult) -> Text:
    label = TASK_LABELS.get(task, task.replace("_", " ").title())
    ok_text, fail_text = RESULT_TEXT.get(task, ("Succeeded", "Failed"))
    text = Text.assemble(
        (f"{label}: ", "bold"),
        (ok_text, "green") if result.success else (fail_text, "red"),
    )
    if result.stats:
        text.append("\n  " + ", ".join(str(v) for v in result.stats.values()), style="dim")
    return text


def render_results(status: JobStatus) -> List[Text]:
    return [render_result_line(task, result) for task, result in status.results().items()]


def render_snapshot(snapshot: JobSnapshot) -> RenderableType:
    status = snapshot.status
    parts: List[RenderableType] = []

    if snapshot.error is not None:
        parts.append(
            Panel(Text(snapshot.error.summary()), title="Network Error", border_style="red")
        )

    summary = Table.grid(padding=(0, 2))
    summary.add_column(style="bold")
    summary.add_column()
    summary.add_row("Job ID:", snapshot.handle or "-")
    summary.add_row("Status:", status.message)
    parts.append(summary)

    percent = round(status.progress * 100)
    parts.append(ProgressBar(total=100, completed=percent, width=40))
    parts.append(Text(f"{percent}% Complete", style="dim"))

    if status.details:
        parts.append(Panel(render_details(status.details), title="Job Details", title_align="left"))

    results = render_results(status)
    if results:
        parts.append(Panel(Group(*results), title="Results", title_align="left"))

    title = Text.assemble("Job Status ", render_badge(status.state))
    return Panel(Group(*parts), title=title, title_align="left")
