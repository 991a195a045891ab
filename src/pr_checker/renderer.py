"""Terminal renderer: one block per repository with fresh pull requests."""

from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone

from rich.console import Console
from rich.style import Style
from rich.text import Text

from .models import OrgReport, PullRequestRecord, PullRequestStatus, RepositoryReport
from .policy import FRESHNESS_WINDOW, has_fresh, is_fresh, sort_pull_requests

_STATUS_STYLES = {
    PullRequestStatus.DRAFT: "white",
    PullRequestStatus.OPEN: "green",
}


def format_plain_line(record: PullRequestRecord) -> str:
    return f"  {record.status.label}\t- {record.author} => {record.title} ({record.link})"


def format_styled_line(record: PullRequestRecord) -> Text:
    """Status label in color and the title as a clickable hyperlink."""
    return Text.assemble(
        "  ",
        (record.status.label, _STATUS_STYLES[record.status]),
        f"\t- {record.author} => ",
        (record.title, Style(link=record.link)),
    )


def select_records(
    repo: RepositoryReport,
    now: datetime,
    window: timedelta = FRESHNESS_WINDOW,
    drafts_first: bool = False,
) -> list[PullRequestRecord]:
    """Return the fresh pull requests of a repository in display order.

    An empty list means the repository is not printed at all.
    """
    if not repo.pull_requests or not has_fresh(repo.pull_requests, now, window):
        return []
    ordered = sort_pull_requests(repo.pull_requests, drafts_first=drafts_first)
    return [r for r in ordered if is_fresh(r, now, window)]


def render_report(
    report: OrgReport,
    plain: bool = False,
    now: datetime | None = None,
    window: timedelta = FRESHNESS_WINDOW,
    drafts_first: bool = False,
    console: Console | None = None,
) -> int:
    """Print every repository that has fresh pull requests.

    Repositories appear in the order they were received. Returns the number
    of repositories printed.
    """
    now = now or datetime.now(timezone.utc)
    if not plain and console is None:
        console = Console(highlight=False)

    printed = 0
    for repo in report.repositories:
        records = select_records(repo, now, window, drafts_first)
        if not records:
            continue
        printed += 1
        if plain:
            print(repo.name)
            for record in records:
                print(format_plain_line(record))
        else:
            console.print(Text(repo.name, style="bold"), soft_wrap=True)
            for record in records:
                console.print(format_styled_line(record), soft_wrap=True)

    if report.failures:
        _render_failures(report, plain)
    return printed


def _render_failures(report: OrgReport, plain: bool) -> None:
    names = ", ".join(f.name for f in report.failures)
    message = (
        f"Failed to fetch pull requests for "
        f"{len(report.failures)} of {report.total_repos} repo(s): {names}"
    )
    if plain:
        print(f"Warning: {message}", file=sys.stderr)
        return
    Console(stderr=True, highlight=False).print(
        Text.assemble(("Warning:", "bold yellow"), f" {message}")
    )
