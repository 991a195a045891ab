"""Freshness filter and display ordering for pull requests."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime, timedelta

from .models import PullRequestRecord, PullRequestStatus

FRESHNESS_WINDOW = timedelta(days=14)


def is_fresh(
    record: PullRequestRecord,
    now: datetime,
    window: timedelta = FRESHNESS_WINDOW,
) -> bool:
    """True when the record was updated strictly after ``now - window``."""
    return record.updated_at > now - window


def has_fresh(
    records: Iterable[PullRequestRecord],
    now: datetime,
    window: timedelta = FRESHNESS_WINDOW,
) -> bool:
    return any(is_fresh(r, now, window) for r in records)


def sort_key(drafts_first: bool = False) -> Callable[[PullRequestRecord], tuple]:
    """Return a sort key: newest first, then status, then link/title/author.

    Ready pull requests come before drafts unless ``drafts_first`` is set.
    """

    def key(record: PullRequestRecord) -> tuple:
        if drafts_first:
            status_rank = 0 if record.status is PullRequestStatus.DRAFT else 1
        else:
            status_rank = 0 if record.status is PullRequestStatus.OPEN else 1
        return (
            -record.updated_at.timestamp(),
            status_rank,
            record.link,
            record.title,
            record.author,
        )

    return key


def sort_pull_requests(
    records: Iterable[PullRequestRecord], drafts_first: bool = False
) -> list[PullRequestRecord]:
    return sorted(records, key=sort_key(drafts_first))
