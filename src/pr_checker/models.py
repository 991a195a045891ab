"""Data models for pr-checker."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from .errors import MalformedPullRequestError


class PullRequestStatus(enum.IntEnum):
    DRAFT = 0
    OPEN = 1

    @property
    def label(self) -> str:
        return "Draft" if self is PullRequestStatus.DRAFT else "Ready"


def _require_text(payload: dict[str, Any], key: str, name: str | None = None) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value:
        raise MalformedPullRequestError(name or key)
    return value


def _parse_timestamp(value: Any) -> datetime:
    if not isinstance(value, str) or not value:
        raise MalformedPullRequestError("updated_at")
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise MalformedPullRequestError("updated_at") from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class PullRequestRecord:
    """One open or draft pull request, normalized from the API."""

    title: str
    author: str
    link: str
    status: PullRequestStatus
    updated_at: datetime

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> PullRequestRecord:
        """Build a record from a GitHub pull request object.

        Raises MalformedPullRequestError if any required field is absent,
        so a record is either complete or not created at all.
        """
        if not isinstance(payload, dict):
            raise MalformedPullRequestError("pull_request")
        title = _require_text(payload, "title")
        user = payload.get("user")
        if not isinstance(user, dict):
            raise MalformedPullRequestError("user.login")
        author = _require_text(user, "login", "user.login")
        link = _require_text(payload, "html_url")
        draft = payload.get("draft")
        if not isinstance(draft, bool):
            raise MalformedPullRequestError("draft")
        updated_at = _parse_timestamp(payload.get("updated_at"))
        return cls(
            title=title,
            author=author,
            link=link,
            status=PullRequestStatus.DRAFT if draft else PullRequestStatus.OPEN,
            updated_at=updated_at,
        )


@dataclass
class RepositoryReport:
    name: str
    pull_requests: list[PullRequestRecord] = field(default_factory=list)


@dataclass
class RepositoryFailure:
    """A repository whose pull requests could not be fetched."""

    name: str
    error: str


@dataclass
class OrgReport:
    org: str
    total_repos: int = 0
    repositories: list[RepositoryReport] = field(default_factory=list)
    failures: list[RepositoryFailure] = field(default_factory=list)
