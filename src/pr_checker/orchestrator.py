"""Orchestrator: wires together client, aggregator, and renderer."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from .aggregator import aggregate_org_report
from .config import Settings
from .errors import AccessDeniedError, FetchError
from .github.client import GitHubClient
from .models import OrgReport
from .renderer import render_report

logger = logging.getLogger(__name__)


async def ensure_org_access(client: GitHubClient, org: str) -> None:
    """Raise AccessDeniedError unless the token is a member of ``org``."""
    logins = await client.org_logins()
    if org not in logins:
        logger.debug("%s not in memberships: %s", org, sorted(logins))
        raise AccessDeniedError(org)


async def run(
    settings: Settings, now: datetime | None = None, progress: bool = True
) -> OrgReport:
    """Main pipeline: check access, fetch, then render."""
    async with GitHubClient(
        token=settings.token,
        concurrency=settings.concurrency,
        base_url=settings.api_url,
        verify_ssl=settings.verify_ssl,
    ) as client:
        await ensure_org_access(client, settings.org)
        report = await aggregate_org_report(
            client,
            settings.org,
            concurrency=settings.concurrency,
            exclude_repos=settings.exclude_repos,
            progress=progress,
        )

    if report.failures and not settings.allow_partial:
        raise FetchError(report.failures)

    render_report(
        report,
        plain=settings.plain,
        now=now,
        window=timedelta(days=settings.days),
        drafts_first=settings.drafts_first,
    )
    return report
