"""Fetch pull requests for every repo in an org and collect them into an OrgReport."""

from __future__ import annotations

import asyncio
import logging

import httpx
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from .errors import MalformedPullRequestError
from .github.client import GitHubClient
from .models import OrgReport, PullRequestRecord, RepositoryFailure, RepositoryReport

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 8

RepositoryResult = RepositoryReport | RepositoryFailure

_DONE = object()


async def fetch_repository(
    client: GitHubClient, owner: str, repo_name: str
) -> RepositoryReport:
    """Fetch and normalize the open pull requests of a single repository."""
    if not repo_name:
        raise ValueError("repository name must not be empty")
    pulls = await client.list_pull_requests(owner, repo_name)
    records: list[PullRequestRecord] = []
    for pull in pulls:
        try:
            records.append(PullRequestRecord.from_api(pull))
        except MalformedPullRequestError as exc:
            raise exc.with_repo(repo_name) from exc
    logger.debug("%s/%s: %d open pull request(s)", owner, repo_name, len(records))
    return RepositoryReport(name=repo_name, pull_requests=records)


async def _fetch_result(
    client: GitHubClient, owner: str, repo_name: str
) -> RepositoryResult:
    try:
        return await fetch_repository(client, owner, repo_name)
    except httpx.HTTPStatusError as exc:
        error = f"GitHub API returned {exc.response.status_code}"
    except httpx.HTTPError as exc:
        error = f"{type(exc).__name__}: {exc}"
    except MalformedPullRequestError as exc:
        error = str(exc)
    logger.warning("Failed to fetch pull requests for %s/%s: %s", owner, repo_name, error)
    return RepositoryFailure(name=repo_name, error=error)


async def collect_reports(
    client: GitHubClient,
    org: str,
    repo_names: list[str],
    concurrency: int = DEFAULT_CONCURRENCY,
    progress: bool = True,
) -> OrgReport:
    """Fetch every repository concurrently and drain the results into one report.

    At most ``concurrency`` fetches run at once. Each fetch puts exactly one
    result on a bounded queue; a single consumer drains it until every
    fetcher has been joined, so the report is complete when returned.
    """
    if concurrency < 1:
        raise ValueError("concurrency must be at least 1")

    queue: asyncio.Queue = asyncio.Queue(maxsize=1)
    # Bounds whole fetch tasks (request plus normalization). GitHubClient caps
    # individual GETs separately, including the membership and repo listings.
    limit = asyncio.Semaphore(concurrency)
    report = OrgReport(org=org, total_repos=len(repo_names))

    async def consume() -> None:
        while True:
            item = await queue.get()
            if item is _DONE:
                return
            if isinstance(item, RepositoryFailure):
                report.failures.append(item)
            else:
                report.repositories.append(item)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=Console(stderr=True),
        transient=True,
        disable=not progress,
    ) as bar:
        task = bar.add_task(
            f"Fetching pull requests for {len(repo_names)} repos...",
            total=len(repo_names),
        )

        async def produce(name: str) -> None:
            async with limit:
                result = await _fetch_result(client, org, name)
            bar.advance(task)
            await queue.put(result)

        consumer = asyncio.create_task(consume())
        producers = [asyncio.create_task(produce(name)) for name in repo_names]
        try:
            await asyncio.gather(*producers)
        except BaseException:
            for pending in producers:
                pending.cancel()
            consumer.cancel()
            raise
        await queue.put(_DONE)
        await consumer

    return report


async def aggregate_org_report(
    client: GitHubClient,
    org: str,
    concurrency: int = DEFAULT_CONCURRENCY,
    exclude_repos: list[str] | None = None,
    progress: bool = True,
) -> OrgReport:
    """List the org's repositories and collect their open pull requests."""
    repos = await client.list_repos(org)
    names = [r["name"] for r in repos if r.get("name")]

    if exclude_repos:
        excluded = set(exclude_repos)
        names = [n for n in names if n not in excluded]

    logger.info("%s: fetching pull requests for %d repos", org, len(names))
    return await collect_reports(
        client, org, names, concurrency=concurrency, progress=progress
    )
